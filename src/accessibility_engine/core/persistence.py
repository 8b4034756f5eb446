"""
Keeps the configuration consistent between the local cache and the remote
preference record.

Lifecycle:
    defaults -> local cache (synchronous, at start) -> remote record merged
    over the current state once an identity is known.

Every committed change is written to the local cache immediately. Remote
writes are debounced and only start once the current identity has been
hydrated, so a fresh device never overwrites the remote record with defaults.
"""

import json
import threading
from enum import Enum
from typing import Callable, List, Optional

from ..utils.constants import LOCAL_CONFIG_KEY, LOCAL_ONBOARDING_KEY
from ..utils.logger import get_logger, log_exception
from .config_model import AccessibilityConfig, config_from_dict, config_to_dict
from .debounce import Debouncer
from .exceptions import RemoteLoadError, RemoteWriteError
from .mutation_engine import MutationEngine
from .ports import (
    IdentityProvider,
    LocalCache,
    RemotePreferenceStore,
    RemotePreferences,
    Scheduler,
)
from .store import ConfigStore

logger = get_logger(__name__)


class HydrationState(Enum):
    """Progress of loading the remote record for the current identity."""
    PENDING = "pending"
    FETCHING = "fetching"
    READY = "ready"


def _parse_flag(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    logger.warning(f"Ignoring malformed onboarding flag: {raw!r}")
    return None


class PersistenceCoordinator:
    """Synchronizes the store with local and remote storage."""

    def __init__(
        self,
        store: ConfigStore,
        mutations: MutationEngine,
        local_cache: LocalCache,
        scheduler: Scheduler,
        remote: Optional[RemotePreferenceStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
        debounce_seconds: float = 1.0,
        config_key: str = LOCAL_CONFIG_KEY,
        onboarding_key: str = LOCAL_ONBOARDING_KEY,
    ):
        """
        Initialize the coordinator.

        Args:
            store: Store owning the current snapshot
            mutations: Mutation engine used to merge remote snapshots
            local_cache: Synchronous device-local key-value cache
            scheduler: Timer and background execution
            remote: Remote record store (local-only when None)
            identity_provider: Source of the current identity
            debounce_seconds: Quiet period before a remote write
            config_key: Local cache key for the config JSON
            onboarding_key: Local cache key for the onboarding flag
        """
        self._store = store
        self._mutations = mutations
        self._local = local_cache
        self._scheduler = scheduler
        self._remote = remote
        self._identity_provider = identity_provider
        self._config_key = config_key
        self._onboarding_key = onboarding_key

        # Acquired after the store lock, never before it
        self._lock = threading.RLock()
        self._debouncer = Debouncer(scheduler, debounce_seconds, self._write_remote)
        self._hydrated = threading.Event()
        self._state = HydrationState.PENDING
        self._onboarding: Optional[bool] = None
        self._identity: Optional[str] = None
        self._session = 0
        self._sync_enabled = False
        self._unsubscribers: List[Callable[[], None]] = []
        self._started = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def hydration_state(self) -> HydrationState:
        return self._state

    @property
    def onboarding_completed(self) -> bool:
        """Onboarding flag; reads True while the real value is loading."""
        flag = self._onboarding
        return True if flag is None else flag

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def remote_sync_active(self) -> bool:
        """True while changes are being written to the remote record."""
        with self._lock:
            return self._sync_enabled

    @property
    def write_pending(self) -> bool:
        return self._debouncer.pending

    def start(self) -> None:
        """Seed the store from the local cache and start following identity."""
        if self._started:
            raise RuntimeError("Persistence coordinator already started")
        self._started = True

        local_flag = self._load_local()

        self._unsubscribers.append(self._store.subscribe(self._on_config_changed))
        if self._identity_provider is not None:
            self._unsubscribers.append(
                self._identity_provider.subscribe(self._on_identity_changed)
            )
            identity = self._identity_provider.current_identity()
        else:
            identity = None

        if identity and self._remote is not None:
            with self._lock:
                self._onboarding = local_flag
            self._begin_hydration(identity)
        else:
            with self._lock:
                self._identity = identity
                self._onboarding = local_flag if local_flag is not None else False
                self._mark_ready()
            logger.info("Running local-only; no identity or remote configured")

    def wait_until_hydrated(self, timeout: Optional[float] = None) -> bool:
        """Block until the current identity is hydrated; False on timeout."""
        return self._hydrated.wait(timeout)

    def set_onboarding_completed(self, completed: bool) -> None:
        """Persist the onboarding flag locally and schedule a remote write."""
        with self._lock:
            self._onboarding = bool(completed)
            self._local.set(self._onboarding_key, "true" if completed else "false")
            if self._sync_enabled:
                self._debouncer.schedule()

    def shutdown(self, flush_pending: bool = False) -> None:
        """
        Stop following the store and the identity provider.

        Args:
            flush_pending: Send a pending remote write now instead of dropping it
        """
        if flush_pending:
            if self._debouncer.flush():
                logger.info("Flushed pending remote write on shutdown")
        else:
            self._debouncer.cancel()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    # ------------------------------------------------------------------
    # Local cache
    # ------------------------------------------------------------------

    def _load_local(self) -> Optional[bool]:
        raw = self._local.get(self._config_key)
        if raw:
            try:
                data = json.loads(raw)
            except ValueError as e:
                logger.warning(f"Ignoring corrupt cached configuration: {e}")
                data = None

            if isinstance(data, dict):
                self._store.commit(config_from_dict(data, base=self._store.config))
                logger.info("Configuration restored from local cache")
            elif data is not None:
                logger.warning("Ignoring cached configuration that is not an object")

        return _parse_flag(self._local.get(self._onboarding_key))

    def _write_local(self, config: AccessibilityConfig) -> None:
        self._local.set(self._config_key, json.dumps(config_to_dict(config)))
        flag = self._onboarding
        if flag is not None:
            self._local.set(self._onboarding_key, "true" if flag else "false")

    # ------------------------------------------------------------------
    # Change and identity events
    # ------------------------------------------------------------------

    def _on_config_changed(self, config: AccessibilityConfig) -> None:
        self._write_local(config)
        with self._lock:
            if self._sync_enabled:
                self._debouncer.schedule()

    def _on_identity_changed(self, identity: Optional[str]) -> None:
        with self._store.lock, self._lock:
            if identity == self._identity:
                return
            self._debouncer.cancel()
            self._sync_enabled = False

            if not identity or self._remote is None:
                self._session += 1
                self._identity = identity
                if self._onboarding is None:
                    self._onboarding = False
                self._mark_ready()
                logger.info("Identity unavailable; continuing with local state only")
                return

        self._begin_hydration(identity)

    def _begin_hydration(self, identity: str) -> None:
        with self._store.lock, self._lock:
            self._session += 1
            token = self._session
            self._identity = identity
            self._sync_enabled = False
            self._state = HydrationState.FETCHING
            self._hydrated.clear()

        logger.info("Fetching remote preferences")
        self._scheduler.submit(self._hydrate, identity, token)

    def _hydrate(self, identity: str, token: int) -> None:
        """Fetch on a worker; the result is applied on the interaction thread."""
        try:
            preferences = self._remote.fetch(identity)
            failed = False
        except RemoteLoadError as e:
            log_exception(logger, e, "Failed to load remote preferences")
            preferences = None
            failed = True
        except Exception as e:
            log_exception(logger, e, "Failed to load remote preferences (unexpected error)")
            preferences = None
            failed = True

        self._scheduler.call_soon(self._apply_hydration, token, preferences, failed)

    def _apply_hydration(
        self,
        token: int,
        preferences: Optional[RemotePreferences],
        failed: bool,
    ) -> None:
        with self._store.lock:
            with self._lock:
                if token != self._session:
                    logger.info("Discarding remote preferences for a previous identity")
                    return

            if preferences is not None:
                self._mutations.merge(preferences.config)

            with self._lock:
                if preferences is not None:
                    flag = preferences.onboarding_completed
                    self._onboarding = flag if flag is not None else False
                elif self._onboarding is None:
                    self._onboarding = False
                self._local.set(self._onboarding_key, "true" if self._onboarding else "false")

                # Remote sync stays off for this identity session after a failed fetch
                self._sync_enabled = not failed
                self._mark_ready()

        logger.info(
            "Remote preferences unavailable; using local state"
            if failed
            else "Remote preferences hydrated"
        )

    def _mark_ready(self) -> None:
        self._state = HydrationState.READY
        self._hydrated.set()

    # ------------------------------------------------------------------
    # Remote writes
    # ------------------------------------------------------------------

    def _write_remote(self) -> None:
        with self._lock:
            identity = self._identity
            if not self._sync_enabled or not identity:
                return
            preferences = RemotePreferences(
                onboarding_completed=self.onboarding_completed,
                config=config_to_dict(self._store.config),
            )
        self._scheduler.submit(self._save_remote, identity, preferences)

    def _save_remote(self, identity: str, preferences: RemotePreferences) -> None:
        try:
            self._remote.save(identity, preferences)
        except RemoteWriteError as e:
            log_exception(logger, e, "Failed to save remote preferences")
