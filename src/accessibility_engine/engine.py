"""
Engine facade: wires the store, mutation engine, persistence coordinator and
view projector together behind one object for consumers.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from .core.config_model import AccessibilityConfig
from .core.haptics import LoggingHapticFeedback
from .core.identity import SessionIdentityProvider
from .core.mutation_engine import MutationEngine
from .core.persistence import HydrationState, PersistenceCoordinator
from .core.ports import (
    HapticFeedback,
    IdentityProvider,
    LocalCache,
    RemotePreferenceStore,
    Scheduler,
    StyleRoot,
)
from .core.profiles import ProfileCatalog, ProfileInfo
from .core.scheduling import ThreadScheduler
from .core.store import ConfigStore
from .core.view_projector import Projection, ViewProjector
from .utils.constants import AccessibilityProfile, build_settings
from .utils.logger import get_logger

logger = get_logger(__name__)


class AccessibilityEngine:
    """Single entry point for reading and changing accessibility preferences.

    Example:
        engine = build_engine(root=DocumentRoot())
        engine.start()
        engine.activate_profile("dislexia")
        engine.increase_font_size()
        engine.shutdown(flush_pending=True)
    """

    def __init__(
        self,
        local_cache: LocalCache,
        scheduler: Scheduler,
        remote: Optional[RemotePreferenceStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
        root: Optional[StyleRoot] = None,
        haptics: Optional[HapticFeedback] = None,
        debounce_seconds: float = 1.0,
        preserved_selectors: Iterable[str] = (),
        config_key: Optional[str] = None,
        onboarding_key: Optional[str] = None,
    ):
        self.store = ConfigStore()
        self.mutations = MutationEngine(self.store, haptics)
        self.projector = ViewProjector(root, preserved_selectors)

        keys: Dict[str, str] = {}
        if config_key:
            keys["config_key"] = config_key
        if onboarding_key:
            keys["onboarding_key"] = onboarding_key

        self.persistence = PersistenceCoordinator(
            self.store,
            self.mutations,
            local_cache,
            scheduler,
            remote=remote,
            identity_provider=identity_provider,
            debounce_seconds=debounce_seconds,
            **keys,
        )
        self.scheduler = scheduler
        self.local_cache = local_cache
        self._unsubscribe_view: Optional[Callable[[], None]] = None

    # Lifecycle

    def start(self) -> None:
        """Load cached state, render it and begin synchronizing."""
        if self._unsubscribe_view is not None:
            raise RuntimeError("Accessibility engine already started")

        # The view listens before any load so no commit can slip past it
        with self.store.lock:
            self._unsubscribe_view = self.store.subscribe(self.projector.render)
            self.projector.render(self.store.config)
        self.persistence.start()
        logger.info("Accessibility engine started")

    def wait_until_hydrated(self, timeout: Optional[float] = None) -> bool:
        return self.persistence.wait_until_hydrated(timeout)

    def shutdown(self, flush_pending: bool = False) -> None:
        """Stop synchronizing; optionally send a pending remote write first."""
        self.persistence.shutdown(flush_pending=flush_pending)
        if self._unsubscribe_view is not None:
            self._unsubscribe_view()
            self._unsubscribe_view = None
        logger.info("Accessibility engine stopped")

    # Reads

    @property
    def config(self) -> AccessibilityConfig:
        return self.store.config

    @property
    def onboarding_completed(self) -> bool:
        return self.persistence.onboarding_completed

    @property
    def hydration_state(self) -> HydrationState:
        return self.persistence.hydration_state

    @property
    def projection(self) -> Projection:
        """Style state for the current snapshot."""
        return self.projector.project(self.store.config)

    @staticmethod
    def list_profiles() -> List[ProfileInfo]:
        return ProfileCatalog.list_profiles()

    def subscribe(self, listener: Callable[[AccessibilityConfig], None]) -> Callable[[], None]:
        return self.store.subscribe(listener)

    # Mutations

    def toggle(self, field: str) -> AccessibilityConfig:
        return self.mutations.toggle(field)

    def set_enum(self, field: str, value: Union[Enum, str]) -> AccessibilityConfig:
        return self.mutations.set_enum(field, value)

    def set_number(self, field: str, value: float) -> AccessibilityConfig:
        return self.mutations.set_number(field, value)

    def increase_font_size(self) -> AccessibilityConfig:
        return self.mutations.increase_font_size()

    def decrease_font_size(self) -> AccessibilityConfig:
        return self.mutations.decrease_font_size()

    def activate_profile(self, profile_id: Union[AccessibilityProfile, str]) -> AccessibilityConfig:
        return self.mutations.activate_profile(profile_id)

    def reset(self) -> AccessibilityConfig:
        return self.mutations.reset()

    def set_onboarding_completed(self, completed: bool = True) -> None:
        self.persistence.set_onboarding_completed(completed)


def build_engine(
    settings: Optional[Dict[str, Any]] = None,
    root: Optional[StyleRoot] = None,
    scheduler: Optional[Scheduler] = None,
    identity_provider: Optional[IdentityProvider] = None,
    local_cache: Optional[LocalCache] = None,
    remote: Optional[RemotePreferenceStore] = None,
    haptics: Optional[HapticFeedback] = None,
) -> AccessibilityEngine:
    """
    Build an engine from settings, creating default adapters where needed.

    Args:
        settings: Partial settings merged over DEFAULT_CONFIG
        root: Style root to render into
        scheduler: Scheduler (ThreadScheduler if not provided)
        identity_provider: Identity source (empty session if not provided)
        local_cache: Local cache (SQLite at the configured path if not provided)
        remote: Remote store (HTTP client if sync is enabled)
        haptics: Pulse sink (logging adapter if not provided)

    Returns:
        An engine that has not been started yet
    """
    settings = build_settings(settings)
    sync = settings["sync"]
    cache = settings["cache"]

    if local_cache is None:
        from .database.local_cache import SQLiteLocalCache
        local_cache = SQLiteLocalCache(Path(cache["database_path"]))

    if remote is None and sync["enabled"] and sync["base_url"]:
        from .remote.client import RemotePreferenceClient
        remote = RemotePreferenceClient(
            sync["base_url"],
            api_key=sync["api_key"],
            timeout=sync["timeout"],
        )

    return AccessibilityEngine(
        local_cache=local_cache,
        scheduler=scheduler or ThreadScheduler(),
        remote=remote,
        identity_provider=identity_provider or SessionIdentityProvider(),
        root=root,
        haptics=haptics or LoggingHapticFeedback(settings["feedback"]["haptics_enabled"]),
        debounce_seconds=sync["debounce_seconds"],
        preserved_selectors=settings["view"]["preserved_selectors"],
        config_key=cache["config_key"],
        onboarding_key=cache["onboarding_key"],
    )
