"""
Owned, injectable holder of the current configuration snapshot.
"""

import threading
from typing import Callable, List, Optional

from ..utils.logger import get_logger, log_exception
from .config_model import AccessibilityConfig, DEFAULT_CONFIG_RECORD

logger = get_logger(__name__)

Listener = Callable[[AccessibilityConfig], None]


class ConfigStore:
    """Holds the current snapshot and notifies subscribers on change.

    Snapshots are immutable; a change is detected by identity, so committing
    the same object twice notifies nobody.
    """

    def __init__(self, initial: Optional[AccessibilityConfig] = None):
        self._config = initial or DEFAULT_CONFIG_RECORD
        self._listeners: List[Listener] = []
        # Re-entrant so listeners may read the store while being notified
        self._lock = threading.RLock()

    @property
    def config(self) -> AccessibilityConfig:
        """Current read-only snapshot."""
        return self._config

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Called with each new snapshot, in registration order

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def commit(self, new_config: AccessibilityConfig) -> AccessibilityConfig:
        """Replace the snapshot and notify listeners if it changed."""
        with self._lock:
            if new_config is self._config:
                return new_config
            self._config = new_config
            for listener in list(self._listeners):
                try:
                    listener(new_config)
                except Exception as e:
                    log_exception(logger, e, "Config listener failed")
            return new_config

    def update(self, fn: Callable[[AccessibilityConfig], AccessibilityConfig]) -> AccessibilityConfig:
        """Apply ``fn`` to the current snapshot atomically and commit the result."""
        with self._lock:
            return self.commit(fn(self._config))
