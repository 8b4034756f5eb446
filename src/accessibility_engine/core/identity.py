"""
In-process identity provider.

Authentication itself lives outside the engine; the host signs an opaque
identity in and out and the engine reacts to the transitions.
"""

import threading
from typing import Callable, List, Optional

from ..utils.logger import get_logger, log_exception

logger = get_logger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class SessionIdentityProvider:
    """Holds the current identity and notifies on change."""

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity
        self._listeners: List[IdentityListener] = []
        self._lock = threading.Lock()

    def current_identity(self) -> Optional[str]:
        return self._identity

    def subscribe(self, callback: IdentityListener) -> Callable[[], None]:
        """Register for identity changes; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def sign_in(self, identity: str) -> None:
        if not identity:
            raise ValueError("Identity must be a non-empty string")
        self._set(identity)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, identity: Optional[str]) -> None:
        with self._lock:
            if identity == self._identity:
                return
            self._identity = identity
            listeners = list(self._listeners)

        logger.info("Identity signed in" if identity else "Identity signed out")
        for listener in listeners:
            try:
                listener(identity)
            except Exception as e:
                log_exception(logger, e, "Identity listener failed")
