"""
Ports (interfaces) between the engine and its collaborators.

The engine core depends only on these protocols; SQLite, HTTP, Qt and timer
implementations live in adapters.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class RemotePreferences:
    """Remote preference record for one identity."""

    onboarding_completed: Optional[bool] = None
    config: Dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class LocalCache(Protocol):
    """Synchronous key-value store on the current device."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    def set(self, key: str, value: str) -> None:
        """Store a value."""


@runtime_checkable
class RemotePreferenceStore(Protocol):
    """Authenticated remote preference record."""

    def fetch(self, identity: str) -> Optional[RemotePreferences]:
        """Fetch the record; None when the identity has no record."""

    def save(self, identity: str, preferences: RemotePreferences) -> None:
        """Write the record."""


@runtime_checkable
class IdentityProvider(Protocol):
    """Source of the current opaque identity."""

    def current_identity(self) -> Optional[str]:
        """Return the identity if signed in."""

    def subscribe(self, callback: Callable[[Optional[str]], None]) -> Callable[[], None]:
        """Register for identity changes; returns an unsubscribe callable."""


@runtime_checkable
class HapticFeedback(Protocol):
    """Short confirmation pulses."""

    def pulse(self, pattern: Sequence[int]) -> None:
        """Emit a vibration pattern (milliseconds on/off)."""


@runtime_checkable
class StyleRoot(Protocol):
    """Presentation root that receives projected style state."""

    def clear_selectors(self) -> None:
        """Remove every selector from the root."""

    def add_selector(self, name: str) -> None:
        """Add one selector."""

    def set_variable(self, name: str, value: str) -> None:
        """Set one scalar style variable."""


@runtime_checkable
class Cancellable(Protocol):
    def cancel(self) -> None:
        """Cancel a scheduled callback."""


@runtime_checkable
class Scheduler(Protocol):
    """Deferred and background execution."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable:
        """Run ``callback`` after ``delay`` seconds unless cancelled."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run ``fn`` off the interaction path (fire and forget)."""

    def call_soon(self, fn: Callable[..., Any], *args: Any) -> None:
        """Run ``fn`` on the interaction thread as soon as it is free."""
