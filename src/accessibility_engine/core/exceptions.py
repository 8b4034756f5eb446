"""
Exception types raised by the Accessibility Engine.

Remote errors are caught and logged by the persistence layer and never reach
consumers. Unknown field and profile errors are programming errors and are
raised immediately.
"""

from typing import Optional


class AccessibilityEngineError(Exception):
    """Base class for engine errors."""


class RemoteError(AccessibilityEngineError):
    """A remote preference request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteLoadError(RemoteError):
    """Fetching the remote preference record failed."""


class RemoteWriteError(RemoteError):
    """Writing the remote preference record failed."""


class UnknownFieldError(AccessibilityEngineError, ValueError):
    """A field name is not part of the schema or has the wrong kind."""


class UnknownProfileError(AccessibilityEngineError, ValueError):
    """A profile identifier is not in the catalog."""
