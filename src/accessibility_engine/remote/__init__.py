"""Remote preference storage."""

from .client import RemotePreferenceClient
