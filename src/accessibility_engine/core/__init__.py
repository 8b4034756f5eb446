"""Core engine: configuration model, profiles, mutations and persistence."""

from .config_model import (
    AccessibilityConfig,
    DEFAULT_CONFIG_RECORD,
    config_from_dict,
    config_to_dict,
)
from .exceptions import (
    AccessibilityEngineError,
    RemoteError,
    RemoteLoadError,
    RemoteWriteError,
    UnknownFieldError,
    UnknownProfileError,
)
from .mutation_engine import MutationEngine
from .persistence import HydrationState, PersistenceCoordinator
from .profiles import ProfileCatalog, ProfileInfo
from .store import ConfigStore
from .view_projector import DocumentRoot, Projection, ViewProjector
