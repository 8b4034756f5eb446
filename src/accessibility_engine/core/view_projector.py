"""
Projection of the configuration onto presentation-layer style state.

The projector always clears the root and rebuilds every selector from the
snapshot. This makes rendering idempotent, at the cost of erasing selectors
that unrelated code put on the same root; selectors that must survive are
passed as ``preserved_selectors`` and re-added on every render.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set

from ..utils.constants import AccessibilityProfile
from ..utils.logger import get_logger
from .config_model import AccessibilityConfig, CHOICE_FIELDS, TOGGLE_FIELDS
from .ports import StyleRoot

logger = get_logger(__name__)


# Toggle field -> selector
TOGGLE_SELECTORS: Dict[str, str] = {
    name: f"acc-{key}" for name, key in TOGGLE_FIELDS.items()
}

# Enumerated field -> selector namespace (value is appended)
CHOICE_SELECTOR_NAMESPACES: Dict[str, str] = {
    "contrast_theme": "acc-contrast-",
    "color_blindness": "acc-colorblind-",
    "saturation": "acc-saturation-",
    "cursor_color": "acc-cursor-",
    "font_family": "acc-font-",
    "spacing": "acc-spacing-",
    "click_delay": "acc-click-delay-",
}

PROFILE_SELECTOR_NAMESPACE = "acc-profile-"

FONT_SIZE_VARIABLE = "font-size"
BRIGHTNESS_VARIABLE = "--acc-brightness"
DIM_OPACITY_VARIABLE = "--acc-dim-opacity"


@dataclass(frozen=True)
class Projection:
    """Complete style state for one snapshot."""

    selectors: FrozenSet[str] = frozenset()
    variables: Mapping[str, str] = field(default_factory=dict)


class DocumentRoot:
    """In-memory style root (class list plus inline style variables)."""

    def __init__(self, selectors: Iterable[str] = ()):
        self.selectors: Set[str] = set(selectors)
        self.variables: Dict[str, str] = {}

    def clear_selectors(self) -> None:
        self.selectors.clear()

    def add_selector(self, name: str) -> None:
        self.selectors.add(name)

    def set_variable(self, name: str, value: str) -> None:
        self.variables[name] = value

    @property
    def class_name(self) -> str:
        """Space-separated class attribute, sorted for stable output."""
        return " ".join(sorted(self.selectors))


class ViewProjector:
    """Derives and renders style state from configuration snapshots."""

    def __init__(
        self,
        root: Optional[StyleRoot] = None,
        preserved_selectors: Iterable[str] = (),
    ):
        """
        Initialize the projector.

        Args:
            root: Target to render into (``render`` is a no-op without one)
            preserved_selectors: Selectors re-added after every clear
        """
        self._root = root
        self._preserved = frozenset(preserved_selectors)
        self._last: Optional[Projection] = None

    @property
    def root(self) -> Optional[StyleRoot]:
        return self._root

    @property
    def last_projection(self) -> Optional[Projection]:
        return self._last

    @staticmethod
    def project(config: AccessibilityConfig) -> Projection:
        """Compute the full selector set and style variables for a snapshot."""
        selectors = set()

        for name, selector in TOGGLE_SELECTORS.items():
            if getattr(config, name):
                selectors.add(selector)

        for name, namespace in CHOICE_SELECTOR_NAMESPACES.items():
            value = getattr(config, name)
            if value != CHOICE_FIELDS[name].neutral:
                selectors.add(f"{namespace}{value.value}")

        if config.active_profile is not AccessibilityProfile.NONE:
            selectors.add(f"{PROFILE_SELECTOR_NAMESPACE}{config.active_profile.value}")

        variables = {
            FONT_SIZE_VARIABLE: f"{config.font_size}%",
            BRIGHTNESS_VARIABLE: f"{config.brightness}%",
            DIM_OPACITY_VARIABLE: f"{(100 - config.brightness) / 100:.2f}",
        }
        return Projection(frozenset(selectors), MappingProxyType(variables))

    def render(self, config: AccessibilityConfig) -> Projection:
        """Clear the root and rebuild it from ``config``."""
        projection = self.project(config)
        self._last = projection

        if self._root is not None:
            self._root.clear_selectors()
            for selector in sorted(self._preserved | projection.selectors):
                self._root.add_selector(selector)
            for name, value in projection.variables.items():
                self._root.set_variable(name, value)
            logger.debug(f"Rendered {len(projection.selectors)} accessibility selectors")

        return projection

    __call__ = render
