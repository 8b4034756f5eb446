"""
The only ways to change the accessibility configuration.
"""

import dataclasses
from enum import Enum
from typing import Any, Mapping, Optional, Union

from ..utils.constants import (
    AccessibilityProfile,
    TOGGLE_FEEDBACK_PATTERN,
    PROFILE_FEEDBACK_PATTERN,
)
from ..utils.logger import get_logger
from .config_model import (
    AccessibilityConfig,
    DEFAULT_CONFIG_RECORD,
    CHOICE_FIELDS,
    NUMERIC_FIELDS,
    TOGGLE_FIELDS,
    clamp,
    config_from_dict,
    with_changes,
)
from .exceptions import UnknownFieldError
from .haptics import LoggingHapticFeedback
from .ports import HapticFeedback
from .profiles import ProfileCatalog
from .store import ConfigStore

logger = get_logger(__name__)

HAPTIC_FIELD = "adaptive_vibration"


class MutationEngine:
    """Applies toggles, setters, profile switches and resets to a store.

    Every operation is synchronous, builds a brand-new snapshot and commits
    it to the store, which fans the change out to subscribers. None of the
    operations touch ``active_profile`` except ``activate_profile`` and
    ``reset``.
    """

    def __init__(self, store: ConfigStore, haptics: Optional[HapticFeedback] = None):
        """
        Initialize the mutation engine.

        Args:
            store: Store owning the current snapshot
            haptics: Confirmation pulse sink (logs pulses if not provided)
        """
        self._store = store
        self._haptics = haptics or LoggingHapticFeedback()

    @property
    def config(self) -> AccessibilityConfig:
        return self._store.config

    def toggle(self, field: str) -> AccessibilityConfig:
        """
        Flip one boolean field.

        Enabling adaptive vibration confirms with a short pulse.
        """
        if field not in TOGGLE_FIELDS:
            raise UnknownFieldError(f"Not a toggle field: {field!r}")

        with self._store.lock:
            new_value = not getattr(self._store.config, field)
            result = self._store.update(
                lambda config: dataclasses.replace(config, **{field: new_value})
            )

        logger.debug(f"Toggled {field} -> {new_value}")
        if field == HAPTIC_FIELD and new_value:
            self._haptics.pulse(TOGGLE_FEEDBACK_PATTERN)
        return result

    def set_enum(self, field: str, value: Union[Enum, str]) -> AccessibilityConfig:
        """Set one enumerated field (enum member or its string value)."""
        spec = CHOICE_FIELDS.get(field)
        if spec is None:
            raise UnknownFieldError(f"Not an enumerated field: {field!r}")
        member = spec.enum_type(value)
        logger.debug(f"Set {field} -> {member.value}")
        return self._store.update(
            lambda config: dataclasses.replace(config, **{field: member})
        )

    def set_number(self, field: str, value: float) -> AccessibilityConfig:
        """Set one numeric field, clamped into its range."""
        if field not in NUMERIC_FIELDS:
            raise UnknownFieldError(f"Not a numeric field: {field!r}")
        bounded = clamp(field, value)
        if bounded != value:
            logger.debug(f"Clamped {field} from {value} to {bounded}")
        return self._store.update(
            lambda config: dataclasses.replace(config, **{field: bounded})
        )

    def increase_font_size(self) -> AccessibilityConfig:
        """Grow the font scale by one step, up to the maximum."""
        return self._step("font_size", 1)

    def decrease_font_size(self) -> AccessibilityConfig:
        """Shrink the font scale by one step, down to the minimum."""
        return self._step("font_size", -1)

    def _step(self, field: str, direction: int) -> AccessibilityConfig:
        step = NUMERIC_FIELDS[field].step

        def apply(config: AccessibilityConfig) -> AccessibilityConfig:
            value = clamp(field, getattr(config, field) + direction * step)
            return dataclasses.replace(config, **{field: value})

        return self._store.update(apply)

    def activate_profile(self, profile_id: Union[AccessibilityProfile, str]) -> AccessibilityConfig:
        """
        Switch to a profile, or back to defaults when it is already active.

        The new snapshot is always derived from the full default record, so
        nothing from the previous profile survives. Only an actual switch
        confirms with the patterned pulse.
        """
        profile = ProfileCatalog.parse(profile_id)

        with self._store.lock:
            if profile == self._store.config.active_profile or profile is AccessibilityProfile.NONE:
                logger.info(f"Profile {self._store.config.active_profile.value} deactivated")
                return self._store.commit(DEFAULT_CONFIG_RECORD)
            result = self._store.commit(ProfileCatalog.build(profile))

        logger.info(f"Profile activated: {profile.value}")
        self._haptics.pulse(PROFILE_FEEDBACK_PATTERN)
        return result

    def reset(self) -> AccessibilityConfig:
        """Replace the configuration with the default record."""
        logger.info("Accessibility configuration reset")
        return self._store.commit(DEFAULT_CONFIG_RECORD)

    def apply_changes(self, changes: Mapping[str, Any]) -> AccessibilityConfig:
        """Set several fields at once (field names, validated)."""
        return self._store.update(lambda config: with_changes(config, changes))

    def merge(self, snapshot: Mapping[str, Any]) -> AccessibilityConfig:
        """
        Overlay a stored snapshot (wire keys) onto the current state.

        Matching keys overwrite; absent or unknown keys leave state as is.
        """
        return self._store.update(lambda config: config_from_dict(snapshot, base=config))
