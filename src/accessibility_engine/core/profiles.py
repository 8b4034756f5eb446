"""
Profile catalog: the fixed table of preset overrides.

Each profile is layered onto the complete default record, never onto the
previous state, so nothing from an earlier profile survives a switch.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Mapping

from ..utils.constants import (
    AccessibilityProfile,
    ContrastTheme,
    ColorBlindMode,
    Saturation,
    CursorColor,
    FontFamily,
    Spacing,
    ClickDelay,
)
from .config_model import AccessibilityConfig, DEFAULT_CONFIG_RECORD, with_changes
from .exceptions import UnknownProfileError


@dataclass(frozen=True)
class ProfileInfo:
    """Menu metadata for a profile."""

    profile: AccessibilityProfile
    label: str
    description: str


_OVERRIDES: Dict[AccessibilityProfile, Dict[str, Any]] = {
    AccessibilityProfile.AUTISMO: {
        "autismo": True,
        "simplified": True,
        "anti_anxiety": True,
        "pause_animations": True,
        "reduced_motion": True,
        "stop_autoplay": True,
        "saturation": Saturation.LOW,
        "visual_notifications": False,
    },
    AccessibilityProfile.BAIXA_VISAO: {
        "baixa_visao": True,
        "font_size": 150,
        "contrast_theme": ContrastTheme.HIGH_CONTRAST_DARK,
        "big_cursor": True,
        "cursor_color": CursorColor.YELLOW,
        "smart_magnifier": True,
        "highlight_links": True,
    },
    AccessibilityProfile.VISUAL: {
        "cego": True,
        "screen_reader": True,
        "voice_control": True,
        "adaptive_vibration": True,
        "audio_description": True,
        "keyboard_focus": True,
    },
    AccessibilityProfile.AUDITIVO: {
        "surdo": True,
        "auditivo": True,
        "vlibras": True,
        "captions": True,
        "visual_notifications": True,
    },
    AccessibilityProfile.MOTOR: {
        "giant_buttons": True,
        "keyboard_focus": True,
        "simplified": True,
        "sticky_keys": True,
        "click_delay": ClickDelay.SLOW,
    },
    AccessibilityProfile.TDAH: {
        "tdah": True,
        "focus_mode": True,
        "distraction_free": True,
        "pause_animations": True,
        "line_focus": False,
    },
    AccessibilityProfile.DISLEXIA: {
        "dyslexia": True,
        "readable_font": True,
        "line_focus": True,
        "spacing": Spacing.WIDE,
        "font_family": FontFamily.OPENDYSLEXIC,
        "contrast_theme": ContrastTheme.HIGH_CONTRAST_LIGHT,
    },
    AccessibilityProfile.DALTONISMO: {
        "color_blindness": ColorBlindMode.DEUTERANOPIA,
        "underline_links": True,
        "highlight_links": True,
    },
    AccessibilityProfile.IDOSO: {
        "font_size": 130,
        "giant_buttons": True,
        "big_cursor": True,
        "large_tooltips": True,
        "simplified": True,
        "click_delay": ClickDelay.SLOW,
        "tts_speed": 0.75,
        "font_family": FontFamily.ATKINSON,
    },
    AccessibilityProfile.EPILEPSIA: {
        "stop_blinking": True,
        "pause_animations": True,
        "reduced_motion": True,
        "stop_autoplay": True,
        "saturation": Saturation.LOW,
        "brightness": 80,
    },
    AccessibilityProfile.COGNITIVO: {
        "simplified": True,
        "simple_language": True,
        "page_summary": True,
        "dictionary": True,
        "text_align_left": True,
        "tts_speed": 0.75,
        "font_family": FontFamily.LEXEND,
    },
}

_INFO: Dict[AccessibilityProfile, ProfileInfo] = {
    info.profile: info
    for info in (
        ProfileInfo(AccessibilityProfile.AUTISMO, "Autism", "Soft colors, no motion, fewer surprises"),
        ProfileInfo(AccessibilityProfile.BAIXA_VISAO, "Low vision", "Large text, white on black, large pointer and magnifier"),
        ProfileInfo(AccessibilityProfile.VISUAL, "Blindness", "Screen reader, voice control and audio description"),
        ProfileInfo(AccessibilityProfile.AUDITIVO, "Deaf / hard of hearing", "Sign language, captions and visual alerts"),
        ProfileInfo(AccessibilityProfile.MOTOR, "Motor", "Large targets, keyboard focus and slower clicks"),
        ProfileInfo(AccessibilityProfile.TDAH, "ADHD", "Focus mode without distractions or animations"),
        ProfileInfo(AccessibilityProfile.DISLEXIA, "Dyslexia", "Dyslexia font, wide spacing and reading guide"),
        ProfileInfo(AccessibilityProfile.DALTONISMO, "Color blindness", "Color filter and underlined links"),
        ProfileInfo(AccessibilityProfile.IDOSO, "Senior", "Larger text and targets with a slower pace"),
        ProfileInfo(AccessibilityProfile.EPILEPSIA, "Epilepsy safe", "No blinking, flashing or autoplay, dimmed colors"),
        ProfileInfo(AccessibilityProfile.COGNITIVO, "Cognitive", "Simple language, summaries and dictionary"),
    )
}


def _check_exhaustive() -> None:
    presets = {p for p in AccessibilityProfile if p is not AccessibilityProfile.NONE}
    missing = presets - set(_OVERRIDES)
    if missing or presets - set(_INFO):
        raise RuntimeError(f"Profile catalog is missing entries: {sorted(p.value for p in missing)}")
    # Validate every override against the schema once at import
    for overrides in _OVERRIDES.values():
        with_changes(DEFAULT_CONFIG_RECORD, overrides)


_check_exhaustive()


class ProfileCatalog:
    """Static lookup of profile presets."""

    @staticmethod
    def parse(profile_id) -> AccessibilityProfile:
        """
        Normalize a profile identifier.

        Raises:
            UnknownProfileError: If the identifier is not in the catalog
        """
        try:
            return AccessibilityProfile(profile_id)
        except ValueError:
            raise UnknownProfileError(f"Unknown accessibility profile: {profile_id!r}") from None

    @staticmethod
    def resolve(profile_id) -> Mapping[str, Any]:
        """
        Get the field overrides implied by a profile.

        Args:
            profile_id: AccessibilityProfile or its string value

        Returns:
            Read-only mapping of field name -> value (empty for ``none``)

        Raises:
            UnknownProfileError: If the identifier is not in the catalog
        """
        profile = ProfileCatalog.parse(profile_id)
        return MappingProxyType(_OVERRIDES.get(profile, {}))

    @staticmethod
    def build(profile_id) -> AccessibilityConfig:
        """Build ``defaults + resolve(profile_id)`` labelled with the profile."""
        profile = ProfileCatalog.parse(profile_id)
        overrides = dict(ProfileCatalog.resolve(profile))
        overrides["active_profile"] = profile
        return with_changes(DEFAULT_CONFIG_RECORD, overrides)

    @staticmethod
    def list_profiles() -> List[ProfileInfo]:
        """Get menu metadata for every preset, in declaration order."""
        return [_INFO[p] for p in AccessibilityProfile if p in _INFO]
