"""
Canonical accessibility configuration schema.

Defines the immutable ``AccessibilityConfig`` record, the static field tables
(wire keys, enum types, numeric bounds) and the pure helpers used to clamp,
serialize and deserialize configuration snapshots.
"""

import dataclasses
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from ..utils.constants import (
    AccessibilityProfile,
    ContrastTheme,
    ColorBlindMode,
    Saturation,
    CursorColor,
    FontFamily,
    Spacing,
    ClickDelay,
    FONT_SIZE_RANGE,
    BRIGHTNESS_RANGE,
    TTS_SPEED_RANGE,
    VOLUME_RANGE,
)
from ..utils.logger import get_logger
from .exceptions import UnknownFieldError

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessibilityConfig:
    """Complete accessibility preference snapshot."""

    active_profile: AccessibilityProfile = AccessibilityProfile.NONE

    # Condition flags
    autismo: bool = False
    cego: bool = False
    baixa_visao: bool = False
    surdo: bool = False
    auditivo: bool = False
    tdah: bool = False

    # Visual
    contraste: bool = False
    grayscale: bool = False
    negative: bool = False
    underline_links: bool = False
    readable_font: bool = False
    big_cursor: bool = False
    smart_magnifier: bool = False
    highlight_links: bool = False
    highlight_headings: bool = False
    hide_images: bool = False
    blue_light_filter: bool = False

    # Motion and sensory load
    pause_animations: bool = False
    reduced_motion: bool = False
    stop_blinking: bool = False
    stop_autoplay: bool = False
    mute_sounds: bool = False
    anti_anxiety: bool = False

    # Reading and cognition
    dyslexia: bool = False
    line_focus: bool = False
    reading_mask: bool = False
    simplified: bool = False
    simple_language: bool = False
    focus_mode: bool = False
    distraction_free: bool = False
    text_align_left: bool = False
    large_tooltips: bool = False
    page_summary: bool = False
    dictionary: bool = False

    # Motor and navigation
    keyboard_focus: bool = False
    giant_buttons: bool = False
    smart_navigation: bool = False
    virtual_keyboard: bool = False
    sticky_keys: bool = False
    dwell_click: bool = False

    # Audio, speech and sign language
    screen_reader: bool = False
    voice_control: bool = False
    vlibras: bool = False
    hand_talk: bool = False
    captions: bool = False
    audio_description: bool = False
    spatial_audio: bool = False
    visual_notifications: bool = False
    adaptive_vibration: bool = False

    # Assistance
    auto_detect: bool = False

    # Enumerations
    contrast_theme: ContrastTheme = ContrastTheme.DEFAULT
    color_blindness: ColorBlindMode = ColorBlindMode.NONE
    saturation: Saturation = Saturation.NORMAL
    cursor_color: CursorColor = CursorColor.DEFAULT
    font_family: FontFamily = FontFamily.DEFAULT
    spacing: Spacing = Spacing.NORMAL
    click_delay: ClickDelay = ClickDelay.NORMAL

    # Numeric sliders
    font_size: int = 100
    brightness: int = 100
    tts_speed: float = 1.0
    volume: int = 100


@dataclass(frozen=True)
class ChoiceField:
    """Enumerated field description."""

    key: str
    enum_type: Type[Enum]

    @property
    def neutral(self) -> Enum:
        """The "default/none" member (first declared member)."""
        return next(iter(self.enum_type))


@dataclass(frozen=True)
class NumericField:
    """Bounded numeric field description."""

    key: str
    minimum: float
    maximum: float
    step: float
    integral: bool = True


PROFILE_KEY = "activeProfile"

# Field name -> wire key
TOGGLE_FIELDS: Dict[str, str] = {
    "autismo": "autismo",
    "cego": "cego",
    "baixa_visao": "baixaVisao",
    "surdo": "surdo",
    "auditivo": "auditivo",
    "tdah": "tdah",
    "contraste": "contraste",
    "grayscale": "grayscale",
    "negative": "negative",
    "underline_links": "underlineLinks",
    "readable_font": "readableFont",
    "big_cursor": "bigCursor",
    "smart_magnifier": "smartMagnifier",
    "highlight_links": "highlightLinks",
    "highlight_headings": "highlightHeadings",
    "hide_images": "hideImages",
    "blue_light_filter": "blueLightFilter",
    "pause_animations": "pauseAnimations",
    "reduced_motion": "reducedMotion",
    "stop_blinking": "stopBlinking",
    "stop_autoplay": "stopAutoplay",
    "mute_sounds": "muteSounds",
    "anti_anxiety": "antiAnxiety",
    "dyslexia": "dyslexia",
    "line_focus": "lineFocus",
    "reading_mask": "readingMask",
    "simplified": "simplified",
    "simple_language": "simpleLanguage",
    "focus_mode": "focusMode",
    "distraction_free": "distractionFree",
    "text_align_left": "textAlignLeft",
    "large_tooltips": "largeTooltips",
    "page_summary": "pageSummary",
    "dictionary": "dictionary",
    "keyboard_focus": "keyboardFocus",
    "giant_buttons": "giantButtons",
    "smart_navigation": "smartNavigation",
    "virtual_keyboard": "virtualKeyboard",
    "sticky_keys": "stickyKeys",
    "dwell_click": "dwellClick",
    "screen_reader": "screenReader",
    "voice_control": "voiceControl",
    "vlibras": "vlibras",
    "hand_talk": "handTalk",
    "captions": "captions",
    "audio_description": "audioDescription",
    "spatial_audio": "spatialAudio",
    "visual_notifications": "visualNotifications",
    "adaptive_vibration": "adaptiveVibration",
    "auto_detect": "autoDetect",
}

CHOICE_FIELDS: Dict[str, ChoiceField] = {
    "contrast_theme": ChoiceField("contrastTheme", ContrastTheme),
    "color_blindness": ChoiceField("colorBlindness", ColorBlindMode),
    "saturation": ChoiceField("saturation", Saturation),
    "cursor_color": ChoiceField("cursorColor", CursorColor),
    "font_family": ChoiceField("fontFamily", FontFamily),
    "spacing": ChoiceField("spacing", Spacing),
    "click_delay": ChoiceField("clickDelay", ClickDelay),
}

NUMERIC_FIELDS: Dict[str, NumericField] = {
    "font_size": NumericField("fontSize", *FONT_SIZE_RANGE),
    "brightness": NumericField("brightness", *BRIGHTNESS_RANGE),
    "tts_speed": NumericField("ttsSpeed", *TTS_SPEED_RANGE, integral=False),
    "volume": NumericField("volume", *VOLUME_RANGE),
}

DEFAULT_CONFIG_RECORD = AccessibilityConfig()


def field_kind(field: str) -> str:
    """
    Classify a field name.

    Returns:
        One of "profile", "toggle", "choice", "number"

    Raises:
        UnknownFieldError: If the field is not part of the schema
    """
    if field == "active_profile":
        return "profile"
    if field in TOGGLE_FIELDS:
        return "toggle"
    if field in CHOICE_FIELDS:
        return "choice"
    if field in NUMERIC_FIELDS:
        return "number"
    raise UnknownFieldError(f"Unknown accessibility field: {field!r}")


def clamp(field: str, value: float) -> float:
    """
    Clamp a numeric value into the field's documented range.

    NaN falls back to the field default. Integral fields are rounded.
    """
    spec = NUMERIC_FIELDS.get(field)
    if spec is None:
        raise UnknownFieldError(f"Not a numeric field: {field!r}")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{field} expects a number, got {type(value).__name__}")

    if math.isnan(value):
        return getattr(DEFAULT_CONFIG_RECORD, field)

    bounded = min(max(value, spec.minimum), spec.maximum)
    if spec.integral:
        return int(round(bounded))
    return float(bounded)


def is_valid(field: str, value: Any) -> bool:
    """Check whether a value is acceptable for a field without coercion."""
    kind = field_kind(field)
    if kind == "profile":
        return _coerce_enum(AccessibilityProfile, value) is not None
    if kind == "toggle":
        return isinstance(value, bool)
    if kind == "choice":
        return _coerce_enum(CHOICE_FIELDS[field].enum_type, value) is not None
    spec = NUMERIC_FIELDS[field]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return spec.minimum <= value <= spec.maximum


def _coerce_enum(enum_type: Type[Enum], value: Any) -> Optional[Enum]:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return None


def _coerce(field: str, value: Any) -> Any:
    """Coerce a stored value for a field; returns None when unusable."""
    kind = field_kind(field)
    if kind == "profile":
        return _coerce_enum(AccessibilityProfile, value)
    if kind == "toggle":
        return value if isinstance(value, bool) else None
    if kind == "choice":
        return _coerce_enum(CHOICE_FIELDS[field].enum_type, value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return clamp(field, value)


def with_changes(config: AccessibilityConfig, changes: Mapping[str, Any]) -> AccessibilityConfig:
    """
    Return a copy of ``config`` with validated field changes applied.

    Args:
        config: Base snapshot
        changes: Field name -> value (enum members or their string values)

    Raises:
        UnknownFieldError: If a field name is not in the schema
        ValueError: If a value is not valid for its field
    """
    coerced = {}
    for field, value in changes.items():
        result = _coerce(field, value)
        if result is None:
            raise ValueError(f"Invalid value for {field}: {value!r}")
        coerced[field] = result
    return dataclasses.replace(config, **coerced)


def config_to_dict(config: AccessibilityConfig) -> Dict[str, Any]:
    """Serialize a snapshot using wire keys and plain JSON types."""
    data: Dict[str, Any] = {PROFILE_KEY: config.active_profile.value}
    for field, key in TOGGLE_FIELDS.items():
        data[key] = getattr(config, field)
    for field, spec in CHOICE_FIELDS.items():
        data[spec.key] = getattr(config, field).value
    for field, spec in NUMERIC_FIELDS.items():
        data[spec.key] = getattr(config, field)
    return data


def _wire_keys() -> Dict[str, str]:
    keys = {PROFILE_KEY: "active_profile"}
    keys.update({key: field for field, key in TOGGLE_FIELDS.items()})
    keys.update({spec.key: field for field, spec in CHOICE_FIELDS.items()})
    keys.update({spec.key: field for field, spec in NUMERIC_FIELDS.items()})
    return keys


WIRE_KEYS: Dict[str, str] = _wire_keys()


def config_from_dict(
    data: Mapping[str, Any],
    base: Optional[AccessibilityConfig] = None,
) -> AccessibilityConfig:
    """
    Deserialize a (possibly stale or partial) snapshot.

    Keys present in ``data`` overwrite the matching fields of ``base``;
    unknown keys are ignored, missing keys keep the base value, and values of
    the wrong type are skipped.

    Args:
        data: Mapping keyed by wire keys
        base: Record to layer onto (defaults to DEFAULT_CONFIG_RECORD)

    Returns:
        A fully populated AccessibilityConfig
    """
    base = base or DEFAULT_CONFIG_RECORD
    changes = {}
    for key, value in data.items():
        field = WIRE_KEYS.get(key)
        if field is None:
            continue
        coerced = _coerce(field, value)
        if coerced is None:
            logger.debug(f"Ignoring invalid stored value for {key}: {value!r}")
            continue
        changes[field] = coerced
    if not changes:
        return base
    return dataclasses.replace(base, **changes)
