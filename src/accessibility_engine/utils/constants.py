"""
Constants and configuration values for the Accessibility Engine.
"""

import copy
from pathlib import Path
from enum import Enum
from typing import Dict, Any, Optional, Tuple

# Application Info
APP_NAME = "Accessibility Engine"
APP_VERSION = "1.0.0"
APP_AUTHOR = "Accessibility Engine Team"

# Paths
HOME_DIR = Path.home()
APP_DATA_DIR = HOME_DIR / ".accessibility-engine"
DATABASE_FILE = APP_DATA_DIR / "cache.sqlite"
LOG_FILE = APP_DATA_DIR / "logs" / "engine.log"


class AccessibilityProfile(str, Enum):
    """Named presets that rewrite a fixed slice of the configuration."""
    NONE = "none"
    AUTISMO = "autismo"            # Autism spectrum
    BAIXA_VISAO = "baixa_visao"    # Low vision
    VISUAL = "visual"              # Blindness
    AUDITIVO = "auditivo"          # Deaf / hard of hearing
    MOTOR = "motor"                # Motor impairment
    TDAH = "tdah"                  # ADHD
    DISLEXIA = "dislexia"          # Dyslexia
    DALTONISMO = "daltonismo"      # Color blindness
    IDOSO = "idoso"                # Senior users
    EPILEPSIA = "epilepsia"        # Photosensitive epilepsy
    COGNITIVO = "cognitivo"        # Intellectual / cognitive


class ContrastTheme(str, Enum):
    """Contrast theme options."""
    DEFAULT = "default"
    HIGH_CONTRAST_DARK = "high-contrast-dark"    # White on black
    HIGH_CONTRAST_LIGHT = "high-contrast-light"  # Black on white
    YELLOW_ON_BLACK = "yellow-on-black"
    INVERTED = "inverted"


class ColorBlindMode(str, Enum):
    """Color blindness accommodation filters."""
    NONE = "none"
    PROTANOPIA = "protanopia"       # Red-blind
    DEUTERANOPIA = "deuteranopia"   # Green-blind
    TRITANOPIA = "tritanopia"       # Blue-blind
    ACHROMATOPSIA = "achromatopsia" # No color


class Saturation(str, Enum):
    """Color saturation levels."""
    NORMAL = "normal"
    LOW = "low"
    HIGH = "high"
    MONOCHROME = "monochrome"


class CursorColor(str, Enum):
    """Pointer color options."""
    DEFAULT = "default"
    BLACK = "black"
    WHITE = "white"
    YELLOW = "yellow"


class FontFamily(str, Enum):
    """Reading font options."""
    DEFAULT = "default"
    OPENDYSLEXIC = "opendyslexic"
    ATKINSON = "atkinson"
    LEXEND = "lexend"
    ARIAL = "arial"


class Spacing(str, Enum):
    """Letter, word and line spacing presets."""
    NORMAL = "normal"
    WIDE = "wide"
    EXTRA_WIDE = "extra-wide"


class ClickDelay(str, Enum):
    """Click debounce for users with tremor."""
    NORMAL = "normal"
    SLOW = "slow"
    VERY_SLOW = "very-slow"


# Local cache keys (versioned namespace)
LOCAL_CONFIG_KEY = "accessibility_config_v6"
LOCAL_ONBOARDING_KEY = "accessibility_onboarding_v6"

# Numeric bounds: (minimum, maximum, step)
FONT_SIZE_RANGE: Tuple[float, float, float] = (70, 200, 10)
BRIGHTNESS_RANGE: Tuple[float, float, float] = (20, 100, 10)
TTS_SPEED_RANGE: Tuple[float, float, float] = (0.5, 2.0, 0.25)
VOLUME_RANGE: Tuple[float, float, float] = (0, 100, 5)

# Haptic patterns in milliseconds
TOGGLE_FEEDBACK_PATTERN: Tuple[int, ...] = (200,)
PROFILE_FEEDBACK_PATTERN: Tuple[int, ...] = (100, 50, 100)


# Default Configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    "sync": {
        "enabled": True,
        "base_url": "http://localhost:8000/api",
        "api_key": "",
        "timeout": 10,
        "debounce_seconds": 1.0,
    },
    "cache": {
        "database_path": str(DATABASE_FILE),
        "config_key": LOCAL_CONFIG_KEY,
        "onboarding_key": LOCAL_ONBOARDING_KEY,
    },
    "view": {
        "preserved_selectors": [],
    },
    "feedback": {
        "haptics_enabled": True,
    },
}


def build_settings(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build engine settings from DEFAULT_CONFIG and nested overrides.

    Args:
        overrides: Partial settings dict; sections are merged key by key

    Returns:
        A new settings dict (DEFAULT_CONFIG is never modified)
    """
    settings = copy.deepcopy(DEFAULT_CONFIG)
    for section, values in (overrides or {}).items():
        if isinstance(values, dict) and isinstance(settings.get(section), dict):
            settings[section].update(values)
        else:
            settings[section] = values
    return settings


def ensure_directories():
    """Create necessary application directories."""
    for directory in [APP_DATA_DIR, LOG_FILE.parent]:
        directory.mkdir(parents=True, exist_ok=True)
