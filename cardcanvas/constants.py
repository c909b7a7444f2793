"""Constants and default values for CardCanvas."""

import os
import platform
from pathlib import Path

# Application metadata
APP_NAME = "CardCanvas"
VERSION = "0.4.0"
__version__ = VERSION
__license__ = "MIT"

# Environment override for the configuration directory
CONFIG_DIR_ENV = "CARDCANVAS_CONFIG_DIR"

# Viewport fitting
DEFAULT_PADDING_PX = 48
DEFAULT_MIN_FLOOR_PX = 240
MAX_SCALE = 1.0

# Animation defaults (milliseconds unless noted)
DEFAULT_ANIMATION_DURATION_MS = 1000
DEFAULT_STAGGER_DELAY_MS = 100
DEFAULT_SLIDE_OFFSET_PX = 100
BOUNCE_AMPLITUDE_PX = 30
PULSE_AMPLITUDE = 0.1
FRAME_INTERVAL_MS = 1000.0 / 60.0

# Export
DEFAULT_EXPORT_MULTIPLIER = 2

# Network
DEFAULT_API_BASE_URL = "http://localhost:3000"
BACKGROUND_ENDPOINT = "/api/uploads/background/{background_id}"
DEFAULT_REQUEST_TIMEOUT = 30
DEFAULT_FONT_LOAD_TIMEOUT = 15

# Text defaults used when a persisted field omits a presentation attribute
DEFAULT_FONT_FAMILY = "Arial"
DEFAULT_FONT_WEIGHT = "normal"
DEFAULT_FILL = "#000000"
DEFAULT_TEXT_ALIGN = "left"
FALLBACK_FONT_FAMILIES = ["Arial", "Helvetica", "DejaVu Sans"]

FONT_EXTENSIONS = (".ttf", ".otf", ".woff")


def get_user_data_dir() -> Path:
    """Get platform-specific user data directory for CardCanvas.

    Returns:
        Path to the directory where configuration, logs and caches live.
    """
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override)

    system = platform.system()
    home = Path.home()

    if system == "Windows":
        base = Path(os.getenv("APPDATA", home / "AppData" / "Roaming"))
        return base / APP_NAME
    elif system == "Darwin":  # macOS
        return home / "Library" / "Application Support" / APP_NAME
    else:  # Linux/Unix
        base = Path(os.getenv("XDG_CONFIG_HOME", home / ".config"))
        return base / APP_NAME
