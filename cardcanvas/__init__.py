"""Core functionality for CardCanvas."""

from .config import ConfigManager, EditorSettings
from .constants import (
    APP_NAME,
    VERSION,
    __version__,
    __license__,
)

__all__ = [
    "ConfigManager",
    "EditorSettings",
    "APP_NAME",
    "VERSION",
    "__version__",
    "__license__",
]
