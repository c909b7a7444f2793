"""Configuration management for CardCanvas."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, List

from .constants import (
    get_user_data_dir,
    DEFAULT_PADDING_PX,
    DEFAULT_MIN_FLOOR_PX,
    DEFAULT_ANIMATION_DURATION_MS,
    DEFAULT_STAGGER_DELAY_MS,
    DEFAULT_SLIDE_OFFSET_PX,
    DEFAULT_EXPORT_MULTIPLIER,
    DEFAULT_API_BASE_URL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_FONT_LOAD_TIMEOUT,
)

logger = logging.getLogger(__name__)


DEFAULTS: Dict[str, Any] = {
    "padding": DEFAULT_PADDING_PX,
    "min_floor": DEFAULT_MIN_FLOOR_PX,
    "animation_duration_ms": DEFAULT_ANIMATION_DURATION_MS,
    "stagger_delay_ms": DEFAULT_STAGGER_DELAY_MS,
    "slide_offset_px": DEFAULT_SLIDE_OFFSET_PX,
    "export_multiplier": DEFAULT_EXPORT_MULTIPLIER,
    "api_base_url": DEFAULT_API_BASE_URL,
    "request_timeout": DEFAULT_REQUEST_TIMEOUT,
    "font_load_timeout": DEFAULT_FONT_LOAD_TIMEOUT,
    "font_dirs": [],
}


@dataclass
class EditorSettings:
    """Typed snapshot of the settings the editor engine consumes."""

    padding: float = DEFAULT_PADDING_PX
    min_floor: float = DEFAULT_MIN_FLOOR_PX
    animation_duration_ms: float = DEFAULT_ANIMATION_DURATION_MS
    stagger_delay_ms: float = DEFAULT_STAGGER_DELAY_MS
    slide_offset_px: float = DEFAULT_SLIDE_OFFSET_PX
    export_multiplier: float = DEFAULT_EXPORT_MULTIPLIER
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    font_load_timeout: float = DEFAULT_FONT_LOAD_TIMEOUT
    font_dirs: List[Path] = field(default_factory=list)


class ConfigManager:
    """Manages application configuration and persistence."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory holding config.json. Defaults to the
                platform user data directory.
        """
        self.config_dir = Path(config_dir) if config_dir else get_user_data_dir()
        self.config_path = self.config_dir / "config.json"
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                return json.loads(self.config_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                return {}
        return {}

    def save(self) -> None:
        """Save current configuration to disk."""
        self.config_path.write_text(
            json.dumps(self.config, indent=2),
            encoding="utf-8"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value, falling back to the built-in default."""
        if key in self.config:
            return self.config[key]
        if default is None:
            return DEFAULTS.get(key)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self.config[key] = value

    def get_cache_dir(self) -> Path:
        """Get directory for downloaded assets and fonts."""
        cache_dir = self.config_dir / "cache"
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir

    def get_font_cache_dir(self) -> Path:
        """Get directory where downloaded custom fonts are stored."""
        font_dir = self.get_cache_dir() / "fonts"
        font_dir.mkdir(parents=True, exist_ok=True)
        return font_dir

    def editor_settings(self) -> EditorSettings:
        """Build an EditorSettings snapshot from the stored values."""
        return EditorSettings(
            padding=float(self.get("padding")),
            min_floor=float(self.get("min_floor")),
            animation_duration_ms=float(self.get("animation_duration_ms")),
            stagger_delay_ms=float(self.get("stagger_delay_ms")),
            slide_offset_px=float(self.get("slide_offset_px")),
            export_multiplier=float(self.get("export_multiplier")),
            api_base_url=str(self.get("api_base_url")).rstrip("/"),
            request_timeout=float(self.get("request_timeout")),
            font_load_timeout=float(self.get("font_load_timeout")),
            font_dirs=[Path(p).expanduser() for p in self.get("font_dirs") or []],
        )
