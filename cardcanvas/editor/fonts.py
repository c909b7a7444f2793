"""
Font management for the card editor.

Handles font discovery from system directories and custom font paths,
builds a family manifest, downloads template fonts, and provides font
loading for rendering.
"""

import json
import platform
import re
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests
from PIL import ImageFont

from .errors import AssetLoadError
from .models import CustomFont
from ..constants import FONT_EXTENSIONS, DEFAULT_REQUEST_TIMEOUT, get_user_data_dir

logger = logging.getLogger(__name__)

CSS_URL_PATTERN = re.compile(r"url\(\s*['\"]?([^'\")]+)['\"]?\s*\)")


class FontManager:
    """
    Manages font discovery and loading.

    Discovers fonts from:
    - System font directories (platform-specific)
    - Custom font directories from config
    - Fonts downloaded for a template (``load_custom_fonts``)
    """

    def __init__(
        self,
        manifest_path: Optional[Path] = None,
        custom_dirs: Optional[List[Path]] = None,
        cache_dir: Optional[Path] = None,
        auto_discover: bool = True,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """
        Initialize the font manager.

        Args:
            manifest_path: Path to fonts_manifest.json (if exists)
            custom_dirs: Additional directories to scan for fonts
            cache_dir: Where downloaded template fonts are stored (default:
                the font cache under the user data directory)
            auto_discover: Scan font directories when no manifest is given
            request_timeout: Timeout in seconds for font downloads
        """
        self.manifest_path = manifest_path
        self.custom_dirs = custom_dirs or []
        self.cache_dir = Path(cache_dir) if cache_dir else get_user_data_dir() / "cache" / "fonts"
        self.request_timeout = request_timeout
        self._manifest: Dict[str, Dict] = {}
        self._font_cache: Dict[str, Path] = {}  # lower-case family -> file
        self._executor: Optional[ThreadPoolExecutor] = None
        # Template fonts register from the worker thread while renders read
        self._lock = threading.RLock()

        if manifest_path and manifest_path.exists():
            try:
                self._manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
                logger.info(f"Loaded font manifest from {manifest_path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load font manifest: {e}")
        elif auto_discover:
            self.discover_fonts()

    def discover_fonts(self) -> None:
        """Discover fonts from system directories and custom paths."""
        logger.info("Starting font discovery...")

        font_dirs = self._get_system_font_dirs()
        font_dirs.extend(self.custom_dirs)

        discovered = 0
        for font_dir in font_dirs:
            if not font_dir.exists():
                continue

            logger.debug(f"Scanning font directory: {font_dir}")

            for ext in ["*.ttf", "*.otf", "*.TTF", "*.OTF"]:
                for font_file in font_dir.rglob(ext):
                    if self._add_font_to_manifest(font_file):
                        discovered += 1

        logger.info(f"Font discovery complete. Found {discovered} fonts across {len(self._manifest)} families.")

    def _get_system_font_dirs(self) -> List[Path]:
        """Get platform-specific system font directories."""
        system = platform.system()

        if system == "Windows":
            return [
                Path("C:/Windows/Fonts"),
                Path.home() / "AppData/Local/Microsoft/Windows/Fonts"
            ]
        elif system == "Darwin":  # macOS
            return [
                Path("/System/Library/Fonts"),
                Path("/Library/Fonts"),
                Path.home() / "Library/Fonts"
            ]
        else:  # Linux and others
            return [
                Path("/usr/share/fonts"),
                Path("/usr/local/share/fonts"),
                Path.home() / ".fonts",
                Path.home() / ".local/share/fonts"
            ]

    def _add_font_to_manifest(self, font_path: Path, family_name: Optional[str] = None) -> bool:
        """
        Add a font file to the manifest.

        The family name defaults to the file stem before the first dash
        (FamilyName-Weight.ttf).
        """
        try:
            ImageFont.truetype(str(font_path), size=12)
        except OSError as e:
            logger.debug(f"Skipping font {font_path}: {e}")
            return False

        if family_name is None:
            family_name = font_path.stem.split("-")[0] or font_path.stem

        with self._lock:
            entry = self._manifest.setdefault(family_name, {"family": family_name, "files": []})
            if str(font_path) not in entry["files"]:
                entry["files"].append(str(font_path))
            self._font_cache[family_name.lower()] = font_path
        return True

    def register_font_file(self, family: str, path: Path) -> bool:
        """Register a font file under an explicit family name."""
        registered = self._add_font_to_manifest(Path(path), family_name=family)
        if registered:
            logger.info(f"Registered font '{family}' from {path}")
        return registered

    def save_manifest(self, path: Path) -> None:
        """Save the current font manifest to a JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            manifest = json.dumps(self._manifest, indent=2)
        path.write_text(manifest, encoding="utf-8")
        logger.info(f"Saved font manifest to {path}")

    def select_font_file(self, families: List[str]) -> Optional[Path]:
        """
        Select a font file from the manifest based on family priority.

        Args:
            families: Priority-ordered list of font family names

        Returns:
            Path to the font file, or None if no match found
        """
        with self._lock:
            manifest = {name: list(entry.get("files", [])) for name, entry in self._manifest.items()}
            font_cache = dict(self._font_cache)

        for family in families:
            files = manifest.get(family)
            if files:
                return Path(files[0])

            family_lower = family.lower()
            if family_lower in font_cache:
                return font_cache[family_lower]

            # Fuzzy match ("Open Sans" vs "OpenSans")
            compact = family_lower.replace(" ", "")
            for manifest_family, files in manifest.items():
                candidate = manifest_family.lower().replace(" ", "")
                if compact and (compact in candidate or candidate in compact):
                    if files:
                        return Path(files[0])

        return None

    def pil_font(self, families: List[str], size_px: int) -> ImageFont.FreeTypeFont:
        """
        Load a PIL ImageFont based on family and size.

        Falls back to Pillow's bundled default font if no family matches.
        """
        size_px = max(1, int(round(size_px)))
        font_path = self.select_font_file(families)

        if font_path and font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size_px)
            except OSError as e:
                logger.warning(f"Failed to load font {font_path}: {e}")

        logger.debug(f"Using default font for families {families}")
        return ImageFont.load_default(size=size_px)

    def get_available_families(self) -> List[str]:
        """Get a list of all available font families."""
        with self._lock:
            return sorted(self._manifest.keys())

    # Template fonts

    def _fetch(self, url: str) -> requests.Response:
        response = requests.get(url, timeout=self.request_timeout)
        response.raise_for_status()
        return response

    def _font_file_url(self, font: CustomFont) -> str:
        """Follow a stylesheet link to its first usable font source."""
        if urlparse(font.url).path.lower().endswith(FONT_EXTENSIONS):
            return font.url

        css = self._fetch(font.url).text
        for source in CSS_URL_PATTERN.findall(css):
            if urlparse(source).path.lower().endswith(FONT_EXTENSIONS):
                return urljoin(font.url, source)
        raise AssetLoadError(f"No usable font source in stylesheet {font.url}")

    def download_font(self, font: CustomFont) -> Path:
        """
        Download one template font into the cache and register it.

        Raises:
            AssetLoadError: if the font cannot be fetched or registered
        """
        try:
            file_url = self._font_file_url(font)
            suffix = Path(urlparse(file_url).path).suffix.lower() or ".ttf"
            slug = re.sub(r"\s+", "-", font.name).lower()
            target = self.cache_dir / f"font-{slug}{suffix}"
            if not target.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(self._fetch(file_url).content)
        except (requests.RequestException, OSError) as e:
            raise AssetLoadError(f"Failed to download font {font.name}: {e}") from e

        if not self.register_font_file(font.name, target):
            raise AssetLoadError(f"Downloaded file for font {font.name} is not a usable font")
        return target

    def _load_all(self, fonts: List[CustomFont]) -> List[str]:
        loaded = []
        for font in fonts:
            with self._lock:
                cached = font.name.lower() in self._font_cache
            if cached:
                loaded.append(font.name)
                continue
            try:
                self.download_font(font)
                loaded.append(font.name)
            except AssetLoadError as e:
                logger.warning(str(e))
        logger.info(f"Custom fonts ready: {loaded}")
        return loaded

    def load_custom_fonts(self, fonts: List[CustomFont]) -> Future:
        """
        Load template fonts on a worker thread.

        Returns:
            Future resolving to the list of family names that loaded.
            Fonts that fail are logged and skipped.
        """
        if not fonts:
            done: Future = Future()
            done.set_result([])
            return done

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fonts")
        return self._executor.submit(self._load_all, list(fonts))

    def shutdown(self) -> None:
        """Stop the font download worker."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
