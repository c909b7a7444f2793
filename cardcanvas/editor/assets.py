"""
Background asset loading.

Backgrounds live on an external object-storage/CDN service. Failures are
reported as ``AssetLoadError``; retrying is the caller's business.
"""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from .errors import AssetLoadError
from ..config import EditorSettings
from ..constants import BACKGROUND_ENDPOINT

logger = logging.getLogger(__name__)


class AssetLoader:
    """Resolves and fetches background images."""

    def __init__(self, settings: Optional[EditorSettings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or EditorSettings()
        self.http = session or requests.Session()

    def resolve_background_url(self, image_url: Optional[str], background_id: Optional[int]) -> str:
        """
        Resolve the background URL from a direct URL or an uploaded background id.

        Raises:
            AssetLoadError: if neither resolves
        """
        if image_url:
            return image_url

        if background_id:
            endpoint = self.settings.api_base_url + BACKGROUND_ENDPOINT.format(background_id=background_id)
            logger.debug(f"Resolving background {background_id} via {endpoint}")
            try:
                response = self.http.get(endpoint, timeout=self.settings.request_timeout)
                response.raise_for_status()
                return response.json()["data"]["cloudinary_url"]
            except requests.RequestException as e:
                raise AssetLoadError(f"Background {background_id} lookup failed: {e}") from e
            except (ValueError, KeyError, TypeError) as e:
                raise AssetLoadError(f"Background {background_id} lookup returned an unexpected payload") from e

        raise AssetLoadError(f"No imageUrl or backgroundId provided. imageUrl={image_url}, backgroundId={background_id}")

    def load_bytes(self, source: str) -> bytes:
        """Fetch raw bytes from an http(s) URL, a data: URL or a local path."""
        if source.startswith(("http://", "https://")):
            try:
                response = self.http.get(source, timeout=self.settings.request_timeout)
                response.raise_for_status()
                return response.content
            except requests.RequestException as e:
                raise AssetLoadError(f"Failed to download {source}: {e}") from e

        if source.startswith("data:"):
            try:
                _, encoded = source.split(",", 1)
                return base64.b64decode(encoded)
            except (ValueError, binascii.Error) as e:
                raise AssetLoadError("Malformed data URL") from e

        path = Path(source).expanduser()
        if not path.is_file():
            raise AssetLoadError(f"Background file not found: {source}")
        try:
            return path.read_bytes()
        except OSError as e:
            raise AssetLoadError(f"Could not read background file {source}: {e}") from e

    def load_image(self, source: str) -> Image.Image:
        """
        Load and decode an image.

        Raises:
            AssetLoadError: if the image cannot be fetched or decoded
        """
        data = self.load_bytes(source)
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise AssetLoadError(f"Could not decode image from {source[:70]}: {e}") from e
        logger.info(f"Loaded background {source[:70]} ({image.width}x{image.height})")
        return image
