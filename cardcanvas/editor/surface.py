"""
Rendering backend interfaces for the card editor.

The projector and the animation driver only talk to these capability
interfaces, so the concrete backend (Pillow raster, Qt scene, ...) can
be swapped without touching geometry logic.
"""

import base64
import io
from abc import ABC, abstractmethod
from typing import Optional

from PIL import Image

from .models import TextField, TextState


class RenderableText(ABC):
    """A live text object on a drawing surface."""

    def __init__(self, field_id: str, locked: bool = False):
        self.field_id = field_id
        self.locked = locked

    @abstractmethod
    def set_position(self, left: float, top: float) -> None:
        pass

    @abstractmethod
    def set_size(self, font_size: float, width: Optional[float]) -> None:
        pass

    @abstractmethod
    def set_rotation(self, angle: float) -> None:
        pass

    @abstractmethod
    def set_opacity(self, opacity: float) -> None:
        pass

    @abstractmethod
    def set_text(self, text: str) -> None:
        pass

    @abstractmethod
    def set_scale(self, scale_x: float, scale_y: float) -> None:
        pass

    @abstractmethod
    def snapshot(self) -> TextState:
        """Return a copy of the current visual state."""
        pass

    @property
    def text(self) -> str:
        return self.snapshot().text


class DrawingSurface(ABC):
    """A resizable surface holding a background image and text objects."""

    @abstractmethod
    def set_dimensions(self, width: float, height: float) -> None:
        pass

    @abstractmethod
    def set_background(self, image: Optional[Image.Image], scale: float) -> None:
        """Place the background at the origin, scaled uniformly."""
        pass

    @abstractmethod
    def create_text(self, field: TextField) -> RenderableText:
        """Create (but do not add) a live object for a field."""
        pass

    @abstractmethod
    def add(self, obj: RenderableText) -> None:
        pass

    @abstractmethod
    def remove_all(self) -> None:
        pass

    @abstractmethod
    def request_render(self) -> None:
        """Ask for a repaint; backends coalesce repeated requests."""
        pass

    @abstractmethod
    def render(self, multiplier: float = 1.0) -> Image.Image:
        """Rasterise the current state."""
        pass

    @abstractmethod
    def dispose(self) -> None:
        pass

    def to_data_url(self, multiplier: float = 1.0) -> str:
        """Render to a base64 PNG data URL."""
        image = self.render(multiplier)
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
        return f"data:image/png;base64,{encoded}"
