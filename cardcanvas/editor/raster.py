"""
Pillow rendering backend.

Live text objects are plain in-memory state; ``PillowSurface.render``
rasterises the background and every visible object into a PIL image.
"""

import math
import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .fonts import FontManager
from .models import TextField, TextState
from .surface import DrawingSurface, RenderableText
from ..constants import FALLBACK_FONT_FAMILIES

logger = logging.getLogger(__name__)

LINE_HEIGHT = 1.16  # multiplier of font size


class PillowText(RenderableText):
    """In-memory text object."""

    def __init__(self, field: TextField):
        super().__init__(field.id, locked=field.locked)
        self.font_family = field.font_family
        self.font_weight = field.font_weight
        self.fill = field.fill
        self.text_align = field.text_align
        self._state = TextState(
            left=field.left,
            top=field.top,
            font_size=field.font_size,
            width=field.width,
            angle=field.angle,
            opacity=1.0,
            scale_x=1.0,
            scale_y=1.0,
            text=field.text,
        )

    def set_position(self, left: float, top: float) -> None:
        self._state.left = left
        self._state.top = top

    def set_size(self, font_size: float, width: Optional[float]) -> None:
        self._state.font_size = font_size
        self._state.width = width

    def set_rotation(self, angle: float) -> None:
        self._state.angle = angle

    def set_opacity(self, opacity: float) -> None:
        self._state.opacity = max(0.0, min(1.0, opacity))

    def set_text(self, text: str) -> None:
        self._state.text = text

    def set_scale(self, scale_x: float, scale_y: float) -> None:
        self._state.scale_x = scale_x
        self._state.scale_y = scale_y

    def snapshot(self) -> TextState:
        return replace(self._state)

    def __repr__(self) -> str:
        s = self._state
        return f"PillowText({self.field_id!r}, left={s.left:.2f}, top={s.top:.2f}, font_size={s.font_size:.2f})"


class PillowSurface(DrawingSurface):
    """Headless drawing surface backed by Pillow."""

    def __init__(self, font_manager: FontManager, background_color: str = "#FFFFFF"):
        self.font_manager = font_manager
        self.background_color = background_color
        self.width = 0.0
        self.height = 0.0
        self.background: Optional[Image.Image] = None
        self.background_scale = 1.0
        self.objects: List[PillowText] = []
        self.render_requests = 0
        self.dirty = False
        self.disposed = False

    def set_dimensions(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def set_background(self, image: Optional[Image.Image], scale: float) -> None:
        self.background = image
        self.background_scale = scale

    def create_text(self, field: TextField) -> PillowText:
        return PillowText(field)

    def add(self, obj: RenderableText) -> None:
        self.objects.append(obj)

    def remove_all(self) -> None:
        self.objects.clear()

    def request_render(self) -> None:
        self.render_requests += 1
        self.dirty = True

    def dispose(self) -> None:
        self.objects.clear()
        self.background = None
        self.disposed = True

    def render(self, multiplier: float = 1.0) -> Image.Image:
        """Rasterise the surface at ``multiplier`` times its current size."""
        size = (max(1, round(self.width * multiplier)), max(1, round(self.height * multiplier)))
        canvas = Image.new("RGB", size, ImageColor.getrgb(self.background_color))

        if self.background is not None:
            bg_scale = self.background_scale * multiplier
            bg_size = (
                max(1, round(self.background.width * bg_scale)),
                max(1, round(self.background.height * bg_scale)),
            )
            bg = self.background.convert("RGBA").resize(bg_size, Image.LANCZOS)
            canvas.paste(bg, (0, 0), bg)

        for obj in self.objects:
            self._draw_text(canvas, obj, multiplier)

        self.dirty = False
        return canvas

    def _draw_text(self, canvas: Image.Image, obj: PillowText, multiplier: float) -> None:
        state = obj.snapshot()
        if state.opacity <= 0 or not state.text:
            return

        font_px = state.font_size * state.scale_y * multiplier
        if font_px < 1:
            return
        font = self.font_manager.pil_font([obj.font_family] + FALLBACK_FONT_FAMILIES, round(font_px))
        wrap_w = state.width * state.scale_x * multiplier if state.width else None

        tile = self._text_tile(state.text, font, font_px, wrap_w, obj.text_align, obj.fill, state.opacity)
        if tile is None:
            return

        origin_x = state.left * multiplier
        origin_y = state.top * multiplier
        if state.angle:
            tile, (dx, dy) = _rotate_about_top_left(tile, state.angle)
            origin_x += dx
            origin_y += dy

        canvas.paste(tile, (round(origin_x), round(origin_y)), tile)

    def _text_tile(
        self,
        text: str,
        font: ImageFont.FreeTypeFont,
        font_px: float,
        wrap_w: Optional[float],
        align: str,
        fill: str,
        opacity: float,
    ) -> Optional[Image.Image]:
        measure = ImageDraw.Draw(Image.new("L", (1, 1)))
        lines: List[str] = []
        for paragraph in text.split("\n"):
            if wrap_w:
                lines.extend(_wrap_to_width(measure, paragraph, font, wrap_w) or [""])
            else:
                lines.append(paragraph)

        widths = [measure.textlength(line, font=font) for line in lines]
        tile_w = math.ceil(wrap_w if wrap_w else max(widths, default=0))
        line_px = math.ceil(font_px * LINE_HEIGHT)
        tile_h = line_px * len(lines)
        if tile_w <= 0 or tile_h <= 0:
            return None

        try:
            r, g, b = ImageColor.getrgb(fill)[:3]
        except ValueError:
            logger.warning(f"Unrecognised fill colour {fill!r}, using black")
            r, g, b = 0, 0, 0

        tile = Image.new("RGBA", (tile_w, tile_h), (0, 0, 0, 0))
        draw = ImageDraw.Draw(tile)
        for i, (line, line_w) in enumerate(zip(lines, widths)):
            if align == "center":
                x = (tile_w - line_w) / 2
            elif align == "right":
                x = tile_w - line_w
            else:  # left, justify
                x = 0
            draw.text((x, i * line_px), line, font=font, fill=(r, g, b, round(255 * opacity)))
        return tile


def _wrap_to_width(draw: ImageDraw.ImageDraw, text: str, font, max_w: float) -> List[str]:
    """Wrap text to fit within a maximum width."""
    words = text.split()
    lines = []
    current_line = ""

    for word in words:
        trial = (current_line + " " + word).strip()
        if draw.textlength(trial, font=font) <= max_w:
            current_line = trial
        else:
            if current_line:
                lines.append(current_line)
            current_line = word

    if current_line:
        lines.append(current_line)

    return lines


def _rotate_about_top_left(tile: Image.Image, angle: float) -> Tuple[Image.Image, Tuple[float, float]]:
    """
    Rotate a tile clockwise (screen coordinates) about its top-left corner.

    Returns the expanded tile and the offset of its origin relative to the
    pivot.
    """
    theta = math.radians(angle)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    w, h = tile.size
    corners = [(0, 0), (w, 0), (0, h), (w, h)]
    xs = [x * cos_t - y * sin_t for x, y in corners]
    ys = [x * sin_t + y * cos_t for x, y in corners]
    rotated = tile.rotate(-angle, resample=Image.BICUBIC, expand=True)
    return rotated, (min(xs), min(ys))
