"""
Coordinate projection from design space to viewport space.

Every projection recomputes live geometry from the registry's original
records, so repeated resizes never compound and the order of resizes
does not matter.
"""

import logging
from typing import Optional

from PIL import Image

from .models import DesignSize
from .registry import TextFieldRegistry
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


class CoordinateProjector:
    """Applies a scale factor to a surface and its registered fields."""

    def __init__(
        self,
        surface: DrawingSurface,
        registry: TextFieldRegistry,
        design_size: DesignSize,
        background: Optional[Image.Image] = None,
    ):
        self.surface = surface
        self.registry = registry
        self.design_size = design_size
        self.background = background
        self.current_scale: Optional[float] = None

    def apply_scale(self, scale: float) -> None:
        """
        Project every field and the background at ``scale``.

        Fields whose live object is missing are skipped. A single render
        request is issued once all fields are updated.
        """
        self.surface.set_dimensions(
            self.design_size.width * scale,
            self.design_size.height * scale,
        )

        if self.background is not None:
            self.surface.set_background(self.background, scale)

        skipped = 0
        for field_id, orig in self.registry.originals():
            obj = self.registry.get(field_id)
            if obj is None:
                skipped += 1
                continue
            obj.set_position(orig.left * scale, orig.top * scale)
            obj.set_size(
                orig.font_size * scale,
                orig.width * scale if orig.width is not None else None,
            )
            obj.set_rotation(orig.angle)
            obj.set_scale(1.0, 1.0)

        if skipped:
            logger.debug(f"Projection skipped {skipped} field(s) with no live object")

        self.current_scale = scale
        self.surface.request_render()
