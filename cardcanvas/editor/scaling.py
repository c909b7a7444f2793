"""
Viewport fitting for the card editor.

Maps the fixed design space onto whatever room the container offers.
"""

from typing import Optional

from .errors import ConfigurationError
from .models import DesignSize, OriginalGeometry, Size, TextField
from ..constants import DEFAULT_PADDING_PX, DEFAULT_MIN_FLOOR_PX, MAX_SCALE


def compute_scale(
    design_width: float,
    design_height: float,
    container_width: float,
    container_height: float,
    padding: float = DEFAULT_PADDING_PX,
    min_floor: float = DEFAULT_MIN_FLOOR_PX,
) -> float:
    """
    Compute the uniform scale that fits the design into a container.

    The padding is subtracted from both axes, each available extent is
    clamped to ``min_floor`` and the result never exceeds 1.0. Design
    dimensions must be positive; that is the caller's precondition.

    Args:
        design_width: Design-space width in pixels
        design_height: Design-space height in pixels
        container_width: Container width in viewport pixels
        container_height: Container height in viewport pixels
        padding: Allowance subtracted from both axes
        min_floor: Smallest available extent considered

    Returns:
        Scale factor in (0, 1]
    """
    available_w = max(container_width - padding, min_floor)
    available_h = max(container_height - padding, min_floor)
    return min(available_w / design_width, available_h / design_height, MAX_SCALE)


def validate_design_size(width: Optional[float], height: Optional[float]) -> DesignSize:
    """Return a DesignSize, rejecting missing or non-positive dimensions."""
    if not width or not height or width <= 0 or height <= 0:
        raise ConfigurationError(f"Design dimensions must be positive, got {width}x{height}")
    return DesignSize(float(width), float(height))


def resolve_design_size(
    canvas_width: Optional[float],
    canvas_height: Optional[float],
    image_size: Optional[Size] = None,
) -> DesignSize:
    """
    Pick the design space for a page.

    The background image's pixel size wins when known; the authored canvas
    size is used otherwise.
    """
    if image_size is not None:
        return validate_design_size(*image_size)
    return validate_design_size(canvas_width, canvas_height)


def capture_original_geometry(
    field: TextField,
    authored: Optional[DesignSize],
    design: DesignSize,
) -> OriginalGeometry:
    """
    Capture a field's design-space geometry.

    Positions authored against ``authored`` are normalised onto ``design``
    (the background image's pixel grid). Font size follows the smaller
    axis ratio so glyphs keep their aspect; angle is scale-invariant.
    """
    if authored is None:
        ratio_x = ratio_y = 1.0
    else:
        ratio_x = design.width / authored.width
        ratio_y = design.height / authored.height

    return OriginalGeometry(
        left=field.left * ratio_x,
        top=field.top * ratio_y,
        font_size=field.font_size * min(ratio_x, ratio_y),
        width=field.width * ratio_x if field.width else None,
        angle=field.angle or 0.0,
    )
