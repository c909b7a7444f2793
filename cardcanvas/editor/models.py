"""
Data models for the card editor.

Defines templates, pages, text fields and the immutable design-space
geometry captured for each field when a page is loaded.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_FILL,
    DEFAULT_TEXT_ALIGN,
)

# Type aliases for clarity
Size = Tuple[float, float]  # (width, height) in pixels


@dataclass
class CustomFont:
    """A font family the template needs, loaded by name from a URL."""

    name: str
    url: str


@dataclass
class TextField:
    """One editable text region, in design-space coordinates."""

    id: str
    text: str = ""
    left: float = 0.0
    top: float = 0.0
    font_size: float = 40.0
    font_family: str = DEFAULT_FONT_FAMILY
    font_weight: str = DEFAULT_FONT_WEIGHT
    fill: str = DEFAULT_FILL
    text_align: str = DEFAULT_TEXT_ALIGN
    width: Optional[float] = None
    angle: float = 0.0
    locked: bool = False
    label: str = ""

    def __post_init__(self):
        if not self.label:
            self.label = self.id


@dataclass
class TemplatePage:
    """One page of a (possibly multi-page) template."""

    text_elements: List[TextField] = field(default_factory=list)
    canvas_width: Optional[float] = None
    canvas_height: Optional[float] = None
    image_url: Optional[str] = None
    background_id: Optional[int] = None

    def field_ids(self) -> List[str]:
        return [f.id for f in self.text_elements]


@dataclass
class Template:
    """A complete template as persisted by the admin editor."""

    id: Optional[int]
    name: str = ""
    pages: List[TemplatePage] = field(default_factory=list)
    custom_fonts: List[CustomFont] = field(default_factory=list)


@dataclass(frozen=True)
class DesignSize:
    """Fixed authoring-time canvas dimensions."""

    width: float
    height: float


@dataclass(frozen=True)
class OriginalGeometry:
    """Design-space geometry of a field, captured once per page load."""

    left: float
    top: float
    font_size: float
    width: Optional[float] = None
    angle: float = 0.0


@dataclass
class TextState:
    """Snapshot of a live text object's visual state."""

    left: float
    top: float
    font_size: float
    width: Optional[float]
    angle: float
    opacity: float
    scale_x: float
    scale_y: float
    text: str
