"""
Card editor engine for CardCanvas.

Projects template text fields from their authored design space into a
runtime viewport, keeps an immutable original geometry per field so
resizes never compound, and drives frame-based text animations.
"""

from .models import (
    CustomFont,
    TextField,
    TemplatePage,
    Template,
    DesignSize,
    OriginalGeometry,
    TextState,
)
from .errors import (
    CardCanvasError,
    ConfigurationError,
    UnknownAnimationError,
    TemplateValidationError,
    DuplicateFieldError,
    AssetLoadError,
    SessionDisposedError,
)
from .loader import TemplateValidator, ValidationIssue, load_template, load_template_file
from .scaling import compute_scale, capture_original_geometry, resolve_design_size
from .surface import DrawingSurface, RenderableText
from .raster import PillowSurface, PillowText
from .registry import TextFieldRegistry
from .projector import CoordinateProjector
from .scheduler import FrameScheduler, ManualFrameScheduler, AsyncioFrameScheduler
from .animation import AnimationKind, Animator, EASINGS, typewriter_text
from .fonts import FontManager
from .assets import AssetLoader
from .session import EditorSession

__all__ = [
    # Data models
    "CustomFont",
    "TextField",
    "TemplatePage",
    "Template",
    "DesignSize",
    "OriginalGeometry",
    "TextState",
    # Errors
    "CardCanvasError",
    "ConfigurationError",
    "UnknownAnimationError",
    "TemplateValidationError",
    "DuplicateFieldError",
    "AssetLoadError",
    "SessionDisposedError",
    # Loading
    "TemplateValidator",
    "ValidationIssue",
    "load_template",
    "load_template_file",
    # Geometry
    "compute_scale",
    "capture_original_geometry",
    "resolve_design_size",
    "TextFieldRegistry",
    "CoordinateProjector",
    # Rendering
    "DrawingSurface",
    "RenderableText",
    "PillowSurface",
    "PillowText",
    "FontManager",
    "AssetLoader",
    # Animation
    "FrameScheduler",
    "ManualFrameScheduler",
    "AsyncioFrameScheduler",
    "AnimationKind",
    "Animator",
    "EASINGS",
    "typewriter_text",
    # Session
    "EditorSession",
]
