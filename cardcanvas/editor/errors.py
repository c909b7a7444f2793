"""Exception hierarchy for the card editor engine."""

from typing import List


class CardCanvasError(Exception):
    """Base class for all editor errors."""


class ConfigurationError(CardCanvasError):
    """Invalid configuration supplied by the caller. Never retried."""


class UnknownAnimationError(ConfigurationError):
    """Requested animation kind is not supported."""

    def __init__(self, kind):
        super().__init__(f"Unknown animation type: {kind!r}")
        self.kind = kind


class TemplateValidationError(ConfigurationError):
    """Persisted template data failed schema validation."""

    def __init__(self, issues: List[str]):
        message = "Invalid template data:\n  " + "\n  ".join(issues)
        super().__init__(message)
        self.issues = issues


class DuplicateFieldError(CardCanvasError):
    """A text field id was registered twice in the same session."""

    def __init__(self, field_id: str):
        super().__init__(f"Text field already registered: {field_id}")
        self.field_id = field_id


class AssetLoadError(CardCanvasError):
    """A background image or font could not be fetched or decoded."""


class SessionDisposedError(CardCanvasError):
    """Operation attempted on an editor session that was torn down."""
