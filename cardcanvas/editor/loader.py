"""
Template loading for the card editor.

Persisted canvas data is arbitrary nested JSON; it is schema-checked here
and converted to dataclasses so nothing deeper in the engine ever sees
an untyped blob.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from .errors import TemplateValidationError
from .models import CustomFont, Template, TemplatePage, TextField
from ..constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_WEIGHT,
    DEFAULT_FILL,
    DEFAULT_TEXT_ALIGN,
)

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent / "template_schema.json"


@dataclass
class ValidationIssue:
    """A single problem found in template data."""
    path: str
    message: str

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class TemplateValidator:
    """Validates template JSON against the packaged schema"""

    def __init__(self, schema_path: Optional[Path] = None):
        self.schema_path = schema_path or SCHEMA_PATH
        with open(self.schema_path, 'r', encoding='utf-8') as f:
            self.schema = json.load(f)
        self._validator = jsonschema.Draft7Validator(self.schema)

    def validate(self, template_data: Any) -> List[ValidationIssue]:
        """
        Validate template data against schema

        Returns:
            List of validation issues (empty if valid)
        """
        issues = []

        for error in sorted(self._validator.iter_errors(template_data), key=lambda e: list(e.path)):
            path = "/".join(str(p) for p in error.absolute_path)
            issues.append(ValidationIssue(path=path, message=error.message))

        if issues:
            return issues

        # Field ids must be unique within a page
        for page_index, page in enumerate(_raw_pages(template_data)):
            seen = set()
            for element in page.get("textElements", []):
                field_id = element["id"]
                if field_id in seen:
                    issues.append(ValidationIssue(
                        path=f"pages/{page_index}/textElements",
                        message=f"Duplicate text field id: {field_id}"
                    ))
                seen.add(field_id)

        return issues


def _raw_pages(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Normalise single-page and multi-page payloads to a list of page dicts."""
    if "pages" in data:
        return data["pages"]

    canvas_data = data["canvas_data"]
    return [{
        "imageUrl": data.get("template_image_url"),
        "canvasWidth": canvas_data.get("canvasWidth"),
        "canvasHeight": canvas_data.get("canvasHeight"),
        "textElements": canvas_data.get("textElements", []),
    }]


def _text_field(raw: Dict[str, Any]) -> TextField:
    return TextField(
        id=raw["id"],
        text=raw.get("text", ""),
        label=raw.get("label", ""),
        left=float(raw["left"]),
        top=float(raw["top"]),
        font_size=float(raw["fontSize"]),
        font_family=raw.get("fontFamily") or DEFAULT_FONT_FAMILY,
        font_weight=str(raw.get("fontWeight") or DEFAULT_FONT_WEIGHT),
        fill=raw.get("fill") or DEFAULT_FILL,
        text_align=raw.get("textAlign") or DEFAULT_TEXT_ALIGN,
        width=float(raw["width"]) if raw.get("width") else None,
        angle=float(raw.get("angle") or 0.0),
        locked=bool(raw.get("locked", False)),
    )


def _page(raw: Dict[str, Any]) -> TemplatePage:
    width = raw.get("canvasWidth")
    height = raw.get("canvasHeight")
    return TemplatePage(
        text_elements=[_text_field(e) for e in raw.get("textElements", [])],
        canvas_width=float(width) if width is not None else None,
        canvas_height=float(height) if height is not None else None,
        image_url=raw.get("imageUrl"),
        background_id=raw.get("backgroundId"),
    )


def load_template(data: Dict[str, Any], validator: Optional[TemplateValidator] = None) -> Template:
    """
    Build a Template from persisted JSON data.

    Accepts the single-page shape (``canvas_data`` + ``template_image_url``)
    and the multi-page shape (``pages``).

    Raises:
        TemplateValidationError: if the data does not match the schema
    """
    validator = validator or TemplateValidator()
    issues = validator.validate(data)
    if issues:
        raise TemplateValidationError([str(i) for i in issues])

    fonts_raw = data.get("customFonts")
    if fonts_raw is None and "canvas_data" in data:
        fonts_raw = data["canvas_data"].get("customFonts")

    template = Template(
        id=data.get("id"),
        name=data.get("name", ""),
        pages=[_page(p) for p in _raw_pages(data)],
        custom_fonts=[CustomFont(name=f["name"], url=f["url"]) for f in fonts_raw or []],
    )

    field_count = sum(len(p.text_elements) for p in template.pages)
    logger.info(f"Template loaded: {template.name or 'Unnamed'} with {len(template.pages)} page(s), {field_count} text field(s)")
    return template


def load_template_file(path: Path) -> Template:
    """
    Load a template from a JSON file.

    Args:
        path: Path to the template JSON file

    Returns:
        Template instance
    """
    logger.info(f"Loading template from {path}")
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return load_template(data)
