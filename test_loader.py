"""Tests for template validation and loading."""

import json

import pytest

from cardcanvas.editor.errors import TemplateValidationError
from cardcanvas.editor.loader import TemplateValidator, load_template, load_template_file


def single_page_data(**overrides):
    data = {
        "id": 12,
        "name": "Birthday",
        "template_image_url": "https://cdn.example.com/bg.png",
        "canvas_data": {
            "canvasWidth": 1000,
            "canvasHeight": 800,
            "textElements": [
                {"id": "title", "text": "HELLO", "left": 200, "top": 100, "fontSize": 40,
                 "width": 300, "angle": 15, "fontFamily": "Pacifico", "fill": "#ff0000"},
                {"id": "venue", "text": "Hall", "left": 50, "top": 600, "fontSize": 20, "locked": True},
            ],
            "customFonts": [{"name": "Pacifico", "url": "https://fonts.example.com/pacifico.css"}],
        },
    }
    data.update(overrides)
    return data


def multi_page_data():
    return {
        "id": 13,
        "name": "Wedding",
        "pages": [
            {"imageUrl": "https://cdn.example.com/p1.png", "canvasWidth": 600, "canvasHeight": 900,
             "textElements": [{"id": "names", "left": 10, "top": 20, "fontSize": 30}]},
            {"backgroundId": 44, "textElements": []},
        ],
        "customFonts": [],
    }


def test_single_page_shape():
    template = load_template(single_page_data())
    assert template.id == 12
    assert len(template.pages) == 1

    page = template.pages[0]
    assert page.image_url == "https://cdn.example.com/bg.png"
    assert (page.canvas_width, page.canvas_height) == (1000.0, 800.0)
    assert page.field_ids() == ["title", "venue"]

    title, venue = page.text_elements
    assert title.font_family == "Pacifico"
    assert title.width == 300.0
    assert title.angle == 15.0
    assert title.label == "title"
    assert venue.locked
    assert venue.width is None
    assert venue.font_family == "Arial"

    assert template.custom_fonts[0].name == "Pacifico"


def test_multi_page_shape():
    template = load_template(multi_page_data())
    assert len(template.pages) == 2
    assert template.pages[0].text_elements[0].text == ""
    assert template.pages[1].background_id == 44
    assert template.pages[1].canvas_width is None


def test_missing_required_field_reports_path():
    data = single_page_data()
    del data["canvas_data"]["textElements"][0]["fontSize"]
    issues = TemplateValidator().validate(data)
    assert len(issues) == 1
    assert issues[0].path == "canvas_data/textElements/0"
    assert "fontSize" in issues[0].message


def test_non_positive_canvas_size_is_rejected():
    data = single_page_data()
    data["canvas_data"]["canvasWidth"] = 0
    with pytest.raises(TemplateValidationError) as exc_info:
        load_template(data)
    assert any("canvasWidth" in issue for issue in exc_info.value.issues)


def test_duplicate_field_ids_are_rejected():
    data = single_page_data()
    data["canvas_data"]["textElements"][1]["id"] = "title"
    issues = TemplateValidator().validate(data)
    assert [i.message for i in issues] == ["Duplicate text field id: title"]


def test_payload_needs_exactly_one_shape():
    assert TemplateValidator().validate({"name": "empty"})
    both = single_page_data(pages=multi_page_data()["pages"])
    assert TemplateValidator().validate(both)


def test_load_template_file(tmp_path):
    path = tmp_path / "template.json"
    path.write_text(json.dumps(multi_page_data()), encoding="utf-8")
    assert load_template_file(path).name == "Wedding"
