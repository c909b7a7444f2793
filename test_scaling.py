"""Tests for viewport fitting and original-geometry capture."""

import pytest

from cardcanvas.editor.errors import ConfigurationError
from cardcanvas.editor.models import DesignSize, TextField
from cardcanvas.editor.scaling import (
    capture_original_geometry,
    compute_scale,
    resolve_design_size,
    validate_design_size,
)


def test_aspect_fit_example():
    scale = compute_scale(1000, 800, 500, 500, padding=48)
    assert scale == pytest.approx(0.452)


@pytest.mark.parametrize("design,container", [
    ((1000, 800), (1048, 848)),
    ((1000, 800), (4000, 3000)),
    ((300, 600), (300, 600)),
    ((200, 200), (2000, 250)),
])
def test_never_upscales(design, container):
    # With zero padding a container at least as large as the design fits exactly at 1.0
    assert compute_scale(*design, *container, padding=0, min_floor=0) == 1.0


def test_container_floor_guards_tiny_containers():
    # 100 - 48 would leave 52px; the floor keeps 240px available
    scale = compute_scale(1000, 1000, 100, 100, padding=48, min_floor=240)
    assert scale == pytest.approx(0.24)


def test_height_limited_fit():
    scale = compute_scale(800, 1600, 2000, 848, padding=48)
    assert scale == pytest.approx(0.5)


def test_compute_scale_is_deterministic():
    args = (1234, 567, 890, 432)
    assert compute_scale(*args) == compute_scale(*args)


def test_validate_design_size_rejects_non_positive():
    with pytest.raises(ConfigurationError):
        validate_design_size(0, 100)
    with pytest.raises(ConfigurationError):
        validate_design_size(100, -5)
    with pytest.raises(ConfigurationError):
        validate_design_size(None, 100)


def test_resolve_design_size_prefers_image():
    assert resolve_design_size(1000, 800, (500, 400)) == DesignSize(500, 400)
    assert resolve_design_size(1000, 800, None) == DesignSize(1000, 800)


def test_capture_without_normalisation_copies_values():
    field = TextField(id="a", left=10, top=20, font_size=30, width=40, angle=12)
    orig = capture_original_geometry(field, None, DesignSize(1000, 800))
    assert (orig.left, orig.top, orig.font_size, orig.width, orig.angle) == (10, 20, 30, 40, 12)


def test_capture_normalises_onto_image_grid():
    field = TextField(id="a", left=200, top=100, font_size=40, width=300, angle=30)
    orig = capture_original_geometry(field, DesignSize(1000, 800), DesignSize(500, 200))
    assert orig.left == pytest.approx(100)
    assert orig.top == pytest.approx(25)
    assert orig.width == pytest.approx(150)
    # font follows the smaller ratio (0.25)
    assert orig.font_size == pytest.approx(10)
    assert orig.angle == 30


def test_original_geometry_is_frozen():
    orig = capture_original_geometry(TextField(id="a", left=1, top=2), None, DesignSize(10, 10))
    with pytest.raises(Exception):
        orig.left = 5
