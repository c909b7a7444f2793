"""End-to-end tests for the command line interface."""

import json
import logging

import pytest
from PIL import Image

from cardcanvas.cli import main
from cardcanvas.cli.runner import parse_size, parse_text_overrides


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.captureWarnings(False)


@pytest.fixture
def template_path(tmp_path, background_file):
    data = {
        "id": 21,
        "name": "Party",
        "template_image_url": str(background_file),
        "canvas_data": {
            "canvasWidth": 1000,
            "canvasHeight": 800,
            "textElements": [
                {"id": "title", "text": "HELLO", "left": 200, "top": 100, "fontSize": 40},
                {"id": "venue", "text": "Hall", "left": 50, "top": 600, "fontSize": 20, "locked": True},
            ],
        },
    }
    path = tmp_path / "template.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def run(*argv):
    return main([*argv, "--no-log-file"])


def test_parse_helpers():
    assert parse_size("640x480") == (640, 480)
    with pytest.raises(ValueError):
        parse_size("big")
    assert parse_text_overrides(["title=Hi=there"]) == {"title": "Hi=there"}
    with pytest.raises(ValueError):
        parse_text_overrides(["title"])


def test_validate(template_path, tmp_path, capsys):
    assert run("-T", str(template_path), "--validate") == 0
    assert "valid" in capsys.readouterr().out

    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"pages": []}), encoding="utf-8")
    assert run("-T", str(broken), "--validate") == 1


def test_preview_is_fitted_to_container(template_path, tmp_path):
    out = tmp_path / "preview.png"
    assert run("-T", str(template_path), "--preview", str(out), "--container", "500x500") == 0
    # 500x400 background: min(452/500, 452/400, 1) = 0.904
    with Image.open(out) as image:
        assert image.size == (452, 362)


def test_export_json(template_path, tmp_path, capsys):
    out = tmp_path / "custom.json"
    code = run(
        "-T", str(template_path), "--export-json", str(out),
        "--set-text", "title=Happy Birthday", "--set-text", "venue=Elsewhere", "--no-preview",
    )
    assert code == 0
    assert "locked" in capsys.readouterr().out

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload == {
        "template_id": 21,
        "pages": [{"page_index": 0, "texts": [
            {"id": "title", "text": "Happy Birthday"},
            {"id": "venue", "text": "Hall"},
        ]}],
        "preview": None,
    }


def test_animate_writes_frames(template_path, tmp_path):
    frames = tmp_path / "frames"
    code = run("-T", str(template_path), "--animate", "fadeIn", "--frames-dir", str(frames),
               "--duration", "100", "--stagger", "50", "--fps", "20")
    assert code == 0
    assert len(list(frames.glob("frame_*.png"))) >= 3


def test_usage_errors(template_path, tmp_path):
    assert run() == 2
    assert run("-T", str(template_path)) == 2
    assert run("-T", str(tmp_path / "missing.json"), "--validate") == 2
    assert run("-T", str(template_path), "--preview", str(tmp_path / "x.png"), "--page", "3") == 2
    assert run("-T", str(template_path), "--preview", str(tmp_path / "x.png"), "--container", "wide") == 2


def test_missing_background_fails_cleanly(template_path, tmp_path, background_file):
    background_file.unlink()
    assert run("-T", str(template_path), "--preview", str(tmp_path / "x.png")) == 1
