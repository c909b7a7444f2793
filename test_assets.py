"""Tests for background resolution and loading."""

import base64
import io
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image

from cardcanvas.config import EditorSettings
from cardcanvas.editor.assets import AssetLoader
from cardcanvas.editor.errors import AssetLoadError
from cardcanvas.editor.models import Template
from conftest import make_page


def png_bytes(size=(20, 10)):
    buffer = io.BytesIO()
    Image.new("RGB", size, "blue").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def loader(http):
    return AssetLoader(EditorSettings(api_base_url="https://api.example.com"), session=http)


def test_image_url_wins(loader, http):
    assert loader.resolve_background_url("https://cdn.example.com/a.png", 5) == "https://cdn.example.com/a.png"
    http.get.assert_not_called()


def test_background_id_is_looked_up(loader, http):
    response = MagicMock()
    response.json.return_value = {"data": {"cloudinary_url": "https://cdn.example.com/b.png"}}
    http.get.return_value = response

    assert loader.resolve_background_url(None, 5) == "https://cdn.example.com/b.png"
    http.get.assert_called_once_with("https://api.example.com/api/uploads/background/5", timeout=30)


def test_background_lookup_failures(loader, http):
    http.get.side_effect = requests.ConnectionError("down")
    with pytest.raises(AssetLoadError):
        loader.resolve_background_url(None, 5)

    http.get.side_effect = None
    http.get.return_value.json.return_value = {"data": {}}
    with pytest.raises(AssetLoadError):
        loader.resolve_background_url(None, 5)


def test_nothing_to_resolve(loader):
    with pytest.raises(AssetLoadError):
        loader.resolve_background_url(None, None)


def test_load_image_over_http(loader, http):
    http.get.return_value.content = png_bytes()
    image = loader.load_image("https://cdn.example.com/a.png")
    assert image.size == (20, 10)


def test_load_image_from_data_url_and_path(loader, tmp_path):
    data_url = "data:image/png;base64," + base64.b64encode(png_bytes((4, 3))).decode("ascii")
    assert loader.load_image(data_url).size == (4, 3)

    path = tmp_path / "bg.png"
    path.write_bytes(png_bytes((7, 5)))
    assert loader.load_image(str(path)).size == (7, 5)


def test_load_failures_raise_asset_error(loader, http, tmp_path):
    with pytest.raises(AssetLoadError):
        loader.load_image(str(tmp_path / "missing.png"))

    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")
    with pytest.raises(AssetLoadError):
        loader.load_image(str(junk))

    http.get.return_value.raise_for_status.side_effect = requests.HTTPError("404")
    with pytest.raises(AssetLoadError):
        loader.load_image("https://cdn.example.com/gone.png")


def test_oversized_and_unreadable_images_raise_asset_error(loader, tmp_path, monkeypatch):
    path = tmp_path / "huge.png"
    path.write_bytes(png_bytes((400, 400)))

    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(AssetLoadError):
        loader.load_image(str(path))
    monkeypatch.undo()

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", deny)
    with pytest.raises(AssetLoadError):
        loader.load_image(str(path))


def test_session_reports_undecodable_background(make_session, tmp_path, monkeypatch):
    path = tmp_path / "huge.png"
    path.write_bytes(png_bytes((400, 400)))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    errors = []
    template = Template(id=5, pages=[make_page(image_url=str(path))])
    session = make_session(template, on_error=errors.append)
    assert session.open().result() is False
    assert len(errors) == 1 and isinstance(errors[0], AssetLoadError)
