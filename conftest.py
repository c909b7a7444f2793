"""Shared pytest fixtures for the CardCanvas tests."""

import pytest
from PIL import Image

from cardcanvas.config import EditorSettings
from cardcanvas.editor.fonts import FontManager
from cardcanvas.editor.models import Template, TemplatePage, TextField
from cardcanvas.editor.raster import PillowSurface
from cardcanvas.editor.scheduler import ManualFrameScheduler
from cardcanvas.editor.session import EditorSession


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CARDCANVAS_CONFIG_DIR", str(tmp_path / "config"))


@pytest.fixture
def fonts():
    return FontManager(auto_discover=False)


@pytest.fixture
def surface(fonts):
    return PillowSurface(fonts)


@pytest.fixture
def scheduler():
    return ManualFrameScheduler(frame_interval=16.0)


def make_page(width=1000, height=800, image_url=None, fields=None):
    if fields is None:
        fields = [
            TextField(id="title", text="HELLO", left=200, top=100, font_size=40, width=300, angle=15),
            TextField(id="date", text="June 1st", left=100, top=500, font_size=24),
            TextField(id="venue", text="Garden Hall", left=50, top=600, font_size=20, locked=True),
        ]
    return TemplatePage(text_elements=fields, canvas_width=width, canvas_height=height, image_url=image_url)


@pytest.fixture
def template():
    return Template(id=7, name="Birthday", pages=[make_page()])


@pytest.fixture
def two_page_template():
    second = make_page(fields=[TextField(id="rsvp", text="RSVP", left=400, top=400, font_size=32)])
    return Template(id=8, name="Wedding", pages=[make_page(), second])


@pytest.fixture
def background_file(tmp_path):
    path = tmp_path / "background.png"
    Image.new("RGB", (500, 400), "#336699").save(path)
    return path


@pytest.fixture
def make_session(surface, scheduler):
    created = []

    def factory(template, **kwargs):
        kwargs.setdefault("settings", EditorSettings())
        session = EditorSession(template, surface, scheduler, **kwargs)
        created.append(session)
        return session

    yield factory
    for session in created:
        session.dispose()
