"""Qt rendering backend: QGraphicsScene items behind the editor's capability interfaces."""

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from PIL import Image
from PIL.ImageQt import ImageQt, fromqimage
from PySide6.QtCore import QElapsedTimer, QRectF, QTimer, Qt
from PySide6.QtGui import QColor, QFont, QImage, QPainter, QPixmap, QTextOption, QTransform
from PySide6.QtWidgets import QGraphicsPixmapItem, QGraphicsScene, QGraphicsTextItem

from cardcanvas.editor.models import TextField, TextState
from cardcanvas.editor.scheduler import FrameScheduler, FrameCallback
from cardcanvas.editor.surface import DrawingSurface, RenderableText
from cardcanvas.constants import FRAME_INTERVAL_MS

logger = logging.getLogger(__name__)

ALIGNMENTS = {
    "left": Qt.AlignLeft,
    "center": Qt.AlignHCenter,
    "right": Qt.AlignRight,
    "justify": Qt.AlignJustify,
}


class QtText(RenderableText):
    """A QGraphicsTextItem with a float mirror of its state."""

    def __init__(self, field: TextField):
        super().__init__(field.id, locked=field.locked)
        self.item = QGraphicsTextItem(field.text)
        self.item.setDefaultTextColor(QColor(field.fill))
        font = QFont(field.font_family)
        if str(field.font_weight).lower() in ("bold", "700", "800", "900"):
            font.setWeight(QFont.Bold)
        self.item.setFont(font)
        option = QTextOption(ALIGNMENTS.get(field.text_align, Qt.AlignLeft))
        option.setWrapMode(QTextOption.WordWrap)
        self.item.document().setDefaultTextOption(option)
        self.item.document().setDocumentMargin(0)
        self._state = TextState(
            left=field.left, top=field.top, font_size=field.font_size, width=field.width,
            angle=field.angle, opacity=1.0, scale_x=1.0, scale_y=1.0, text=field.text,
        )
        self.set_position(field.left, field.top)
        self.set_size(field.font_size, field.width)
        self.set_rotation(field.angle)

    def set_position(self, left: float, top: float) -> None:
        self._state.left, self._state.top = left, top
        self.item.setPos(left, top)

    def set_size(self, font_size: float, width: Optional[float]) -> None:
        self._state.font_size, self._state.width = font_size, width
        font = self.item.font()
        font.setPixelSize(max(1, round(font_size)))
        self.item.setFont(font)
        self.item.setTextWidth(width if width else -1)

    def set_rotation(self, angle: float) -> None:
        self._state.angle = angle
        self.item.setRotation(angle)

    def set_opacity(self, opacity: float) -> None:
        self._state.opacity = max(0.0, min(1.0, opacity))
        self.item.setOpacity(self._state.opacity)

    def set_text(self, text: str) -> None:
        self._state.text = text
        self.item.setPlainText(text)

    def set_scale(self, scale_x: float, scale_y: float) -> None:
        self._state.scale_x, self._state.scale_y = scale_x, scale_y
        self.item.setTransform(QTransform.fromScale(scale_x, scale_y))

    def snapshot(self) -> TextState:
        return replace(self._state)


class QtSurface(DrawingSurface):
    """Drawing surface backed by a QGraphicsScene."""

    def __init__(self, scene: Optional[QGraphicsScene] = None, background_color: str = "#FFFFFF"):
        self.scene = scene or QGraphicsScene()
        self.scene.setBackgroundBrush(QColor(background_color))
        self._background_item: Optional[QGraphicsPixmapItem] = None
        self._background_source: Optional[Image.Image] = None
        self._texts: list = []

    def set_dimensions(self, width: float, height: float) -> None:
        self.scene.setSceneRect(0, 0, width, height)

    def set_background(self, image: Optional[Image.Image], scale: float) -> None:
        if image is not self._background_source:
            if self._background_item is not None:
                self.scene.removeItem(self._background_item)
                self._background_item = None
            self._background_source = image
            if image is not None:
                pixmap = QPixmap.fromImage(ImageQt(image.convert("RGBA")))
                self._background_item = self.scene.addPixmap(pixmap)
                self._background_item.setZValue(-1)
                self._background_item.setTransformationMode(Qt.SmoothTransformation)
        if self._background_item is not None:
            self._background_item.setPos(0, 0)
            self._background_item.setScale(scale)

    def create_text(self, field: TextField) -> QtText:
        return QtText(field)

    def add(self, obj: RenderableText) -> None:
        self.scene.addItem(obj.item)
        self._texts.append(obj)

    def remove_all(self) -> None:
        for obj in self._texts:
            self.scene.removeItem(obj.item)
        self._texts.clear()

    def request_render(self) -> None:
        self.scene.update()

    def render(self, multiplier: float = 1.0) -> Image.Image:
        rect = self.scene.sceneRect()
        width = max(1, round(rect.width() * multiplier))
        height = max(1, round(rect.height() * multiplier))
        image = QImage(width, height, QImage.Format_ARGB32)
        image.fill(self.scene.backgroundBrush().color())
        painter = QPainter(image)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)
        self.scene.render(painter, QRectF(0, 0, width, height), rect)
        painter.end()
        return fromqimage(image).convert("RGB")

    def dispose(self) -> None:
        self.remove_all()
        self.scene.clear()
        self._background_item = None
        self._background_source = None


class QtFrameScheduler(FrameScheduler):
    """Frame scheduler driven by single-shot QTimers on the GUI thread."""

    def __init__(self, frame_interval: float = FRAME_INTERVAL_MS):
        self.frame_interval = frame_interval
        self._clock = QElapsedTimer()
        self._clock.start()
        self._timers: Dict[int, QTimer] = {}
        self._next_id = 1

    def now(self) -> float:
        return float(self._clock.elapsed())

    def _schedule(self, delay_ms: float, fire: Callable[[], None]) -> int:
        handle = self._next_id
        self._next_id += 1
        timer = QTimer()
        timer.setSingleShot(True)

        def on_timeout():
            self._timers.pop(handle, None)
            fire()

        timer.timeout.connect(on_timeout)
        self._timers[handle] = timer
        timer.start(max(0, round(delay_ms)))
        return handle

    def request_frame(self, callback: FrameCallback) -> int:
        return self._schedule(self.frame_interval, lambda: callback(self.now()))

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> int:
        return self._schedule(delay_ms, callback)

    def cancel(self, handle: Any) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()
