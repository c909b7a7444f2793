"""Canvas widget for customizing a card template."""

import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QPainter
from PySide6.QtWidgets import (
    QGraphicsView, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget
)

from cardcanvas.editor.session import EditorSession

logger = logging.getLogger(__name__)


class CanvasView(QGraphicsView):
    """Graphics view that feeds its size into the session's debounced resize path."""

    def __init__(self, session: EditorSession, parent=None):
        super().__init__(session.surface.scene, parent)
        self.session = session
        self.setRenderHint(QPainter.Antialiasing)
        self.setRenderHint(QPainter.TextAntialiasing)
        self.setAlignment(Qt.AlignCenter)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAsNeeded)
        self.setStyleSheet("background-color: #eef2ff; border: none;")

    def resizeEvent(self, event):
        super().resizeEvent(event)
        if not self.session.disposed:
            size = self.viewport().size()
            self.session.notify_resize(size.width(), size.height())


class CardEditorWidget(QWidget):
    """Card canvas with page navigation."""

    textChanged = Signal(int, str, str)  # page index, field id, text
    pageChanged = Signal(int)

    def __init__(self, session: EditorSession, parent=None):
        super().__init__(parent)
        self.session = session
        self.session.on_text_change = self.textChanged.emit
        self.init_ui()

    def init_ui(self):
        """Initialize the UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(8)

        self.view = CanvasView(self.session, self)
        layout.addWidget(self.view, 1)

        nav_layout = QHBoxLayout()
        self.prev_btn = QPushButton("← Previous")
        self.prev_btn.clicked.connect(lambda: self.go_to_page(self._index() - 1))
        nav_layout.addWidget(self.prev_btn)

        nav_layout.addStretch()
        self.page_label = QLabel()
        nav_layout.addWidget(self.page_label)
        nav_layout.addStretch()

        self.next_btn = QPushButton("Next →")
        self.next_btn.clicked.connect(lambda: self.go_to_page(self._index() + 1))
        nav_layout.addWidget(self.next_btn)

        self.nav_bar = QWidget()
        self.nav_bar.setLayout(nav_layout)
        self.nav_bar.setVisible(self.session.page_count > 1)
        layout.addWidget(self.nav_bar)

        self.update_navigation()

    def _index(self) -> int:
        return self.session.current_page_index or 0

    def update_navigation(self):
        """Refresh the page indicator and button states."""
        index = self._index()
        self.page_label.setText(f"Page {index + 1} of {self.session.page_count}")
        self.prev_btn.setEnabled(index > 0)
        self.next_btn.setEnabled(index < self.session.page_count - 1)

    def go_to_page(self, index: int) -> bool:
        """Switch to another page."""
        if not self.session.go_to_page(index):
            return False
        self.update_navigation()
        self.pageChanged.emit(index)
        return True

    def update_text(self, field_id: str, text: str) -> bool:
        return self.session.update_text(field_id, text)

    def closeEvent(self, event):
        self.session.dispose()
        super().closeEvent(event)
