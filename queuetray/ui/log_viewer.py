"""
Log Viewer: live view of the in-memory log buffer.

Hydrates from the buffer's replay on open, then appends each new line as the
buffer pushes it, keeping the view scrolled to the bottom. Clear empties the
view and the shared buffer; the log file on disk is left alone.
"""

import logging

from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPlainTextEdit,
    QPushButton,
)
from PySide6.QtGui import QFont

logger = logging.getLogger(__name__)


class LogViewerWindow(QWidget):
    """Read-only log area with a Clear button. Attached to the buffer while open."""

    def __init__(self, app_context, parent=None):
        super().__init__(parent)
        self._ctx = app_context
        self.setWindowTitle("Server Logs")
        self.resize(700, 450)

        layout = QVBoxLayout()

        self.log_view = QPlainTextEdit()
        self.log_view.setReadOnly(True)
        self.log_view.setLineWrapMode(QPlainTextEdit.NoWrap)
        font = QFont("monospace")
        font.setStyleHint(QFont.Monospace)
        self.log_view.setFont(font)
        layout.addWidget(self.log_view)

        btn_row = QHBoxLayout()
        btn_row.addStretch()
        self.clear_btn = QPushButton("Clear")
        self.clear_btn.clicked.connect(self._on_clear)
        btn_row.addWidget(self.clear_btn)
        layout.addLayout(btn_row)

        self.setLayout(layout)

        buffer = self._ctx.log_buffer
        for line in buffer.replay():
            self.log_view.appendPlainText(line)
        self._scroll_to_bottom()
        buffer.attach(self)

    # -- buffer viewer interface ---------------------------------------------

    def append_line(self, line: str):
        self.log_view.appendPlainText(line)
        self._scroll_to_bottom()

    def clear_lines(self):
        self.log_view.clear()

    # -- internals -------------------------------------------------------------

    def _scroll_to_bottom(self):
        bar = self.log_view.verticalScrollBar()
        bar.setValue(bar.maximum())

    def _on_clear(self):
        self._ctx.log_buffer.clear()

    def closeEvent(self, event):
        self._ctx.log_buffer.detach(self)
        if self._ctx.log_viewer is self:
            self._ctx.log_viewer = None
        super().closeEvent(event)
