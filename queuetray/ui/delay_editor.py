"""
Delay Editor: small "Set Delay" dialog.

Pre-filled with the stored delay. Save writes the new value and closes;
input without a leading non-negative integer is dropped without a message.
"""

import logging
import re
from typing import Optional

from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
)
from PySide6.QtCore import Qt

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def parse_delay(text: str) -> Optional[int]:
    """Parse user input as a delay in ms. Returns None if it is not usable.

    Like parseInt, the leading integer is taken and the rest ignored, so
    "3.7" gives 3 and "1e3" gives 1.
    """
    match = _LEADING_INT_RE.match(text)
    if match is None:
        return None
    value = int(match.group(1))
    if value < 0:
        return None
    return value


class DelayEditorDialog(QDialog):
    """One numeric input plus Save."""

    def __init__(self, app_context, parent=None):
        super().__init__(parent)
        self._ctx = app_context
        self.setWindowTitle("Set Delay")
        self.setFixedSize(300, 160)

        layout = QVBoxLayout()

        title = QLabel("Set API Delay")
        title.setAlignment(Qt.AlignCenter)
        layout.addWidget(title)

        row = QHBoxLayout()
        row.addStretch()
        self.delay_edit = QLineEdit(str(self._ctx.get_delay()))
        self.delay_edit.setFixedWidth(80)
        row.addWidget(self.delay_edit)
        row.addWidget(QLabel("ms"))
        row.addStretch()
        layout.addLayout(row)

        self.save_btn = QPushButton("Save")
        self.save_btn.setDefault(True)
        self.save_btn.clicked.connect(self.save)
        layout.addWidget(self.save_btn, alignment=Qt.AlignCenter)

        self.setLayout(layout)

    def save(self):
        delay = parse_delay(self.delay_edit.text())
        if delay is None:
            logger.debug("Discarding invalid delay input %r", self.delay_edit.text())
        else:
            self._ctx.set_delay(delay)
        self.accept()
