"""
Log Ring Buffer: bounded in-memory copy of recent log lines.

Feeds the Log Viewer: a freshly opened viewer hydrates itself with replay()
and then receives every new line as a live event while it stays attached.
Lines are stored without timestamps (those only exist in the durable file).
"""

import logging
from collections import deque
from typing import List, Optional

logger = logging.getLogger(__name__)

MAX_LINES = 1000


class LogRingBuffer:
    """FIFO of the last MAX_LINES log lines with an optional attached viewer.

    The viewer is any object providing append_line(str) and clear_lines().
    """

    def __init__(self, max_lines: int = MAX_LINES):
        self._lines = deque(maxlen=max_lines)
        self._viewer = None

    @property
    def max_lines(self) -> int:
        return self._lines.maxlen

    @property
    def viewer(self):
        return self._viewer

    def __len__(self):
        return len(self._lines)

    def attach(self, viewer) -> None:
        """Subscribe a viewer to live lines, replacing any previous one."""
        self._viewer = viewer

    def detach(self, viewer: Optional[object] = None) -> None:
        """Drop the viewer subscription (only if it is still the given viewer)."""
        if viewer is None or viewer is self._viewer:
            self._viewer = None

    def push(self, line: str) -> None:
        self._lines.append(line)  # deque evicts the oldest entry past maxlen
        if self._viewer is not None:
            self._viewer.append_line(line)

    def replay(self) -> List[str]:
        """All buffered lines, oldest first."""
        return list(self._lines)

    def clear(self) -> None:
        """Empty the buffer and the attached viewer's display. The log file is untouched."""
        self._lines.clear()
        if self._viewer is not None:
            self._viewer.clear_lines()
        logger.debug("Log buffer cleared")
