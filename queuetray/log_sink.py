"""
Log Sink: durable append-only log file.

Each call opens the file in append mode, writes one timestamped line and
closes it again, so every entry is on disk before append() returns.
The file is never rotated or truncated.
"""

from datetime import datetime, timezone
from pathlib import Path


def format_entry(message: str, when: datetime = None) -> str:
    """Render one durable log line: "[<ISO-8601>] <message>\\n"."""
    if when is None:
        when = datetime.now(timezone.utc)
    timestamp = when.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"[{timestamp}] {message}\n"


class LogSink:
    """Appends timestamped lines to a fixed-path UTF-8 file."""

    def __init__(self, path):
        self.path = Path(path)

    def append(self, message: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(format_entry(message))
            f.flush()
