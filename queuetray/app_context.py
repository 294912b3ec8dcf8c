"""
Application context shared by the tray, its windows and the supervisor.

Everything that used to be a free-standing global (the child process slot,
the log buffer, the open log viewer) is a field of one AppContext, which is
handed to every action handler.
"""

import logging
from pathlib import Path

from queuetray.config_store import (
    ConfigStore,
    DEFAULT_CONFIG_PATH,
    DEFAULT_LOG_PATH,
    default_server_exe,
)
from queuetray.log_buffer import LogRingBuffer
from queuetray.log_sink import LogSink
from queuetray.process_supervisor import ProcessSupervisor

logger = logging.getLogger(__name__)


class AppContext:
    """Owns the config store, log sink, log buffer, supervisor and viewer slot."""

    def __init__(self, server_command=None, config_path=DEFAULT_CONFIG_PATH,
                 log_path=DEFAULT_LOG_PATH):
        if server_command is None:
            server_command = [str(default_server_exe())]
        self.config_store = ConfigStore(config_path)
        self.log_sink = LogSink(log_path)
        self.log_buffer = LogRingBuffer()
        self.supervisor = ProcessSupervisor(
            server_command, self.config_store, self.log_buffer, self.log
        )
        # The one open LogViewerWindow, if any
        self.log_viewer = None

    @property
    def log_path(self) -> Path:
        return self.log_sink.path

    def log(self, message: str) -> None:
        """Record one log line: durable file, ring buffer (and viewer), console."""
        self.log_sink.append(message)
        self.log_buffer.push(message)
        logger.info("%s", message)

    def process_events(self) -> int:
        """Drain pending child process events into the log, in arrival order."""
        return self.supervisor.process_events()

    def start_server(self) -> bool:
        return self.supervisor.start()

    def stop_server(self) -> bool:
        return self.supervisor.stop()

    def get_delay(self) -> int:
        return self.config_store.get_delay()

    def set_delay(self, delay: int) -> None:
        """Persist a new delay; it is used on the next start."""
        self.config_store.save({"delay": delay})
        self.log(f"Saved new delay: {delay}")

    def shutdown(self) -> None:
        """Stop the server (without waiting) and flush any queued output."""
        self.stop_server()
        self.process_events()
