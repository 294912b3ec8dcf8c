"""
Process Supervisor: owns the single api-queue-server child process.

Reader threads (one per output stream) and an exit watcher thread never touch
supervisor state directly. They post ProcessEvent objects onto one queue, and
process_events() drains that queue on the UI thread, so the process slot and
the log buffer only ever change on a single thread. Lines keep their order
within each stream; stdout and stderr are interleaved in arrival order.
"""

import logging
import queue
import subprocess
import threading
from dataclasses import dataclass
from subprocess import DEVNULL
from typing import Callable, List, Optional, Sequence

import psutil

logger = logging.getLogger(__name__)

# Event kinds posted by the watcher threads
EVENT_STDOUT = "stdout"
EVENT_STDERR = "stderr"
EVENT_EXIT = "exit"

# Log lines produced by the supervisor itself
STDERR_PREFIX = "ERR: "
MSG_STARTED = "Server started with delay: {delay}"
MSG_EXITED = "Server stopped"
MSG_STOPPED = "Server stopped!"

# Keep the server from opening a console window on Windows
_CREATION_FLAGS = getattr(subprocess, "CREATE_NO_WINDOW", 0)

# How long the exit watcher waits for buffered output after the child exits
READER_GRACE_SECONDS = 1.0


@dataclass
class ProcessEvent:
    """One message from a watcher thread to the UI thread."""

    kind: str
    process: Optional[subprocess.Popen]
    text: str = ""
    returncode: Optional[int] = None


def _decode_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r\n")


def _read_stream(stream, kind: str, process, post: Callable[[ProcessEvent], None]):
    """Thread target: forward every line of a child stream as an event."""
    try:
        for raw in iter(stream.readline, b""):
            post(ProcessEvent(kind, process, _decode_line(raw)))
    except (OSError, ValueError) as exc:
        # Pipe closed underneath us
        logger.debug("Stopped reading %s of PID %d: %s", kind, process.pid, exc)
    finally:
        stream.close()


def _watch_exit(process, readers: List[threading.Thread], post: Callable[[ProcessEvent], None]):
    """Thread target: post the exit event as soon as the child has exited.

    Descendants may keep the output pipes open after the child is gone, so
    the readers only get a short grace period to flush the last lines.
    """
    returncode = process.wait()
    for reader in readers:
        reader.join(READER_GRACE_SECONDS)
    post(ProcessEvent(EVENT_EXIT, process, returncode=returncode))


def process_handle(pid: int) -> Optional[psutil.Process]:
    """psutil view of a freshly spawned child, or None if it is already gone."""
    try:
        return psutil.Process(pid)
    except psutil.NoSuchProcess:
        return None


def terminate_tree(parent: psutil.Process) -> None:
    """Send a termination signal to a process and its descendants. Does not wait.

    psutil checks the creation time of `parent`, so a recycled PID is never hit.
    """
    try:
        children = parent.children(recursive=True)
    except psutil.NoSuchProcess:
        return
    for proc in children + [parent]:
        try:
            proc.terminate()
        except psutil.NoSuchProcess:
            pass
        except psutil.AccessDenied as exc:
            logger.warning("Could not terminate PID %d: %s", proc.pid, exc)


class ProcessSupervisor:
    """Starts and stops the server and turns its output into log lines.

    `command` is the argv prefix of the server; the configured delay is
    appended as its single positional argument. `log` receives every log line
    (AppContext.log in the application).
    """

    def __init__(self, command: Sequence[str], config_store, log_buffer,
                 log: Callable[[str], None]):
        self.command = [str(part) for part in command]
        self._config_store = config_store
        self._log_buffer = log_buffer
        self._log = log
        self._process: Optional[subprocess.Popen] = None
        self._ps_process: Optional[psutil.Process] = None
        self.events: queue.Queue = queue.Queue()
        # Called from watcher threads after each posted event (wakes the UI thread)
        self.on_event_posted: Optional[Callable[[], None]] = None

    # -- state -------------------------------------------------------------

    @property
    def process(self) -> Optional[subprocess.Popen]:
        return self._process

    @property
    def is_running(self) -> bool:
        return self._process is not None

    @property
    def pid(self) -> Optional[int]:
        return self._process.pid if self._process is not None else None

    @property
    def status_text(self) -> str:
        if self._process is None:
            return "Server: Stopped"
        return f"Server: Running (PID {self._process.pid})"

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> bool:
        """Launch the server unless it is already running. Returns True if launched."""
        if self._process is not None:
            logger.debug("Start ignored, server already running (PID %d)", self._process.pid)
            return False

        delay = self._config_store.get_delay()
        self._log_buffer.clear()
        argv = self.command + [str(delay)]

        try:
            process = subprocess.Popen(
                argv,
                stdin=DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                creationflags=_CREATION_FLAGS,
            )
        except OSError as exc:
            # Reported like a child that wrote an error and exited at once
            logger.error("Failed to launch %s: %s", argv[0], exc)
            self._post(ProcessEvent(EVENT_STDERR, None, f"Failed to launch {argv[0]}: {exc}"))
            self._post(ProcessEvent(EVENT_EXIT, None))
            return False

        self._process = process
        self._ps_process = process_handle(process.pid)
        readers = [
            threading.Thread(
                target=_read_stream,
                args=(process.stdout, EVENT_STDOUT, process, self._post),
                daemon=True,
            ),
            threading.Thread(
                target=_read_stream,
                args=(process.stderr, EVENT_STDERR, process, self._post),
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()
        threading.Thread(
            target=_watch_exit, args=(process, readers, self._post), daemon=True
        ).start()

        logger.debug("Launched %s (PID %d)", argv, process.pid)
        self._log(MSG_STARTED.format(delay=delay))
        return True

    def stop(self) -> bool:
        """Terminate the server without waiting for it. Returns True if one was running."""
        process = self._process
        if process is None:
            return False

        # A child the exit watcher already reaped has given up its PID
        if process.poll() is None and self._ps_process is not None:
            terminate_tree(self._ps_process)
        self._process = None
        self._ps_process = None
        self._log(MSG_STOPPED)
        return True

    # -- event channel -----------------------------------------------------

    def _post(self, event: ProcessEvent) -> None:
        self.events.put(event)
        if self.on_event_posted is not None:
            self.on_event_posted()

    def process_events(self) -> int:
        """Handle every queued watcher event on the calling thread. Returns the count."""
        handled = 0
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return handled
            self._dispatch(event)
            handled += 1

    def _dispatch(self, event: ProcessEvent) -> None:
        if event.kind == EVENT_STDOUT:
            self._log(event.text)
        elif event.kind == EVENT_STDERR:
            self._log(STDERR_PREFIX + event.text)
        elif event.kind == EVENT_EXIT:
            if event.process is not None:
                logger.debug("PID %d exited with code %s", event.process.pid, event.returncode)
            # A late exit from an already stopped child must not clear a newer one
            if self._process is event.process:
                self._process = None
                self._ps_process = None
            self._log(MSG_EXITED)
        else:
            logger.warning("Unknown process event: %r", event.kind)
