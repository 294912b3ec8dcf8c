"""
API Queue Server Tray Application

Single PySide6 process with QSystemTrayIcon. Supervises the api-queue-server
child process and provides a right-click tray menu to start/stop it, edit the
delay, view its logs, and exit.
"""

import logging
from pathlib import Path

from PySide6.QtCore import Qt, QObject, Signal
from PySide6.QtGui import QIcon, QPixmap, QColor
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from queuetray.app_context import AppContext
from queuetray.ui.delay_editor import DelayEditorDialog
from queuetray.ui.log_viewer import LogViewerWindow

DATA_DIR = Path(__file__).parent / "data"
TRAY_ICON_PATH = DATA_DIR / "tray-icon.png"

TOOLTIP = "API Queue Server"

# Fallback icon colors for server state
COLOR_RUNNING = QColor("#2ECC71")
COLOR_STOPPED = QColor("#E74C3C")


class _SupervisorSignals(QObject):
    """Bridge between supervisor watcher threads and the Qt main thread."""
    events_pending = Signal()


def _state_icon(running: bool) -> QIcon:
    """Tray icon file if shipped, otherwise a solid square colored by state."""
    if TRAY_ICON_PATH.is_file():
        return QIcon(str(TRAY_ICON_PATH))
    px = QPixmap(64, 64)
    px.fill(COLOR_RUNNING if running else COLOR_STOPPED)
    return QIcon(px)


class TrayController(QObject):
    """Tray icon, menu and the actions behind it."""

    def __init__(self, app_context: AppContext, quit_callback=None, parent=None):
        super().__init__(parent)
        self.ctx = app_context
        self._quit = quit_callback or QApplication.quit

        self._tray = QSystemTrayIcon(self)
        self._tray.setIcon(_state_icon(False))
        self._tray.setToolTip(TOOLTIP)
        self._tray.activated.connect(self._on_tray_activated)

        # Tray menu
        self._menu = QMenu()
        self._status_action = self._menu.addAction(self.ctx.supervisor.status_text)
        self._status_action.setEnabled(False)
        self._menu.addSeparator()

        self._menu.addAction("Start Server").triggered.connect(self.on_start)
        self._menu.addAction("Stop Server").triggered.connect(self.on_stop)
        self._menu.addAction("Set Delay...").triggered.connect(self.on_set_delay)
        self._menu.addAction("View Logs").triggered.connect(self.on_view_logs)

        self._menu.addSeparator()

        self._menu.addAction("Exit").triggered.connect(self.on_exit)

        self._tray.setContextMenu(self._menu)

        # Delay dialog (created on demand)
        self._delay_dialog = None

        # Qt signal bridge: watcher threads wake the main thread to drain events
        self._signals = _SupervisorSignals()
        self._signals.events_pending.connect(self.drain_events, Qt.QueuedConnection)
        self.ctx.supervisor.on_event_posted = lambda: self._signals.events_pending.emit()

    @property
    def menu(self) -> QMenu:
        return self._menu

    @property
    def status_text(self) -> str:
        return self._status_action.text()

    def show(self):
        self._tray.show()
        self.ctx.log("System ready.")

    def drain_events(self):
        if self.ctx.process_events():
            self._update_status()

    def _update_status(self):
        text = self.ctx.supervisor.status_text
        self._status_action.setText(text)
        self._tray.setToolTip(f"{TOOLTIP} — {text}")
        self._tray.setIcon(_state_icon(self.ctx.supervisor.is_running))

    def _on_tray_activated(self, reason):
        if reason == QSystemTrayIcon.DoubleClick:
            self.on_view_logs()

    # -- menu actions ----------------------------------------------------------

    def on_start(self):
        self.ctx.start_server()
        self._update_status()

    def on_stop(self):
        self.ctx.stop_server()
        self._update_status()

    def on_set_delay(self):
        """Open the delay dialog, pre-filled with the stored value."""
        if self._delay_dialog is None:
            self._delay_dialog = DelayEditorDialog(self.ctx)
            self._delay_dialog.setAttribute(Qt.WA_DeleteOnClose, True)
            self._delay_dialog.finished.connect(self._on_delay_dialog_finished)
        self._delay_dialog.show()
        self._delay_dialog.raise_()
        self._delay_dialog.activateWindow()
        return self._delay_dialog

    def _on_delay_dialog_finished(self, _result):
        self._delay_dialog = None

    def on_view_logs(self):
        """Open or bring to front the single log viewer."""
        viewer = self.ctx.log_viewer
        if viewer is None:
            viewer = LogViewerWindow(self.ctx)
            viewer.setAttribute(Qt.WA_DeleteOnClose, True)
            self.ctx.log_viewer = viewer
        viewer.show()
        viewer.raise_()
        viewer.activateWindow()
        return viewer

    def on_exit(self):
        """Clean shutdown: stop the server without waiting, then quit."""
        self.ctx.supervisor.on_event_posted = None
        self.ctx.shutdown()
        if self.ctx.log_viewer is not None:
            self.ctx.log_viewer.close()
        if self._delay_dialog is not None:
            self._delay_dialog.close()
        self._tray.hide()
        self._quit()


class QueueTray(QApplication):
    """System tray application supervising the API queue server."""

    def __init__(self, argv, app_context: AppContext = None):
        super().__init__(argv)
        # Closing the log viewer or the delay dialog must not end the app
        self.setQuitOnLastWindowClosed(False)

        self.ctx = app_context if app_context is not None else AppContext()
        self._controller = TrayController(self.ctx, quit_callback=self.quit, parent=self)
        self._controller.show()
        logging.info("Tray ready, log file: %s", self.ctx.log_path)
