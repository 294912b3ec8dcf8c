"""pytest configuration and fixtures for queuetray tests."""

import os
import sys
import textwrap
import time

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication

from queuetray.app_context import AppContext


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    app.setQuitOnLastWindowClosed(False)
    yield app
    # Don't quit - may cause issues with other tests


@pytest.fixture
def write_server(tmp_path):
    """Write a python script standing in for the server; returns its argv prefix."""

    def _write(body: str, name: str = "fake_server.py"):
        script = tmp_path / name
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return [sys.executable, "-u", str(script)]

    return _write


@pytest.fixture
def make_context(tmp_path):
    """Build an AppContext whose config and log live in tmp_path."""

    def _make(server_command=None):
        if server_command is None:
            server_command = [str(tmp_path / "missing-server")]
        return AppContext(
            server_command=server_command,
            config_path=tmp_path / "config.json",
            log_path=tmp_path / "app.log",
        )

    return _make


def pump_until(ctx, predicate, timeout=10.0):
    """Drain process events until predicate() holds; fails the test on timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        ctx.process_events()
        if predicate():
            return
        time.sleep(0.02)
    pytest.fail("timed out waiting for process events")


@pytest.fixture
def pump():
    return pump_until
