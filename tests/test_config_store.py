"""Tests for the persisted delay setting."""

import json

import pytest

from queuetray.config_store import ConfigStore, DEFAULT_DELAY_MS, default_server_exe


def test_missing_file_returns_default(tmp_path):
    store = ConfigStore(tmp_path / "config.json")
    assert store.load() == {"delay": 2000}
    assert DEFAULT_DELAY_MS == 2000


def test_save_then_fresh_read(tmp_path):
    path = tmp_path / "config.json"
    ConfigStore(path).save({"delay": 3500})

    assert ConfigStore(path).load() == {"delay": 3500}
    assert json.loads(path.read_text(encoding="utf-8")) == {"delay": 3500}


def test_save_overwrites_wholesale(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"delay": 10, "other": "x"}), encoding="utf-8")

    ConfigStore(path).save({"delay": 20})

    assert json.loads(path.read_text(encoding="utf-8")) == {"delay": 20}


def test_save_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "config.json"
    ConfigStore(path).save({"delay": 0})
    assert ConfigStore(path).get_delay() == 0


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        "[1, 2, 3]",
        '{"other": 5}',
        '{"delay": "fast"}',
        '{"delay": -1}',
        '{"delay": true}',
        '{"delay": 12.5}',
    ],
)
def test_unusable_content_falls_back_to_default(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    assert ConfigStore(path).load() == {"delay": 2000}


def test_save_rejects_invalid_delay(tmp_path):
    path = tmp_path / "config.json"
    with pytest.raises(ValueError):
        ConfigStore(path).save({"delay": "abc"})
    assert not path.exists()


def test_write_errors_propagate(tmp_path):
    # A directory where the file should be makes open() fail
    path = tmp_path / "config.json"
    path.mkdir()
    with pytest.raises(OSError):
        ConfigStore(path).save({"delay": 100})


def test_server_exe_env_override(monkeypatch, tmp_path):
    target = tmp_path / "my-server"
    monkeypatch.setenv("QUEUETRAY_SERVER_EXE", str(target))
    assert default_server_exe() == target
