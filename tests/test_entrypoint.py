"""Tests for command line parsing of the tray entry point."""

from queuetray.config_store import DEFAULT_CONFIG_PATH, DEFAULT_LOG_PATH
from queuetray.queuetray_tray import build_parser


def test_defaults():
    args = build_parser().parse_args([])
    assert args.config == str(DEFAULT_CONFIG_PATH)
    assert args.log_file == str(DEFAULT_LOG_PATH)
    assert args.verbose is False


def test_overrides(tmp_path):
    args = build_parser().parse_args([
        "--server-exe", str(tmp_path / "srv"),
        "--config", str(tmp_path / "c.json"),
        "--log-file", str(tmp_path / "a.log"),
        "-v",
    ])
    assert args.server_exe == str(tmp_path / "srv")
    assert args.config == str(tmp_path / "c.json")
    assert args.log_file == str(tmp_path / "a.log")
    assert args.verbose is True
