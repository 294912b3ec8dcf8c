#!/usr/bin/env python3
"""API Queue Server — system tray supervisor.

Starts and stops the api-queue-server process from a tray icon, keeps its
delay setting, and records its output to a log file and a live log window.

Usage:
    python -m queuetray.queuetray_tray [--server-exe PATH] [--config PATH]
"""

import argparse
import logging
import sys

from queuetray.app_context import AppContext
from queuetray.config_store import DEFAULT_CONFIG_PATH, DEFAULT_LOG_PATH, default_server_exe
from queuetray.tray_app import QueueTray


def build_parser():
    parser = argparse.ArgumentParser(description="API Queue Server tray supervisor")
    parser.add_argument(
        "--server-exe",
        default=str(default_server_exe()),
        help="Server executable to supervise (default: %(default)s)",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help="JSON config file holding the delay (default: %(default)s)",
    )
    parser.add_argument(
        "--log-file",
        default=str(DEFAULT_LOG_PATH),
        help="Append-only server log file (default: %(default)s)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.info("API Queue Server Tray starting...")

    ctx = AppContext(
        server_command=[args.server_exe],
        config_path=args.config,
        log_path=args.log_file,
    )
    app = QueueTray(sys.argv[:1], ctx)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
