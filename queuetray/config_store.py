"""
Config Store: persisted delay setting with JSON I/O

Holds the location of the JSON config file and provides:
- Lazy load with fallback to defaults (missing, unreadable or invalid file)
- Wholesale save (no merge with what is on disk)
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Any

logger = logging.getLogger(__name__)

# Default delay passed to the server (milliseconds)
DEFAULT_DELAY_MS = 2000

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "queuetray"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"
DEFAULT_LOG_PATH = DEFAULT_CONFIG_DIR / "app.log"

# Supervised executable, looked up next to the package unless overridden
SERVER_EXE_ENV = "QUEUETRAY_SERVER_EXE"
SERVER_EXE_NAME = "api-queue-server.exe" if sys.platform == "win32" else "api-queue-server"


def default_server_exe() -> Path:
    """Path of the server executable (env override, else beside the package)."""
    override = os.environ.get(SERVER_EXE_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / SERVER_EXE_NAME


def default_config() -> Dict[str, Any]:
    return {"delay": DEFAULT_DELAY_MS}


def is_valid_delay(value) -> bool:
    """A delay is a non-negative int (bools are rejected even though they are ints)."""
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class ConfigStore:
    """Loads and saves the {"delay": ms} record."""

    def __init__(self, path=DEFAULT_CONFIG_PATH):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        """Read the config from disk. Any read or parse problem yields the default."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return default_config()
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.debug("Ignoring unreadable config %s: %s", self.path, exc)
            return default_config()

        if not isinstance(data, dict) or not is_valid_delay(data.get("delay")):
            logger.debug("Config %s has no usable delay, using default", self.path)
            return default_config()
        return {"delay": data["delay"]}

    def save(self, config: Dict[str, Any]) -> None:
        """Overwrite the config file with the given record.

        Raises ValueError for an invalid delay; OSError from the filesystem
        is left to the caller.
        """
        delay = config.get("delay")
        if not is_valid_delay(delay):
            raise ValueError(f"Invalid delay: {delay!r}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"delay": delay}, f, indent=2)

    def get_delay(self) -> int:
        return self.load()["delay"]
