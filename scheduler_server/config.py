# -*- coding: utf-8 -*-
"""Runtime settings for the scheduler, configurable via environment variables."""
import os
from pathlib import Path

# Data files live together in one application-private directory
DEFAULT_DATA_DIR = Path.home() / ".scheduler"
EVENTS_FILE_NAME = "unified_events.json"
TODOS_FILE_NAME = "todos.json"

LOG_LEVEL = os.getenv("SCHEDULER_LOG_LEVEL", "INFO")

# REST service location
SCHEDULER_SERVICE_URL = os.getenv("SCHEDULER_SERVICE_URL", "http://localhost:8003")
SCHEDULER_SERVICE_PORT = int(os.getenv("SCHEDULER_SERVICE_PORT", "8003"))

# Timeout settings for fast operations (in seconds)
STANDARD_TIMEOUT = 30.0


def get_data_dir() -> Path:
    """Return the data directory, creating it if needed.

    ``SCHEDULER_DATA_DIR`` is read on every call so tests and tools can
    point the store somewhere else without reloading this module.
    """
    data_dir = Path(os.getenv("SCHEDULER_DATA_DIR", str(DEFAULT_DATA_DIR))).expanduser()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
