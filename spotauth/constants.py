from __future__ import annotations

import logging
from pathlib import Path

LOGGER = logging.getLogger("spotauth")
APP_VERSION = "0.1.0"

CONFIG_FILE = Path(__file__).resolve().parent.parent / "config.json"
ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
