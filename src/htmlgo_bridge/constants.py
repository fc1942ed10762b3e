from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.toml")
ENV_PREFIX = "HTMLGO_"
APP_VERSION = "1.0.0"
