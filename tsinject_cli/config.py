"""Configuration paths and style defaults for tsinject."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("TSINJECT_HOME", str(Path.home() / ".tsinject"))).expanduser()
BACKUP_DIR = BASE_DIR / "backups"
CONFIG_FILE = BASE_DIR / "config.toml"
PROJECT_CONFIG_NAME = "tsinject.toml"
SUPPORTED_EXTENSIONS = {".ts", ".tsx", ".mts", ".cts"}

# Style used for generated code; overridable via the [style] table of the TOML files
DEFAULT_INDENT = "  "
DEFAULT_QUOTE = "'"
DEFAULT_USAGE_HINT = True
