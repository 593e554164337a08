"""Environment-driven settings, read at call time."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_DEFAULT_COMMANDS_DIR = "commands"
_DEFAULT_LOG_LEVEL = "INFO"


def commands_dir() -> Path:
    """Directory scanned for command files (relative to the working directory)."""
    return Path(os.environ.get("RAPID_MCP_COMMANDS_DIR", _DEFAULT_COMMANDS_DIR))


def log_level() -> int:
    name = os.environ.get("RAPID_MCP_LOG_LEVEL", _DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
