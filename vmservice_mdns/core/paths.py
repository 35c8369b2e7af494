"""Centralized path constants for vmservice-mdns."""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Configuration
CONFIG_PATH = PROJECT_ROOT / "config.txt"

# User-specific state (allows running from read-only project directories)
_USER_STATE_ENV = os.environ.get("VMSERVICE_MDNS_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".vmservice_mdns")
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"


__all__ = [
    'PROJECT_ROOT',
    'CONFIG_PATH',
    'USER_STATE_DIR',
    'USER_CONFIG_OVERRIDES_DIR',
]
