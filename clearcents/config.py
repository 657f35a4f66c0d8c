"""Configuration management for ClearCents.

This module centralizes paths, the active plan tier and environment
variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in clearcents/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("CLEARCENTS_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("CLEARCENTS_DB_PATH", DATA_DIR / "clearcents.db")
).resolve()

# Plan tier used when none is passed explicitly
DEFAULT_PLAN = os.getenv("CLEARCENTS_PLAN", "free")
