"""Loaders for the JSON settings shipped beside this module."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

SETTINGS_DIR = Path(__file__).parent


def load_config(config_name: str) -> Dict[str, Any]:
    """Read ``<config_name>.json`` from the settings directory.

    Raises:
        FileNotFoundError: If there is no such settings file
    """
    config_path = SETTINGS_DIR / f"{config_name}.json"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    with open(config_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_plans_config() -> Dict[str, Any]:
    return load_config('plans')


def get_plan_tiers() -> Dict[str, Dict[str, Any]]:
    """Limit entries keyed by tier name; a null limit means unlimited."""
    return get_plans_config().get('tiers') or {}


def get_default_categories() -> List[Dict[str, str]]:
    """Predefined categories (name, icon, color) offered to new users."""
    entries = get_plans_config().get('default_categories') or []
    return [entry for entry in entries if entry.get('name')]
