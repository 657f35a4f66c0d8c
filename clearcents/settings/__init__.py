"""Packaged configuration files and loaders.

Plan limits and the predefined category set are stored in JSON files
beside this module so they can be changed without code changes.
"""

from .defaults import get_default_categories, get_plan_tiers, get_plans_config, load_config

__all__ = ['load_config', 'get_plans_config', 'get_plan_tiers', 'get_default_categories']
