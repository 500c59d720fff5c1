"""
Heracles configuration.

Provides:
- Pydantic-based process settings (environment variables, .env files)
- The YAML dashboards loader
"""

from heracles.config.loader import load_dashboards, parse_dashboards
from heracles.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
    "load_dashboards",
    "parse_dashboards",
]
