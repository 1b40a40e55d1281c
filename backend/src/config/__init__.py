"""
Configuration module for the crisis line scheduling backend.

Provides centralized configuration for:
- Scheduling policy (timezone, daily shift windows)
- Batch write limits
- CORS origins
"""

from backend.src.config.settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "get_settings",
]
