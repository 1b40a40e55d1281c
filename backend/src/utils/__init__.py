"""
Utility modules for the scheduling backend.

- logging_config: Named loggers (api, services, db) with JSON/console output
"""

from backend.src.utils.logging_config import get_logger, init_logging

__all__ = [
    "get_logger",
    "init_logging",
]
