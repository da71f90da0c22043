"""Core MongoMCP utilities.

This module exports core utilities for use throughout the application.
"""

from mongomcp.core.config import Settings, get_settings
from mongomcp.core.logging import LoggingContext, configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggingContext",
]
