"""
Core Module
Configuration, error taxonomy and logging shared by every layer.

Exports:
    Config: Settings, get_settings, COINS
    Errors: AlertServiceError, UpstreamUnavailable, StoreUnavailable,
            PersistenceError, AlertNotFound
    Logging: setup_logging
"""

from .config import Settings, get_settings, COINS
from .errors import (
    AlertServiceError,
    UpstreamUnavailable,
    StoreUnavailable,
    PersistenceError,
    AlertNotFound,
)
from .logger import setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "COINS",
    # Errors
    "AlertServiceError",
    "UpstreamUnavailable",
    "StoreUnavailable",
    "PersistenceError",
    "AlertNotFound",
    # Logging
    "setup_logging",
]
