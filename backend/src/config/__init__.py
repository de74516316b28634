"""
Configuration module for the CareLedger backend.

Provides centralized configuration for:
- Compliance check windows, cron secret and rate limiting
- Session management
"""

from backend.src.config.settings import AppSettings, get_settings
from backend.src.config.session import SessionSettings, get_session_settings

__all__ = [
    "AppSettings",
    "get_settings",
    "SessionSettings",
    "get_session_settings",
]
