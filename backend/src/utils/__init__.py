"""
Utility modules for the CareLedger backend.

This package contains shared utilities used across the application:
- clock: Injectable UTC time source
- logging_config: Structured logging setup
- rate_limit: Shared slowapi limiter (import directly)
"""

from backend.src.utils.clock import Clock, fixed_clock, utc_now
from backend.src.utils.logging_config import get_logger, init_logging

__all__ = [
    "Clock",
    "fixed_clock",
    "utc_now",
    "get_logger",
    "init_logging",
]
