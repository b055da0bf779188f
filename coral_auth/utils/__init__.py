"""Utility modules for coral-auth."""

from coral_auth.utils.logging import LogContext, debug_enabled, get_logger, setup_logging

__all__ = [
    "get_logger",
    "LogContext",
    "setup_logging",
    "debug_enabled",
]
