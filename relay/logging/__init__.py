"""Logging helpers and context utilities."""

from .context import (
    current_session_id,
    install_log_context,
    log_context,
    reset_log_context,
    set_log_context,
)
from .setup import configure_logging

__all__ = [
    "configure_logging",
    "current_session_id",
    "install_log_context",
    "log_context",
    "reset_log_context",
    "set_log_context",
]
