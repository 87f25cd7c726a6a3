"""Exception classification helpers for metrics and telemetry labels."""

from __future__ import annotations

from .credentials import CredentialError
from .session import SessionClosedError

ERROR_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (CredentialError, "credential"),
    (SessionClosedError, "session_closed"),
    (TimeoutError, "timeout"),
    (ConnectionError, "connection"),
    (OSError, "network"),
    (ValueError, "malformed"),
)

def classify_error(exc: BaseException) -> str:
    """Map an exception to a metric-friendly category label."""

    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "unknown"

__all__ = ["ERROR_CATEGORIES", "classify_error"]
