"""Logging context helpers for consistent structured fields.

The downstream connection handler binds its session id once; asyncio tasks
spawned while it is bound (upstream reader, watchdog, reconnect) copy the
context at creation, so their log lines carry the same id.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_SESSION_ID: ContextVar[str] = ContextVar("session_id", default="-")


def set_log_context(*, session_id: str | None = None) -> list[tuple[ContextVar[str], Token[str]]]:
    """Set log context values and return tokens for reset."""
    tokens: list[tuple[ContextVar[str], Token[str]]] = []
    if session_id is not None:
        tokens.append((_SESSION_ID, _SESSION_ID.set(session_id)))
    return tokens


def reset_log_context(tokens: list[tuple[ContextVar[str], Token[str]]]) -> None:
    """Reset log context values using tokens returned by set_log_context."""
    for var, token in tokens:
        var.reset(token)


def current_session_id() -> str:
    return _SESSION_ID.get()


@contextmanager
def log_context(*, session_id: str | None = None) -> Iterator[None]:
    """Context manager for applying log fields within a block."""
    tokens = set_log_context(session_id=session_id)
    try:
        yield
    finally:
        reset_log_context(tokens)


def install_log_context() -> None:
    """Install a LogRecord factory that injects context fields."""
    if getattr(install_log_context, "_installed", False):
        return

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.session_id = _SESSION_ID.get()
        return record

    logging.setLogRecordFactory(record_factory)
    install_log_context._installed = True  # type: ignore[attr-defined]


__all__ = [
    "current_session_id",
    "install_log_context",
    "log_context",
    "reset_log_context",
    "set_log_context",
]
