"""Flush utterance accumulators into the conversation log."""

from __future__ import annotations

import logging

from ..config import HISTORY_LOG_PREVIEW_CHARS, HISTORY_LOG_UTTERANCES
from ..session.history import Role
from ..session.state import SessionState
from ..telemetry import get_metrics

logger = logging.getLogger(__name__)


def _preview(text: str) -> str:
    if len(text) <= HISTORY_LOG_PREVIEW_CHARS:
        return text
    return text[:HISTORY_LOG_PREVIEW_CHARS] + "..."


def record_utterance(session: SessionState, role: Role, text: str) -> bool:
    """Append a finished utterance to the session log; False when blank."""
    if not text:
        return False
    evicted = session.history.append(role, text)
    if HISTORY_LOG_UTTERANCES:
        logger.info('%s: "%s"', role, _preview(text))
    else:
        logger.info("%s utterance recorded (%s chars)", role, len(text))
    if evicted:
        get_metrics().history_evictions_total.add(evicted)
        logger.info("history trimmed: removed %s old messages", evicted)
    return True


def flush_user_text(session: SessionState) -> bool:
    return record_utterance(session, "user", session.take_user_text())


def flush_assistant_text(session: SessionState) -> bool:
    return record_utterance(session, "assistant", session.take_assistant_text())


__all__ = ["flush_assistant_text", "flush_user_text", "record_utterance"]
