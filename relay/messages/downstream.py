"""Router for frames arriving from the downstream client.

Message Types:
    audio_chunk     - {"audio": base64 PCM}; forwarded only while upstream is open
    turn_complete   - end of the user's turn; commits the user transcript
    interrupt       - barge-in; forwarded only while upstream is open
    clear_history   - resets the conversation log and accumulators
    user_transcript - {"text": str}; accumulates the user utterance

Audio arriving while the upstream is not open is dropped without notice.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from ..handlers.websocket.helpers import safe_send_json
from ..handlers.websocket.parser import parse_client_message
from ..session.state import SessionState
from ..telemetry import get_metrics
from ..upstream.protocol import END_OF_TURN, INTERRUPT, build_audio_chunk
from .transcript import flush_user_text

logger = logging.getLogger(__name__)

MessageHandlerFn = Callable[[SessionState, dict[str, Any]], Awaitable[None]]


async def _handle_audio_chunk(session: SessionState, msg: dict[str, Any]) -> None:
    connection = session.upstream
    if connection is None or not connection.is_open:
        return
    audio = msg.get("audio")
    if not isinstance(audio, str) or not audio:
        logger.debug("audio_chunk without audio payload ignored")
        return
    session.pending_audio.append(audio)
    await connection.send_json(build_audio_chunk(audio))


async def _handle_turn_complete(session: SessionState, msg: dict[str, Any]) -> None:
    connection = session.upstream
    if connection is None or not connection.is_open:
        return
    await connection.send_json(END_OF_TURN)
    flush_user_text(session)
    session.pending_audio.clear()


async def _handle_interrupt(session: SessionState, msg: dict[str, Any]) -> None:
    connection = session.upstream
    if connection is None or not connection.is_open:
        return
    logger.info("interrupt forwarded upstream")
    await connection.send_json(INTERRUPT)


async def _handle_clear_history(session: SessionState, msg: dict[str, Any]) -> None:
    session.reset_conversation()
    logger.info("history cleared")
    await safe_send_json(session.websocket, {"type": "history_cleared"})


async def _handle_user_transcript(session: SessionState, msg: dict[str, Any]) -> None:
    text = msg.get("text")
    if isinstance(text, str) and text:
        session.append_user_transcript(text)


_DOWNSTREAM_HANDLERS: dict[str, MessageHandlerFn] = {
    "audio_chunk": _handle_audio_chunk,
    "turn_complete": _handle_turn_complete,
    "interrupt": _handle_interrupt,
    "clear_history": _handle_clear_history,
    "user_transcript": _handle_user_transcript,
}


async def handle_downstream_message(session: SessionState, raw: str | bytes) -> None:
    """Parse one client frame and dispatch it; malformed frames are dropped."""
    try:
        msg = parse_client_message(raw)
    except ValueError as exc:
        logger.warning("malformed client message dropped: %s", exc)
        get_metrics().malformed_messages_total.add(1, {"direction": "downstream"})
        return

    if session.closed or session.upstream is None:
        return

    msg_type = msg["type"]
    handler = _DOWNSTREAM_HANDLERS.get(msg_type)
    if handler is None:
        logger.debug("unknown client message type ignored: %s", msg_type)
        return
    await handler(session, msg)


__all__ = ["handle_downstream_message"]
