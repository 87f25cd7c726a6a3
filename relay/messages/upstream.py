"""Router for frames arriving from the upstream service.

Assistant text is captured from ``serverContent.modelTurn.parts`` and
committed to the conversation log when ``serverContent.turnComplete`` is
seen. Every decodable frame is then forwarded to the client unchanged:

    {"type": "gemini_response", "data": <upstream frame>}

Frames from a superseded connection are discarded without side effects.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..handlers.websocket.helpers import safe_send_json
from ..session.state import SessionState
from ..telemetry import get_metrics
from ..upstream.connection import UpstreamConnection
from ..upstream.protocol import extract_text_fragments
from .transcript import flush_assistant_text

logger = logging.getLogger(__name__)


def decode_upstream_frame(raw: str | bytes) -> dict[str, Any]:
    """Decode one upstream frame into a JSON object."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("upstream frame is not UTF-8") from exc
    try:
        message = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"upstream frame is not valid JSON: {exc}") from exc
    if not isinstance(message, dict):
        raise ValueError("upstream frame is not a JSON object")
    return message


def _capture_assistant_text(session: SessionState, message: dict[str, Any]) -> None:
    server_content = message.get("serverContent")
    if not isinstance(server_content, dict):
        return
    for fragment in extract_text_fragments(server_content):
        session.append_assistant_fragment(fragment)
    if server_content.get("turnComplete"):
        flush_assistant_text(session)


async def handle_upstream_message(
    session: SessionState,
    connection: UpstreamConnection,
    raw: str | bytes,
) -> None:
    if not session.is_current(connection):
        logger.debug("frame from superseded upstream discarded")
        return

    try:
        message = decode_upstream_frame(raw)
    except ValueError as exc:
        logger.error("failed to process upstream message: %s", exc)
        get_metrics().malformed_messages_total.add(1, {"direction": "upstream"})
        return

    _capture_assistant_text(session, message)

    if session.closed:
        return
    await safe_send_json(session.websocket, {"type": "gemini_response", "data": message})


__all__ = ["decode_upstream_frame", "handle_upstream_message"]
