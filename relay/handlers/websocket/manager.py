"""Primary downstream WebSocket connection handler.

One call per client connection:

1. Accept the connection and register a session (which brings up its first
   upstream connection)
2. Bind the session id to the logging context; tasks spawned for the session
   inherit it
3. Loop receiving frames and hand each to the downstream router
4. Tear the session down when the client leaves or the loop fails

A failure here ends this session only; other sessions are unaffected.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import WebSocket, WebSocketDisconnect

from ...logging import log_context
from ...messages.downstream import handle_downstream_message
from ...session.state import SessionState
from ...telemetry import capture_error
from ..instances import session_registry
from .disconnects import is_expected_disconnect

logger = logging.getLogger(__name__)


async def _receive_frame(ws: WebSocket) -> str | bytes:
    """Receive one text or binary frame; raise WebSocketDisconnect on close."""
    message = await ws.receive()
    if message["type"] == "websocket.disconnect":
        raise WebSocketDisconnect(code=message.get("code", 1000), reason=message.get("reason"))
    text = message.get("text")
    if text is not None:
        return text
    return message.get("bytes") or b""


async def _message_loop(ws: WebSocket, session: SessionState) -> None:
    while True:
        raw = await _receive_frame(ws)
        await handle_downstream_message(session, raw)


async def handle_websocket_connection(ws: WebSocket) -> None:
    """Serve one downstream client until it disconnects.

    Args:
        ws: The incoming WebSocket connection from FastAPI.
    """
    session_id = uuid.uuid4().hex
    with log_context(session_id=session_id):
        await ws.accept()
        session: SessionState | None = None
        try:
            session = await session_registry.connect(ws, session_id=session_id)
            await _message_loop(ws, session)
        except WebSocketDisconnect:
            pass
        except Exception as exc:  # noqa: BLE001
            if not is_expected_disconnect(exc):
                logger.exception("WebSocket error")
                capture_error(exc, session_id=session_id)
        finally:
            if session is not None:
                await session_registry.disconnect(session)


__all__ = ["handle_websocket_connection"]
