"""WebSocket communication utilities.

Every envelope the relay sends to a downstream client goes through
``safe_send_json``. A client that vanished mid-send is reported as ``False``
instead of an exception, so upstream callbacks never crash on a dead client.

Envelopes:
    Ready:          {"type": "ready", "historyRestored": bool, "reconnectCount": int}
    Reconnecting:   {"type": "reconnecting", "message": str, "reconnectCount": int}
    Passthrough:    {"type": "gemini_response", "data": {...}}
    History reset:  {"type": "history_cleared"}
    Error:          {"type": "error", "error_code": str, "message": str}
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any

from fastapi import WebSocket

from .disconnects import is_expected_disconnect

logger = logging.getLogger(__name__)


async def safe_send_text(ws: WebSocket, text: str) -> bool:
    """Send text to the client, returning False if the socket is gone.

    Args:
        ws: The downstream connection.
        text: Raw text to send.

    Returns:
        True if sent successfully, False if the client disconnected.
    """
    try:
        await ws.send_text(text)
    except Exception as exc:
        if not is_expected_disconnect(exc):
            raise
        logger.info("WebSocket disconnected while sending %s bytes", len(text))
        return False
    return True


async def safe_send_json(ws: WebSocket, payload: dict[str, Any]) -> bool:
    """Send a JSON payload, swallowing client disconnects."""
    return await safe_send_text(ws, json.dumps(payload))


async def cancel_task(task: asyncio.Task | None) -> None:
    """Cancel an asyncio task and await its completion.

    Safely handles None tasks, already-completed tasks and the calling task
    itself. Suppresses all exceptions during cancellation.
    """
    if not task or task.done() or task is asyncio.current_task():
        return
    task.cancel()
    with contextlib.suppress(Exception, asyncio.CancelledError):
        await task


__all__ = ["safe_send_text", "safe_send_json", "cancel_task"]
