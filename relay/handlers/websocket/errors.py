"""Shared response helper for WebSocket error envelopes.

All error envelopes follow one JSON structure:

    {
        "type": "error",
        "error_code": "upstream_unavailable",  # Machine-readable code
        "message": "Human-readable description",
        ...extra fields
    }

Error codes used in the relay:
    - upstream_error: upstream transport failed to open or errored
    - upstream_unavailable: reconnect attempts exhausted
"""

from __future__ import annotations

from typing import Any

from fastapi import WebSocket

from .helpers import safe_send_json


async def send_error(
    ws: WebSocket,
    *,
    error_code: str,
    message: str,
    extra: dict[str, Any] | None = None,
) -> bool:
    """Send a structured error envelope; False when the client is gone."""
    payload: dict[str, Any] = {
        "type": "error",
        "error_code": error_code,
        "message": message,
    }
    if extra:
        payload.update(extra)
    return await safe_send_json(ws, payload)


__all__ = ["send_error"]
