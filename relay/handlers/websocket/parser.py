"""Client payload parsing for the WebSocket handler."""

from __future__ import annotations

import json
from typing import Any


def parse_client_message(raw: str | bytes) -> dict[str, Any]:
    """Decode one client frame into a message dict with a normalized ``type``."""

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("Message must be UTF-8 encoded.") from exc

    text = (raw or "").strip()
    if not text:
        raise ValueError("Empty message.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError("Message must be valid JSON.") from exc

    if not isinstance(data, dict):
        raise ValueError("Message must be a JSON object.")

    msg_type = data.get("type")
    if not msg_type or not isinstance(msg_type, str) or not msg_type.strip():
        raise ValueError("Missing 'type' in message.")

    data["type"] = msg_type.strip().lower()
    return data


__all__ = ["parse_client_message"]
