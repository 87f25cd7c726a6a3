"""Upstream wire shapes for the Live bidirectional API.

Outbound:
    {"setup": {...}}                                        once, on open
    {"realtime_input": {"media_chunks": [{mime_type, data}]}}  audio
    {"realtime_input": {}}                                  end of turn
    {"interrupt": {}}                                       barge-in

Inbound frames of interest carry ``serverContent`` with ``modelTurn.parts``
and/or ``turnComplete``.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from ..config import (
    SYSTEM_PERSONA,
    UPSTREAM_MODEL,
    UPSTREAM_VOICE,
    UPSTREAM_AUDIO_MIME_TYPE,
    UPSTREAM_RESPONSE_MODALITY,
)
from ..session.history import ConversationLog

logger = logging.getLogger(__name__)

END_OF_TURN: dict[str, Any] = {"realtime_input": {}}
INTERRUPT: dict[str, Any] = {"interrupt": {}}

_TEXT_MIME_TYPE = "text/plain"


def build_system_instruction(history: ConversationLog, persona: str = SYSTEM_PERSONA) -> str:
    return persona + history.render()


def build_setup_message(system_text: str) -> dict[str, Any]:
    return {
        "setup": {
            "model": f"models/{UPSTREAM_MODEL}",
            "generation_config": {
                "response_modalities": [UPSTREAM_RESPONSE_MODALITY],
                "speech_config": {
                    "voice_config": {
                        "prebuilt_voice_config": {"voice_name": UPSTREAM_VOICE},
                    },
                },
            },
            "system_instruction": {"parts": [{"text": system_text}]},
        }
    }


def build_audio_chunk(data: str) -> dict[str, Any]:
    return {
        "realtime_input": {
            "media_chunks": [{"mime_type": UPSTREAM_AUDIO_MIME_TYPE, "data": data}],
        }
    }


def _decode_inline_text(inline: dict[str, Any]) -> str | None:
    if inline.get("mimeType") != _TEXT_MIME_TYPE:
        return None
    data = inline.get("data")
    if not isinstance(data, str):
        return None
    try:
        padded = data + "=" * (-len(data) % 4)
        return base64.b64decode(padded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.debug("inline text part could not be decoded; skipping")
        return None


def extract_text_fragments(server_content: dict[str, Any]) -> list[str]:
    """Collect the text carried by ``modelTurn.parts`` in order.

    Plain ``text`` parts and ``inlineData`` parts with a ``text/plain`` mime
    type both count; other parts (audio) are ignored.
    """
    model_turn = server_content.get("modelTurn")
    if not isinstance(model_turn, dict):
        return []
    parts = model_turn.get("parts")
    if not isinstance(parts, list):
        return []

    fragments: list[str] = []
    for part in parts:
        if not isinstance(part, dict):
            continue
        text = part.get("text")
        if isinstance(text, str) and text:
            fragments.append(text)
        inline = part.get("inlineData")
        if isinstance(inline, dict):
            decoded = _decode_inline_text(inline)
            if decoded:
                fragments.append(decoded)
    return fragments


__all__ = [
    "END_OF_TURN",
    "INTERRUPT",
    "build_audio_chunk",
    "build_setup_message",
    "build_system_instruction",
    "extract_text_fragments",
]
