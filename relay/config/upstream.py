"""Upstream (Gemini Live) endpoint and session setup configuration.

Values here shape the one-time ``setup`` handshake sent on every upstream
connection and the URL the relay dials. The persona preamble is prepended to
the rendered conversation history to form the system instruction, which is how
context survives a reconnect.
"""

from __future__ import annotations

import os

from ..utils.env import env_str

UPSTREAM_URL = env_str(
    "UPSTREAM_URL",
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1alpha.GenerativeService.BidiGenerateContent",
)
UPSTREAM_MODEL = env_str("UPSTREAM_MODEL", "gemini-2.5-flash-native-audio-preview-09-2025")
UPSTREAM_RESPONSE_MODALITY = env_str("UPSTREAM_RESPONSE_MODALITY", "AUDIO").upper()
UPSTREAM_VOICE = env_str("UPSTREAM_VOICE", "Zephyr")
UPSTREAM_AUDIO_MIME_TYPE = env_str("UPSTREAM_AUDIO_MIME_TYPE", "audio/pcm")

# Seconds allowed for the upstream WebSocket opening handshake
UPSTREAM_OPEN_TIMEOUT_S = float(os.getenv("UPSTREAM_OPEN_TIMEOUT_S", "10"))

SYSTEM_PERSONA = env_str(
    "SYSTEM_PERSONA",
    "You are a friendly assistant that answers clearly and concisely. "
    "Stay consistent with the conversation history and avoid repeating "
    "information that was already discussed.",
)

__all__ = [
    "UPSTREAM_URL",
    "UPSTREAM_MODEL",
    "UPSTREAM_RESPONSE_MODALITY",
    "UPSTREAM_VOICE",
    "UPSTREAM_AUDIO_MIME_TYPE",
    "UPSTREAM_OPEN_TIMEOUT_S",
    "SYSTEM_PERSONA",
]
