"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- upstream: endpoint, model and setup handshake parameters
- secrets: credential sources for the upstream transport
- keepalive: ping interval, dead-connection timeout, reconnect delays
- history: conversation log cap
- websocket: close codes
- logging / telemetry: ambient configuration

``validate_env()`` checks cross-field consistency once at startup.
"""

from __future__ import annotations

import logging
import os

from .upstream import (
    UPSTREAM_URL,
    UPSTREAM_MODEL,
    UPSTREAM_RESPONSE_MODALITY,
    UPSTREAM_VOICE,
    UPSTREAM_AUDIO_MIME_TYPE,
    UPSTREAM_OPEN_TIMEOUT_S,
    SYSTEM_PERSONA,
)
from .secrets import (
    GOOGLE_APPLICATION_CREDENTIALS,
    GOOGLE_AUTH_SCOPE,
    GEMINI_API_KEY,
)
from .keepalive import (
    KEEPALIVE_INTERVAL_S,
    KEEPALIVE_TIMEOUT_S,
    KEEPALIVE_CLOSE_CODE,
    KEEPALIVE_CLOSE_REASON,
    RECONNECT_DELAY_S,
    RECONNECT_FALLBACK_DELAY_S,
)
from .history import HISTORY_MAX_ENTRIES, HISTORY_LOG_PREVIEW_CHARS, HISTORY_LOG_UTTERANCES
from .websocket import (
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_ABNORMAL_CODE,
    WS_CLOSE_SESSION_END_REASON,
    WS_CLOSE_SUPERSEDED_REASON,
)

logger = logging.getLogger(__name__)


def validate_env() -> None:
    """Validate configuration once during startup."""
    errors: list[str] = []
    if KEEPALIVE_INTERVAL_S <= 0:
        errors.append("KEEPALIVE_INTERVAL_S must be positive")
    if KEEPALIVE_TIMEOUT_S <= KEEPALIVE_INTERVAL_S:
        errors.append("KEEPALIVE_TIMEOUT_S must be greater than KEEPALIVE_INTERVAL_S")
    if RECONNECT_DELAY_S < 0 or RECONNECT_FALLBACK_DELAY_S < 0:
        errors.append("reconnect delays must not be negative")
    if HISTORY_MAX_ENTRIES <= 0:
        errors.append("HISTORY_MAX_ENTRIES must be positive")
    if not 4000 <= KEEPALIVE_CLOSE_CODE <= 4999:
        errors.append("KEEPALIVE_CLOSE_CODE must be in the application range 4000-4999")
    if errors:
        raise ValueError("; ".join(errors))

    # Credentials are resolved per connection attempt, so absence is not fatal here
    if not GEMINI_API_KEY and not os.path.isfile(GOOGLE_APPLICATION_CREDENTIALS):
        logger.warning(
            "no upstream credentials configured: set GEMINI_API_KEY or "
            "GOOGLE_APPLICATION_CREDENTIALS (%s not found)",
            GOOGLE_APPLICATION_CREDENTIALS,
        )


__all__ = [
    "UPSTREAM_URL",
    "UPSTREAM_MODEL",
    "UPSTREAM_RESPONSE_MODALITY",
    "UPSTREAM_VOICE",
    "UPSTREAM_AUDIO_MIME_TYPE",
    "UPSTREAM_OPEN_TIMEOUT_S",
    "SYSTEM_PERSONA",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "GOOGLE_AUTH_SCOPE",
    "GEMINI_API_KEY",
    "KEEPALIVE_INTERVAL_S",
    "KEEPALIVE_TIMEOUT_S",
    "KEEPALIVE_CLOSE_CODE",
    "KEEPALIVE_CLOSE_REASON",
    "RECONNECT_DELAY_S",
    "RECONNECT_FALLBACK_DELAY_S",
    "HISTORY_MAX_ENTRIES",
    "HISTORY_LOG_PREVIEW_CHARS",
    "HISTORY_LOG_UTTERANCES",
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_SESSION_END_REASON",
    "WS_CLOSE_SUPERSEDED_REASON",
    "validate_env",
]
