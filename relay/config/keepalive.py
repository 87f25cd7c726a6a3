"""Upstream keepalive and reconnect timing.

Keepalive:
    KEEPALIVE_INTERVAL_S: How often a WebSocket ping is sent upstream.
    KEEPALIVE_TIMEOUT_S: Seconds without a pong before the connection is
        considered dead and force-closed. Must exceed the interval so a single
        missed pong never triggers a close.

Close code (RFC 6455 application range):
    4000: keepalive timeout, closed by the relay itself.

Reconnect:
    RECONNECT_DELAY_S: Delay before the first reconnect attempt after an
        upstream close (ephemeral credentials preferred).
    RECONNECT_FALLBACK_DELAY_S: Delay before the single static-key retry when
        the first attempt fails outright. No attempts follow this one.
"""

from __future__ import annotations

import os

KEEPALIVE_INTERVAL_S = float(os.getenv("KEEPALIVE_INTERVAL_S", "20"))
KEEPALIVE_TIMEOUT_S = float(os.getenv("KEEPALIVE_TIMEOUT_S", "45"))
KEEPALIVE_CLOSE_CODE = int(os.getenv("KEEPALIVE_CLOSE_CODE", "4000"))
KEEPALIVE_CLOSE_REASON = os.getenv("KEEPALIVE_CLOSE_REASON", "keepalive_timeout")

RECONNECT_DELAY_S = float(os.getenv("RECONNECT_DELAY_S", "3"))
RECONNECT_FALLBACK_DELAY_S = float(os.getenv("RECONNECT_FALLBACK_DELAY_S", "2"))

__all__ = [
    "KEEPALIVE_INTERVAL_S",
    "KEEPALIVE_TIMEOUT_S",
    "KEEPALIVE_CLOSE_CODE",
    "KEEPALIVE_CLOSE_REASON",
    "RECONNECT_DELAY_S",
    "RECONNECT_FALLBACK_DELAY_S",
]
