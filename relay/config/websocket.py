"""WebSocket close codes shared by the downstream and upstream sides.

Close Codes (RFC 6455):
    1000: Normal closure (session teardown, superseded connection)
    1006: Abnormal closure (reported when an upstream open fails)
"""

from __future__ import annotations

import os

WS_CLOSE_NORMAL_CODE = int(os.getenv("WS_CLOSE_NORMAL_CODE", "1000"))
WS_CLOSE_ABNORMAL_CODE = 1006
WS_CLOSE_SESSION_END_REASON = os.getenv("WS_CLOSE_SESSION_END_REASON", "session_closed")
WS_CLOSE_SUPERSEDED_REASON = "superseded"

__all__ = [
    "WS_CLOSE_NORMAL_CODE",
    "WS_CLOSE_ABNORMAL_CODE",
    "WS_CLOSE_SESSION_END_REASON",
    "WS_CLOSE_SUPERSEDED_REASON",
]
