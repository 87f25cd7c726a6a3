"""WebSocket handler exports.

``manager`` is imported directly by the server; it depends on the session
registry, which in turn uses the helpers exported here.
"""

from .disconnects import is_expected_disconnect
from .errors import send_error
from .helpers import cancel_task, safe_send_json, safe_send_text
from .parser import parse_client_message

__all__ = [
    "is_expected_disconnect",
    "send_error",
    "cancel_task",
    "safe_send_json",
    "safe_send_text",
    "parse_client_message",
]
