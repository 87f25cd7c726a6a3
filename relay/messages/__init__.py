"""Message routing between the downstream client and the upstream service.

downstream.py:
    Client frames: audio forwarding, turn boundaries, interrupts, history
    reset and user transcripts.

upstream.py:
    Upstream frames: assistant text capture, turn completion, passthrough to
    the client.
"""

from .downstream import handle_downstream_message
from .upstream import handle_upstream_message

__all__ = ["handle_downstream_message", "handle_upstream_message"]
