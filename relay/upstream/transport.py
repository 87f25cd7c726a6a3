"""Opens the upstream websocket for a resolved credential."""

from __future__ import annotations

import logging

from websockets.asyncio.client import ClientConnection, connect

from ..config import UPSTREAM_OPEN_TIMEOUT_S
from ..credentials import Credential

logger = logging.getLogger(__name__)


async def open_upstream_transport(credential: Credential) -> ClientConnection:
    """Connect to the upstream endpoint.

    The library's own keepalive is disabled; liveness is owned by
    ``KeepaliveWatchdog``. Audio responses can be large, so no frame size cap.
    """
    logger.info("upstream connect: %s (%s)", credential.redacted_url, credential.method)
    return await connect(
        credential.url,
        additional_headers=credential.headers or None,
        ping_interval=None,
        max_size=None,
        open_timeout=UPSTREAM_OPEN_TIMEOUT_S,
    )


__all__ = ["open_upstream_transport"]
