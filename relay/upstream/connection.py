"""Handle for one upstream connection attempt.

A session replaces its ``UpstreamConnection`` on every reconnect. The
``generation`` stamped at creation lets every callback tell whether it still
belongs to the session's current connection.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed

if TYPE_CHECKING:
    from .watchdog import KeepaliveWatchdog

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class UpstreamConnection:
    """Owns the transport of one upstream attempt and its watchdog/task handles.

    Attributes:
        generation: Session epoch this connection was installed for.
        attempt: Reconnect-attempt number (0 for the session's first connection).
        credential_method: "oauth" or "api_key".
        transport: Open client websocket, set by ``attach``.
        state: ConnectionState of the transport.
        watchdog: Keepalive watchdog bound to this connection.
        task: Task running open + pump for this connection.
    """

    def __init__(self, generation: int, attempt: int, credential_method: str) -> None:
        self.generation = generation
        self.attempt = attempt
        self.credential_method = credential_method
        self.transport: Any = None
        self.state = ConnectionState.CONNECTING
        self.watchdog: KeepaliveWatchdog | None = None
        self.task: asyncio.Task | None = None

    def __repr__(self) -> str:
        return (
            f"UpstreamConnection(generation={self.generation}, attempt={self.attempt}, "
            f"method={self.credential_method}, state={self.state.value})"
        )

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN and self.transport is not None

    def attach(self, transport: Any) -> None:
        self.transport = transport

    def mark_open(self) -> None:
        if self.state == ConnectionState.CONNECTING:
            self.state = ConnectionState.OPEN

    def mark_closed(self) -> None:
        self.state = ConnectionState.CLOSED

    async def send_json(self, payload: dict[str, Any]) -> bool:
        """Send a JSON frame; return False when the transport is not open."""
        if not self.is_open:
            return False
        try:
            await self.transport.send(json.dumps(payload))
        except ConnectionClosed:
            logger.info("upstream send skipped: connection already closed")
            return False
        return True

    async def ping(self, on_ack: Callable[[], None]) -> bool:
        """Send a keepalive ping; ``on_ack`` runs when the matching pong arrives."""
        if not self.is_open:
            return False
        try:
            pong_waiter = await self.transport.ping()
        except ConnectionClosed:
            return False

        def _done(fut: asyncio.Future) -> None:
            if fut.cancelled() or fut.exception() is not None:
                return
            on_ack()

        pong_waiter.add_done_callback(_done)
        return True

    async def close(self, code: int, reason: str) -> None:
        """Close the transport once; later calls are no-ops."""
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return
        self.state = ConnectionState.CLOSING
        if self.transport is None:
            return
        with contextlib.suppress(Exception):
            await self.transport.close(code=code, reason=reason)


__all__ = ["ConnectionState", "UpstreamConnection"]
