"""Per-connection keepalive watchdog.

Each upstream connection gets a ``KeepaliveWatchdog`` that:

1. Sends a WebSocket ping every ``interval_s`` while the connection is open
2. Records the pong as the session's last acknowledgment
3. Closes the connection when no pong has been seen for ``timeout_s``

The close is the ordinary upstream close, so the reconnect sequence that
follows is the same one any other upstream drop triggers. A single missed
pong never closes the connection; only the elapsed time since the last pong
counts.

Usage:
    watchdog = KeepaliveWatchdog(session, connection)
    watchdog.start()

    # On close or teardown:
    watchdog.cancel()
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import (
    KEEPALIVE_CLOSE_CODE,
    KEEPALIVE_CLOSE_REASON,
    KEEPALIVE_INTERVAL_S,
    KEEPALIVE_TIMEOUT_S,
)
from ..telemetry import get_metrics
from .connection import UpstreamConnection

if TYPE_CHECKING:
    from ..session.state import SessionState

logger = logging.getLogger(__name__)


class KeepaliveWatchdog:
    """Probes one upstream connection and closes it once it goes silent.

    Attributes:
        _session: Session whose probe/ack timestamps are maintained.
        _connection: The upstream connection this watchdog is bound to.
        _interval_s: Seconds between pings.
        _timeout_s: Seconds without a pong before the connection is closed.
    """

    def __init__(
        self,
        session: SessionState,
        connection: UpstreamConnection,
        *,
        interval_s: float = KEEPALIVE_INTERVAL_S,
        timeout_s: float = KEEPALIVE_TIMEOUT_S,
        close_code: int = KEEPALIVE_CLOSE_CODE,
        close_reason: str = KEEPALIVE_CLOSE_REASON,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session
        self._connection = connection
        self._interval_s = float(interval_s)
        self._timeout_s = float(timeout_s)
        self._close_code = close_code
        self._close_reason = close_reason
        self._clock = clock
        self._stopped = False
        self._fired = False
        self._task: asyncio.Task | None = None

    @property
    def fired(self) -> bool:
        """True once this watchdog closed its connection for staleness."""
        return self._fired

    @property
    def stopped(self) -> bool:
        return self._stopped

    def start(self) -> asyncio.Task:
        """Start the probe loop (idempotent)."""
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
        return self._task

    def cancel(self) -> None:
        """Stop probing. Safe to call repeatedly and from the loop's own close path."""
        if self._stopped:
            return
        self._stopped = True
        task = self._task
        if task is None or task.done() or self._fired:
            return
        if task is asyncio.current_task():
            return
        task.cancel()

    def record_ack(self) -> None:
        """Record a pong for the bound connection."""
        if self._stopped or not self._session.is_current(self._connection):
            return
        self._session.last_ack_at = self._clock()

    async def _loop(self) -> None:
        try:
            while not self._stopped:
                await asyncio.sleep(self._interval_s)
                if self._stopped or not self._session.is_current(self._connection):
                    break
                if not self._connection.is_open:
                    continue

                now = self._clock()
                self._session.last_probe_at = now
                await self._connection.ping(self.record_ack)

                elapsed = now - self._session.last_ack_at
                if elapsed > self._timeout_s:
                    await self._expire(elapsed)
                    break
                logger.debug("keepalive ping sent (last pong %.0fs ago)", elapsed)
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.warning("keepalive watchdog exiting due to unexpected error", exc_info=True)

    async def _expire(self, elapsed: float) -> None:
        self._fired = True
        get_metrics().keepalive_timeouts_total.add(1)
        logger.warning(
            "no pong from upstream for %.0fs (limit %.0fs); closing connection",
            elapsed,
            self._timeout_s,
        )
        await self._connection.close(self._close_code, self._close_reason)


__all__ = ["KeepaliveWatchdog"]
