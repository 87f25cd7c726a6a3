"""Upstream connection lifecycle: establish, open, pump, close, reconnect.

Flow for one upstream connection:

1. ``establish`` acquires a credential, installs a fresh
   ``UpstreamConnection`` as the session's current one (new epoch) and spawns
   its task.
2. The task opens the transport, sends the ``setup`` handshake carrying the
   persona plus the rendered conversation log, starts the keepalive watchdog
   and tells the client ``ready``.
3. Upstream frames are pumped into the router until the transport closes.
4. On close the watchdog stops, the client is told ``reconnecting`` and the
   bounded reconnect sequence from ``ReconnectPolicy`` runs.

A superseded connection (its generation no longer matches the session's) may
still close or deliver frames; all of those events are ignored. A closed
session ignores everything.

Downstream envelopes:
    {"type": "ready", "historyRestored": bool, "reconnectCount": int}
    {"type": "reconnecting", "message": str, "reconnectCount": int}
    {"type": "error", "error_code": str, "message": str}
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from websockets.exceptions import ConnectionClosed

from ..config import (
    KEEPALIVE_INTERVAL_S,
    KEEPALIVE_TIMEOUT_S,
    WS_CLOSE_ABNORMAL_CODE,
    WS_CLOSE_NORMAL_CODE,
    WS_CLOSE_SUPERSEDED_REASON,
)
from ..credentials import Credential, CredentialSupplier
from ..errors import SessionClosedError, classify_error
from ..handlers.websocket.errors import send_error
from ..handlers.websocket.helpers import safe_send_json
from ..session.state import SessionPhase, SessionState
from ..telemetry import add_breadcrumb, capture_error, get_metrics
from .connection import ConnectionState, UpstreamConnection
from .protocol import build_setup_message, build_system_instruction
from .retry import ReconnectPolicy
from .transport import open_upstream_transport
from .watchdog import KeepaliveWatchdog

logger = logging.getLogger(__name__)

Connector = Callable[[Credential], Awaitable[Any]]
UpstreamRouter = Callable[[SessionState, UpstreamConnection, Any], Awaitable[None]]


class UpstreamLifecycle:
    """Owns the connect/reconnect behavior shared by every session."""

    def __init__(
        self,
        *,
        router: UpstreamRouter,
        supplier: CredentialSupplier | None = None,
        connector: Connector = open_upstream_transport,
        policy: ReconnectPolicy | None = None,
        keepalive_interval_s: float = KEEPALIVE_INTERVAL_S,
        keepalive_timeout_s: float = KEEPALIVE_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._router = router
        self._supplier = supplier or CredentialSupplier()
        self._connector = connector
        self._policy = policy or ReconnectPolicy()
        self._keepalive_interval_s = keepalive_interval_s
        self._keepalive_timeout_s = keepalive_timeout_s
        self._clock = clock

    @property
    def policy(self) -> ReconnectPolicy:
        return self._policy

    # ============================================================================
    # Establish
    # ============================================================================
    async def establish(
        self,
        session: SessionState,
        *,
        prefer_ephemeral: bool = True,
    ) -> UpstreamConnection:
        """Create and install a new upstream connection for ``session``.

        Returns as soon as the connection task is spawned; the transport opens
        in the background.

        Raises:
            SessionClosedError: the downstream side is already gone.
            CredentialError: no credential could be produced.
        """
        if session.closed:
            raise SessionClosedError(session.session_id)

        credential = await self._supplier.acquire(prefer_ephemeral=prefer_ephemeral)
        if session.closed:
            raise SessionClosedError(session.session_id)

        previous = session.upstream
        generation, attempt = session.next_epoch()
        connection = UpstreamConnection(generation, attempt, credential.method)
        session.upstream = connection
        session.watchdog = None
        session.transition(SessionPhase.CONNECTING)

        if previous is not None:
            if previous.watchdog is not None:
                previous.watchdog.cancel()
            await previous.close(WS_CLOSE_NORMAL_CODE, WS_CLOSE_SUPERSEDED_REASON)

        logger.info(
            "upstream establish: generation=%s attempt=%s method=%s",
            generation,
            attempt,
            credential.method,
        )
        connection.task = asyncio.create_task(self._run(session, connection, credential))
        return connection

    # ============================================================================
    # Connection task
    # ============================================================================
    async def _run(
        self,
        session: SessionState,
        connection: UpstreamConnection,
        credential: Credential,
    ) -> None:
        try:
            transport = await self._connector(credential)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            await self._on_error(session, connection, exc)
            await self._on_close(session, connection, WS_CLOSE_ABNORMAL_CODE, str(exc))
            return

        connection.attach(transport)
        if not session.is_current(connection) or connection.state != ConnectionState.CONNECTING:
            await connection.close(WS_CLOSE_NORMAL_CODE, WS_CLOSE_SUPERSEDED_REASON)
            connection.mark_closed()
            return

        try:
            await self._on_open(session, connection)
            async for raw in transport:
                await self._router(session, connection, raw)
        except ConnectionClosed:
            pass
        except asyncio.CancelledError:
            connection.mark_closed()
            raise
        except Exception as exc:  # noqa: BLE001
            try:
                await self._on_error(session, connection, exc)
            finally:
                await connection.close(WS_CLOSE_NORMAL_CODE, "relay_error")

        await self._on_close(
            session,
            connection,
            getattr(transport, "close_code", None),
            getattr(transport, "close_reason", None),
        )

    async def _on_open(self, session: SessionState, connection: UpstreamConnection) -> None:
        connection.mark_open()
        session.transition(SessionPhase.OPEN)

        system_text = build_system_instruction(session.history)
        await connection.send_json(build_setup_message(system_text))
        if not session.is_current(connection):
            return

        now = self._clock()
        session.last_probe_at = now
        session.last_ack_at = now
        watchdog = KeepaliveWatchdog(
            session,
            connection,
            interval_s=self._keepalive_interval_s,
            timeout_s=self._keepalive_timeout_s,
            clock=self._clock,
        )
        connection.watchdog = watchdog
        session.watchdog = watchdog
        watchdog.start()

        restored = len(session.history)
        if restored:
            logger.info(
                "context restored: %s messages (%s characters)",
                restored,
                session.history.char_count(),
            )
        logger.info("upstream open (reconnect #%s)", connection.attempt)
        get_metrics().upstream_connects_total.add(1, {"method": connection.credential_method})
        add_breadcrumb(
            "upstream open",
            category="upstream",
            data={"generation": connection.generation, "attempt": connection.attempt},
        )

        await self._deliver(
            "ready",
            safe_send_json(
                session.websocket,
                {
                    "type": "ready",
                    "historyRestored": restored > 0,
                    "reconnectCount": session.reconnect_count,
                },
            ),
        )

    async def _deliver(self, envelope: str, send: Awaitable[bool]) -> None:
        """Await a downstream send; a failing client never stops the lifecycle."""
        try:
            await send
        except Exception:  # noqa: BLE001
            logger.warning("downstream %s envelope not delivered", envelope, exc_info=True)

    async def _on_error(
        self,
        session: SessionState,
        connection: UpstreamConnection,
        exc: BaseException,
    ) -> None:
        """Report a transport error; the close that follows drives recovery."""
        category = classify_error(exc)
        logger.error("upstream connection error (%s): %s", category, exc)
        get_metrics().upstream_errors_total.add(1, {"category": category})
        capture_error(exc, session_id=session.session_id, generation=connection.generation)
        if session.closed:
            return
        await self._deliver(
            "upstream_error",
            send_error(
                session.websocket,
                error_code="upstream_error",
                message=f"Upstream connection error: {exc}",
            ),
        )

    async def _on_close(
        self,
        session: SessionState,
        connection: UpstreamConnection,
        code: int | None,
        reason: str | None,
    ) -> None:
        connection.mark_closed()
        if connection.watchdog is not None:
            connection.watchdog.cancel()
        logger.info("upstream closed: %s - %s", code, reason or "no reason")

        if not session.is_current(connection):
            return
        session.watchdog = None
        if not session.transition(SessionPhase.CLOSING):
            return

        await self._deliver(
            "reconnecting",
            safe_send_json(
                session.websocket,
                {
                    "type": "reconnecting",
                    "message": f"Reconnecting to upstream... (attempt {session.reconnect_count + 1})",
                    "reconnectCount": session.reconnect_count,
                },
            ),
        )
        if not session.is_current(connection):
            return
        session.transition(SessionPhase.RECONNECT_SCHEDULED)
        logger.info(
            "reconnect scheduled in %.1fs",
            self._policy.steps()[0].delay_s,
        )
        session.reconnect_task = asyncio.create_task(self._reconnect(session))

    # ============================================================================
    # Reconnect
    # ============================================================================
    async def _reconnect(self, session: SessionState) -> None:
        """Run the bounded reconnect sequence; give up after the last step."""
        steps = self._policy.steps()
        for index, step in enumerate(steps, start=1):
            await asyncio.sleep(step.delay_s)
            if session.closed:
                return
            get_metrics().upstream_reconnects_total.add(
                1, {"credential": "ephemeral" if step.prefer_ephemeral else "static"}
            )
            logger.info(
                "reconnect attempt %s/%s (prefer_ephemeral=%s)",
                index,
                len(steps),
                step.prefer_ephemeral,
            )
            try:
                await self.establish(session, prefer_ephemeral=step.prefer_ephemeral)
            except SessionClosedError:
                return
            except Exception as exc:  # noqa: BLE001
                logger.error("reconnect attempt %s failed: %s", index, exc)
                continue
            if session.reconnect_task is asyncio.current_task():
                session.reconnect_task = None
            return

        if session.closed:
            return
        if session.reconnect_task is asyncio.current_task():
            session.reconnect_task = None
        session.transition(SessionPhase.IDLE)
        get_metrics().reconnect_exhausted_total.add(1)
        logger.error("upstream unavailable: reconnect attempts exhausted")
        await self._deliver(
            "upstream_unavailable",
            send_error(
                session.websocket,
                error_code="upstream_unavailable",
                message="Upstream service is unavailable; reconnect attempts exhausted.",
            ),
        )


__all__ = ["Connector", "UpstreamLifecycle", "UpstreamRouter"]
