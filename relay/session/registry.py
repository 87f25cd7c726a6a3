"""Session registry: one SessionState per downstream connection.

SessionRegistry is responsible for:

1. Session Lifecycle:
   - Creating a session when a downstream client connects
   - Establishing its first upstream connection (ephemeral credential first,
     one retry on the static key)
   - Tearing everything down when the client goes away

2. Introspection:
   - Read-only per-session snapshot for the health endpoint

A session whose two initial attempts both fail stays registered without an
upstream connection; its client never receives ``ready`` and its messages are
dropped by the router.

The global ``session_registry`` instance lives in ``relay.handlers.instances``.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from ..config import WS_CLOSE_NORMAL_CODE, WS_CLOSE_SESSION_END_REASON
from ..handlers.websocket.helpers import cancel_task
from ..messages.upstream import handle_upstream_message
from ..telemetry import get_metrics
from ..upstream.lifecycle import UpstreamLifecycle
from .state import SessionPhase, SessionState

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps downstream connection identity to SessionState.

    All operations run on the single event loop; no locking is needed.
    """

    def __init__(self, lifecycle: UpstreamLifecycle | None = None) -> None:
        self._lifecycle = lifecycle or UpstreamLifecycle(router=handle_upstream_message)
        self._sessions: dict[str, SessionState] = {}

    # ============================================================================
    # Lifecycle
    # ============================================================================
    async def connect(self, websocket: Any, *, session_id: str | None = None) -> SessionState:
        """Register a new downstream connection and bring up its upstream."""
        session = SessionState(session_id=session_id or uuid.uuid4().hex, websocket=websocket)
        self._sessions[session.session_id] = session
        get_metrics().active_sessions.add(1)
        logger.info("client connected. Active: %s", len(self._sessions))

        try:
            await self._lifecycle.establish(session, prefer_ephemeral=True)
        except Exception as exc:  # noqa: BLE001
            logger.error("initial upstream connection failed: %s", exc)
            if session.closed:
                return session
            try:
                await self._lifecycle.establish(session, prefer_ephemeral=False)
            except Exception as retry_exc:  # noqa: BLE001
                logger.error("initial upstream fallback failed: %s", retry_exc)
        return session

    async def disconnect(self, session: SessionState) -> None:
        """Tear down ``session``. Idempotent."""
        if session.closed:
            return
        session.closed = True
        session.transition(SessionPhase.CLOSED)

        await cancel_task(session.reconnect_task)
        session.reconnect_task = None
        if session.watchdog is not None:
            session.watchdog.cancel()
            session.watchdog = None

        connection = session.upstream
        if connection is not None:
            if connection.watchdog is not None:
                connection.watchdog.cancel()
            await connection.close(WS_CLOSE_NORMAL_CODE, WS_CLOSE_SESSION_END_REASON)
            await cancel_task(connection.task)
            connection.mark_closed()

        if self._sessions.pop(session.session_id, None) is not None:
            get_metrics().active_sessions.add(-1)
        logger.info("client disconnected. Active: %s", len(self._sessions))

    async def close_all(self) -> None:
        """Disconnect every session (server shutdown)."""
        for session in list(self._sessions.values()):
            await self.disconnect(session)

    # ============================================================================
    # Lookup / introspection
    # ============================================================================
    def get(self, session_id: str) -> SessionState | None:
        return self._sessions.get(session_id)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def snapshot(self) -> list[dict[str, Any]]:
        """Read-only view of every session for the health endpoint."""
        now = time.monotonic()
        wall_now = time.time()
        rows: list[dict[str, Any]] = []
        for session in self._sessions.values():
            since_ack = max(0.0, now - session.last_ack_at)
            last_pong = datetime.fromtimestamp(wall_now - since_ack, tz=timezone.utc)
            rows.append(
                {
                    "messagesInHistory": len(session.history),
                    "historySizeChars": session.history.char_count(),
                    "reconnectCount": session.reconnect_count,
                    "lastPong": last_pong.isoformat(),
                    "timeSinceLastPong": f"{round(since_ack)}s",
                    "geminiConnected": session.upstream_open,
                    "phase": session.phase.value,
                }
            )
        return rows


__all__ = ["SessionRegistry"]
