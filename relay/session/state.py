"""Session-scoped dataclasses and the session phase state machine.

SessionPhase:
    Where a session stands with respect to its upstream connection:

        idle -> connecting -> open -> closing -> reconnect_scheduled
                    ^                                   |
                    +-----------------------------------+

    ``closed`` is terminal and reachable from every other phase; it means the
    downstream client is gone.

SessionState:
    Container for all per-session mutable data: the conversation log, the
    utterance accumulators, the current upstream connection and its epoch,
    the keepalive timestamps and the handles of every task the session owns.

Every field is mutated from the single asyncio loop only. Code that resumes
after an await must re-check ``closed`` or ``is_current`` before touching it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .history import ConversationLog

if TYPE_CHECKING:
    from ..upstream.connection import UpstreamConnection
    from ..upstream.watchdog import KeepaliveWatchdog

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    RECONNECT_SCHEDULED = "reconnect_scheduled"
    CLOSED = "closed"


_ALLOWED_TRANSITIONS: dict[SessionPhase, frozenset[SessionPhase]] = {
    SessionPhase.IDLE: frozenset({SessionPhase.CONNECTING, SessionPhase.CLOSED}),
    SessionPhase.CONNECTING: frozenset(
        {SessionPhase.OPEN, SessionPhase.CLOSING, SessionPhase.CONNECTING, SessionPhase.CLOSED}
    ),
    SessionPhase.OPEN: frozenset({SessionPhase.CLOSING, SessionPhase.CONNECTING, SessionPhase.CLOSED}),
    SessionPhase.CLOSING: frozenset(
        {SessionPhase.RECONNECT_SCHEDULED, SessionPhase.IDLE, SessionPhase.CLOSED}
    ),
    SessionPhase.RECONNECT_SCHEDULED: frozenset(
        {SessionPhase.CONNECTING, SessionPhase.IDLE, SessionPhase.CLOSED}
    ),
    SessionPhase.CLOSED: frozenset(),
}


def can_transition(current: SessionPhase, target: SessionPhase) -> bool:
    return target in _ALLOWED_TRANSITIONS[current]


@dataclass
class SessionState:
    """Container for all mutable session-scoped data.

    Attributes:
        session_id: Identity of the owning downstream connection (registry key).
        websocket: Downstream connection; anything exposing ``send_text``.
        history: Capped conversation log re-injected on every reconnect.
        user_text: In-progress user utterance (space-joined transcripts).
        assistant_text: In-progress assistant utterance from model-turn text.
        pending_audio: Audio payloads forwarded during the unfinished turn.
        generation: Epoch of the current upstream connection (0 = never connected).
        reconnect_count: Reconnect-attempt number of the current connection.
        upstream: The one current upstream connection, if any.
        watchdog: Keepalive watchdog bound to the current connection.
        reconnect_task: Pending reconnect sequence, if one is scheduled.
        last_probe_at: Monotonic time the last keepalive ping was sent.
        last_ack_at: Monotonic time the last pong was received.
        created_at: Monotonic time the session was created.
        phase: Current SessionPhase.
        closed: True once the downstream side is gone.
    """

    session_id: str
    websocket: Any
    history: ConversationLog = field(default_factory=ConversationLog)
    user_text: str = ""
    assistant_text: str = ""
    pending_audio: list[str] = field(default_factory=list)
    generation: int = 0
    reconnect_count: int = 0
    upstream: UpstreamConnection | None = None
    watchdog: KeepaliveWatchdog | None = None
    reconnect_task: asyncio.Task | None = None
    last_probe_at: float = field(default_factory=time.monotonic)
    last_ack_at: float = field(default_factory=time.monotonic)
    created_at: float = field(default_factory=time.monotonic)
    phase: SessionPhase = SessionPhase.IDLE
    closed: bool = False

    # ============================================================================
    # Phase / ownership
    # ============================================================================
    def transition(self, target: SessionPhase) -> bool:
        """Move to ``target`` if the state machine allows it."""
        if target == self.phase and target != SessionPhase.CONNECTING:
            return True
        if not can_transition(self.phase, target):
            logger.warning("session phase: rejected %s -> %s", self.phase.value, target.value)
            return False
        logger.debug("session phase: %s -> %s", self.phase.value, target.value)
        self.phase = target
        return True

    def is_current(self, connection: UpstreamConnection | None) -> bool:
        """True when ``connection`` is the live, non-superseded upstream."""
        return (
            not self.closed
            and connection is not None
            and self.upstream is connection
            and connection.generation == self.generation
        )

    def next_epoch(self) -> tuple[int, int]:
        """Advance the upstream epoch; return (generation, reconnect_count)."""
        self.generation += 1
        self.reconnect_count = self.generation - 1
        return self.generation, self.reconnect_count

    @property
    def upstream_open(self) -> bool:
        return self.upstream is not None and self.upstream.is_open

    # ============================================================================
    # Utterance accumulators
    # ============================================================================
    def append_user_transcript(self, text: str) -> None:
        self.user_text += " " + text

    def append_assistant_fragment(self, text: str) -> None:
        self.assistant_text += text

    def take_user_text(self) -> str:
        """Return the trimmed user utterance and reset the accumulator."""
        text = self.user_text.strip()
        self.user_text = ""
        return text

    def take_assistant_text(self) -> str:
        """Return the trimmed assistant utterance and reset the accumulator."""
        text = self.assistant_text.strip()
        self.assistant_text = ""
        return text

    def reset_conversation(self) -> None:
        """Drop history, both accumulators and pending audio."""
        self.history.clear()
        self.user_text = ""
        self.assistant_text = ""
        self.pending_audio.clear()


__all__ = ["SessionPhase", "SessionState", "can_transition"]
