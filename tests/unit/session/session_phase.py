"""Unit tests for session phase transitions and connection ownership."""

from __future__ import annotations

import pytest

from relay.session.state import SessionPhase, SessionState, can_transition
from relay.upstream.connection import UpstreamConnection


def _session() -> SessionState:
    return SessionState(session_id="s1", websocket=None)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SessionPhase.IDLE, SessionPhase.CONNECTING),
        (SessionPhase.CONNECTING, SessionPhase.OPEN),
        (SessionPhase.OPEN, SessionPhase.CLOSING),
        (SessionPhase.CLOSING, SessionPhase.RECONNECT_SCHEDULED),
        (SessionPhase.RECONNECT_SCHEDULED, SessionPhase.CONNECTING),
        (SessionPhase.RECONNECT_SCHEDULED, SessionPhase.IDLE),
        (SessionPhase.OPEN, SessionPhase.CLOSED),
    ],
)
def test_allowed_transitions(current: SessionPhase, target: SessionPhase) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (SessionPhase.IDLE, SessionPhase.OPEN),
        (SessionPhase.OPEN, SessionPhase.RECONNECT_SCHEDULED),
        (SessionPhase.CLOSED, SessionPhase.CONNECTING),
        (SessionPhase.CLOSED, SessionPhase.IDLE),
    ],
)
def test_rejected_transitions(current: SessionPhase, target: SessionPhase) -> None:
    assert not can_transition(current, target)


def test_transition_rejects_and_keeps_phase() -> None:
    session = _session()
    assert session.transition(SessionPhase.OPEN) is False
    assert session.phase == SessionPhase.IDLE


def test_closed_is_terminal() -> None:
    session = _session()
    assert session.transition(SessionPhase.CLOSED)
    assert session.transition(SessionPhase.CONNECTING) is False
    assert session.phase == SessionPhase.CLOSED


def test_next_epoch_counts_reconnects_from_zero() -> None:
    session = _session()
    assert session.next_epoch() == (1, 0)
    assert session.next_epoch() == (2, 1)
    assert session.next_epoch() == (3, 2)
    assert session.reconnect_count == 2


def test_is_current_only_for_installed_connection() -> None:
    session = _session()
    old = UpstreamConnection(*session.next_epoch(), "oauth")
    session.upstream = old
    assert session.is_current(old)

    new = UpstreamConnection(*session.next_epoch(), "api_key")
    session.upstream = new
    assert not session.is_current(old)
    assert session.is_current(new)

    session.closed = True
    assert not session.is_current(new)
    assert not session.is_current(None)


def test_user_transcripts_join_with_spaces() -> None:
    session = _session()
    session.append_user_transcript("hola")
    session.append_user_transcript("mundo")
    assert session.take_user_text() == "hola mundo"
    assert session.user_text == ""


def test_reset_conversation_clears_everything() -> None:
    session = _session()
    session.history.append("user", "hi")
    session.user_text = " pending"
    session.assistant_text = "partial"
    session.pending_audio.extend(["a", "b"])

    session.reset_conversation()

    assert len(session.history) == 0
    assert session.user_text == ""
    assert session.assistant_text == ""
    assert session.pending_audio == []
