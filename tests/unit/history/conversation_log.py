"""Unit tests for the capped conversation log and its rendering."""

from __future__ import annotations

import pytest

from relay.session.history import (
    CONTINUITY_INSTRUCTION,
    HISTORY_FOOTER,
    HISTORY_HEADER,
    ConversationLog,
)


def test_log_keeps_most_recent_entries_in_order_when_over_cap() -> None:
    log = ConversationLog()
    for i in range(45):
        log.append("user" if i % 2 == 0 else "assistant", f"message {i}")

    assert len(log) == 30
    assert [entry.text for entry in log] == [f"message {i}" for i in range(15, 45)]


def test_append_reports_evicted_count() -> None:
    log = ConversationLog(max_entries=2)
    assert log.append("user", "one") == 0
    assert log.append("assistant", "two") == 0
    assert log.append("user", "three") == 1
    assert [entry.text for entry in log] == ["two", "three"]


@pytest.mark.parametrize("text", ["", "   ", "\n\t ", None])
def test_blank_text_is_never_appended(text) -> None:
    log = ConversationLog()
    assert log.append("user", text) == 0
    assert log.append("assistant", text) == 0
    assert len(log) == 0


def test_stored_text_is_trimmed() -> None:
    log = ConversationLog(clock=lambda: 123.0)
    log.append("user", "  hola  ")
    entry = log.entries[0]
    assert entry.text == "hola"
    assert entry.role == "user"
    assert entry.created_at == 123.0


def test_unknown_role_rejected() -> None:
    log = ConversationLog()
    with pytest.raises(ValueError, match="unknown history role"):
        log.append("system", "hi")  # type: ignore[arg-type]


def test_non_positive_cap_rejected() -> None:
    with pytest.raises(ValueError):
        ConversationLog(max_entries=0)


def test_render_empty_log_is_empty_string() -> None:
    assert ConversationLog().render() == ""


def test_render_contains_each_entry_once_in_order() -> None:
    log = ConversationLog()
    log.append("user", "what is the capital of France")
    log.append("assistant", "Paris")
    log.append("user", "and of Spain")
    log.append("assistant", "Madrid")

    rendered = log.render()

    assert rendered.startswith(HISTORY_HEADER)
    assert rendered.endswith(HISTORY_FOOTER + CONTINUITY_INSTRUCTION)
    for text in ("what is the capital of France", "Paris", "and of Spain", "Madrid"):
        assert rendered.count(text) == 1
    positions = [rendered.index(text) for text in ("France", "Paris", "Spain", "Madrid")]
    assert positions == sorted(positions)
    assert "[User said]: what is the capital of France" in rendered
    assert "[You replied]: Paris" in rendered


def test_clear_and_char_count() -> None:
    log = ConversationLog()
    log.append("user", "abc")
    log.append("assistant", "de")
    assert log.char_count() == 5

    log.clear()
    assert len(log) == 0
    assert log.char_count() == 0
    assert log.render() == ""
