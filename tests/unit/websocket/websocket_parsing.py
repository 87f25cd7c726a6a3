"""Unit tests for websocket client message parsing."""

from __future__ import annotations

import json

import pytest

from relay.handlers.websocket.parser import parse_client_message


def test_empty_message_raises() -> None:
    with pytest.raises(ValueError, match="Empty message"):
        parse_client_message("")


def test_whitespace_message_raises() -> None:
    with pytest.raises(ValueError, match="Empty message"):
        parse_client_message("   ")


def test_invalid_json_raises() -> None:
    with pytest.raises(ValueError, match="valid JSON"):
        parse_client_message("{bad json")


def test_non_object_string_raises() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        parse_client_message('"hello"')


def test_non_object_array_raises() -> None:
    with pytest.raises(ValueError, match="JSON object"):
        parse_client_message("[1, 2]")


def test_missing_type_raises() -> None:
    with pytest.raises(ValueError, match="Missing 'type'"):
        parse_client_message(json.dumps({"audio": "AAAA"}))


def test_non_string_type_raises() -> None:
    with pytest.raises(ValueError, match="Missing 'type'"):
        parse_client_message(json.dumps({"type": 7}))


def test_invalid_utf8_bytes_raise() -> None:
    with pytest.raises(ValueError, match="UTF-8"):
        parse_client_message(b"\xff\xfe")


def test_valid_message_normalizes_type() -> None:
    result = parse_client_message(json.dumps({"type": " Audio_Chunk ", "audio": "AAAA"}))
    assert result == {"type": "audio_chunk", "audio": "AAAA"}


def test_bytes_message_is_decoded() -> None:
    result = parse_client_message(b'{"type": "turn_complete"}')
    assert result == {"type": "turn_complete"}
