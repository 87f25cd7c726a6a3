"""Upstream side of the relay: transport, wire protocol, keepalive, reconnect."""

from .connection import ConnectionState, UpstreamConnection
from .lifecycle import UpstreamLifecycle
from .protocol import (
    END_OF_TURN,
    INTERRUPT,
    build_audio_chunk,
    build_setup_message,
    build_system_instruction,
    extract_text_fragments,
)
from .retry import ReconnectPolicy, ReconnectStep
from .transport import open_upstream_transport
from .watchdog import KeepaliveWatchdog

__all__ = [
    "ConnectionState",
    "UpstreamConnection",
    "UpstreamLifecycle",
    "END_OF_TURN",
    "INTERRUPT",
    "build_audio_chunk",
    "build_setup_message",
    "build_system_instruction",
    "extract_text_fragments",
    "ReconnectPolicy",
    "ReconnectStep",
    "open_upstream_transport",
    "KeepaliveWatchdog",
]
