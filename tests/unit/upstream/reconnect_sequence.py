"""Unit tests for upstream connect, context restore and the reconnect sequence."""

from __future__ import annotations

import asyncio

from relay.session.state import SessionPhase
from relay.upstream.connection import ConnectionState

from tests.helpers.builders import make_registry
from tests.helpers.fakes import FakeConnector, FakeDownstream, FakeSupplier, wait_for


def test_first_connection_sends_setup_then_ready() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        transport = connector.transports[0]
        assert "setup" in transport.sent[0]
        system_text = transport.sent[0]["setup"]["system_instruction"]["parts"][0]["text"]
        assert "PREVIOUS CONVERSATION HISTORY" not in system_text
        assert downstream.of_type("ready") == [
            {"type": "ready", "historyRestored": False, "reconnectCount": 0}
        ]
        assert session.phase == SessionPhase.OPEN
        assert session.upstream_open

        await registry.disconnect(session)

    asyncio.run(_run())


def test_reconnect_restores_history_and_counts_attempts() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        session.history.append("user", "remember the number 42")
        session.history.append("assistant", "I will remember 42")

        for expected in (1, 2, 3):
            connector.transports[-1].drop(1006, "network")
            await wait_for(lambda: len(downstream.of_type("ready")) == expected + 1)
            assert session.reconnect_count == expected

        reconnecting = downstream.of_type("reconnecting")
        assert [msg["reconnectCount"] for msg in reconnecting] == [0, 1, 2]
        assert reconnecting[0]["message"].endswith("(attempt 1)")
        assert [msg["reconnectCount"] for msg in downstream.of_type("ready")] == [0, 1, 2, 3]
        assert downstream.of_type("ready")[-1]["historyRestored"] is True

        setup = connector.transports[-1].sent[0]["setup"]
        system_text = setup["system_instruction"]["parts"][0]["text"]
        assert "[User said]: remember the number 42" in system_text
        assert "[You replied]: I will remember 42" in system_text

        await registry.disconnect(session)

    asyncio.run(_run())


def test_failed_ephemeral_reconnect_falls_back_to_static_once() -> None:
    async def _run() -> None:
        # initial ok, reconnect attempt 1 fails, attempt 2 succeeds
        supplier = FakeSupplier(failures=[False, True, False])
        connector = FakeConnector()
        registry = make_registry(supplier=supplier, connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        connector.transports[0].drop()
        await wait_for(lambda: len(downstream.of_type("ready")) == 2)

        assert supplier.calls == [True, True, False]
        assert connector.credentials[-1].method == "api_key"
        assert session.reconnect_count == 1

        await registry.disconnect(session)

    asyncio.run(_run())


def test_no_third_attempt_after_both_reconnects_fail() -> None:
    async def _run() -> None:
        supplier = FakeSupplier(failures=[False, True, True, True])
        connector = FakeConnector()
        registry = make_registry(supplier=supplier, connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        connector.transports[0].drop()
        await wait_for(lambda: downstream.of_type("error"))
        await asyncio.sleep(0.05)

        assert supplier.calls == [True, True, False]
        errors = downstream.of_type("error")
        assert len(errors) == 1
        assert errors[0]["error_code"] == "upstream_unavailable"
        assert session.phase == SessionPhase.IDLE
        assert len(connector.transports) == 1

        await registry.disconnect(session)

    asyncio.run(_run())


def test_open_failure_reports_error_then_reconnects() -> None:
    async def _run() -> None:
        connector = FakeConnector(fail_opens=1)
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        kinds = [msg["type"] for msg in downstream.sent]
        assert kinds == ["error", "reconnecting", "ready"]
        assert downstream.sent[0]["error_code"] == "upstream_error"
        assert downstream.of_type("ready")[0]["reconnectCount"] == 1

        await registry.disconnect(session)

    asyncio.run(_run())


def test_keepalive_timeout_closes_once_and_reconnects() -> None:
    async def _run() -> None:
        connector = FakeConnector(auto_pongs=[False, True])
        registry = make_registry(
            connector=connector,
            keepalive_interval_s=0.01,
            keepalive_timeout_s=0.035,
        )
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: len(downstream.of_type("ready")) == 2)

        silent = connector.transports[0]
        assert silent.close_calls == [(4000, "keepalive_timeout")]
        assert len(downstream.of_type("reconnecting")) == 1
        assert session.reconnect_count == 1

        await asyncio.sleep(0.08)
        assert connector.transports[1].close_calls == []
        assert len(connector.transports) == 2

        await registry.disconnect(session)

    asyncio.run(_run())


def test_teardown_during_reconnect_delay_cancels_attempt() -> None:
    async def _run() -> None:
        supplier = FakeSupplier()
        connector = FakeConnector()
        registry = make_registry(supplier=supplier, connector=connector, delay_s=0.05)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        connector.transports[0].drop()
        await wait_for(lambda: session.phase == SessionPhase.RECONNECT_SCHEDULED)
        await registry.disconnect(session)
        sent_before = list(downstream.sent)

        await asyncio.sleep(0.12)

        assert supplier.calls == [True]
        assert len(connector.transports) == 1
        assert downstream.sent == sent_before
        assert session.reconnect_task is None
        assert session.phase == SessionPhase.CLOSED

    asyncio.run(_run())


def test_late_events_after_teardown_are_ignored() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))
        connection = session.upstream

        await registry.disconnect(session)
        sent_before = list(downstream.sent)
        watchdog = connection.watchdog
        ack_before = session.last_ack_at

        # A timer or pong that slipped past teardown must be a no-op
        watchdog.record_ack()
        lifecycle = registry._lifecycle
        await lifecycle._on_close(session, connection, 1006, "late")
        await asyncio.sleep(0.03)

        assert session.last_ack_at == ack_before
        assert session.reconnect_task is None
        assert downstream.sent == sent_before
        assert len(connector.transports) == 1

    asyncio.run(_run())


def test_failing_downstream_send_still_closes_and_reconnects() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))
        first = session.upstream

        # The forwarded response and the error envelope both fail to send
        downstream.fail_sends = 2
        connector.transports[0].push({"serverContent": {"turnComplete": True}})
        await wait_for(lambda: len(downstream.of_type("ready")) == 2)

        assert connector.transports[0].close_calls == [(1000, "relay_error")]
        assert first.state == ConnectionState.CLOSED
        assert first.watchdog.stopped
        assert first.task.done() and first.task.exception() is None
        assert downstream.of_type("error") == []
        assert downstream.of_type("reconnecting")[0]["reconnectCount"] == 0
        assert session.phase == SessionPhase.OPEN
        assert session.reconnect_count == 1

        await registry.disconnect(session)

    asyncio.run(_run())
