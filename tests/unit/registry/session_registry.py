"""Unit tests for the session registry."""

from __future__ import annotations

import asyncio

from relay.session.state import SessionPhase

from tests.helpers.builders import make_registry
from tests.helpers.fakes import FakeConnector, FakeDownstream, FakeSupplier, wait_for


def test_initial_failure_retries_once_with_static_key() -> None:
    async def _run() -> None:
        supplier = FakeSupplier(failures=[True, False])
        connector = FakeConnector()
        registry = make_registry(supplier=supplier, connector=connector)
        downstream = FakeDownstream()

        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))

        assert supplier.calls == [True, False]
        assert session.upstream.credential_method == "api_key"
        assert downstream.of_type("ready")[0]["reconnectCount"] == 0

        await registry.disconnect(session)

    asyncio.run(_run())


def test_session_without_upstream_when_both_initial_attempts_fail() -> None:
    async def _run() -> None:
        supplier = FakeSupplier(failures=[True, True])
        registry = make_registry(supplier=supplier)
        downstream = FakeDownstream()

        session = await registry.connect(downstream)
        await asyncio.sleep(0.03)

        assert session.session_id in registry
        assert session.upstream is None
        assert session.phase == SessionPhase.IDLE
        assert downstream.sent == []
        assert supplier.calls == [True, False]

        await registry.disconnect(session)

    asyncio.run(_run())


def test_disconnect_closes_upstream_and_is_idempotent() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        downstream = FakeDownstream()
        session = await registry.connect(downstream, session_id="abc")
        await wait_for(lambda: downstream.of_type("ready"))
        assert registry.get("abc") is session
        assert len(registry) == 1

        await registry.disconnect(session)
        await registry.disconnect(session)

        transport = connector.transports[0]
        assert transport.close_calls == [(1000, "session_closed")]
        assert session.closed
        assert session.phase == SessionPhase.CLOSED
        assert session.upstream.task.done()
        assert session.watchdog is None
        assert "abc" not in registry
        assert len(registry) == 0

    asyncio.run(_run())


def test_snapshot_reports_session_details() -> None:
    async def _run() -> None:
        registry = make_registry()
        downstream = FakeDownstream()
        session = await registry.connect(downstream)
        await wait_for(lambda: downstream.of_type("ready"))
        session.history.append("user", "hello")
        session.history.append("assistant", "hi there")

        (row,) = registry.snapshot()

        assert row["messagesInHistory"] == 2
        assert row["historySizeChars"] == len("hello") + len("hi there")
        assert row["reconnectCount"] == 0
        assert row["geminiConnected"] is True
        assert row["phase"] == "open"
        assert row["timeSinceLastPong"].endswith("s")
        assert row["lastPong"].endswith("+00:00")

        await registry.disconnect(session)

    asyncio.run(_run())


def test_close_all_disconnects_every_session() -> None:
    async def _run() -> None:
        registry = make_registry()
        clients = [FakeDownstream() for _ in range(3)]
        sessions = [await registry.connect(client) for client in clients]
        await wait_for(lambda: all(client.of_type("ready") for client in clients))

        await registry.close_all()

        assert len(registry) == 0
        assert all(session.closed for session in sessions)

    asyncio.run(_run())


def test_sessions_are_isolated() -> None:
    async def _run() -> None:
        connector = FakeConnector()
        registry = make_registry(connector=connector)
        first, second = FakeDownstream(), FakeDownstream()
        session_a = await registry.connect(first)
        session_b = await registry.connect(second)
        await wait_for(lambda: first.of_type("ready") and second.of_type("ready"))

        session_a.upstream.transport.drop()
        await wait_for(lambda: len(first.of_type("ready")) == 2)

        assert second.of_type("reconnecting") == []
        assert session_b.reconnect_count == 0
        assert session_a.reconnect_count == 1

        await registry.close_all()

    asyncio.run(_run())
