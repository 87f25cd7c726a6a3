"""MetricInstruments registry: typed accessors for all OTel instruments."""

from __future__ import annotations

from opentelemetry import metrics

from ..config.telemetry import (
    OTEL_SERVICE_NAME,
    METRIC_ACTIVE_SESSIONS,
    METRIC_UPSTREAM_ERRORS_TOTAL,
    METRIC_HISTORY_EVICTIONS_TOTAL,
    METRIC_UPSTREAM_CONNECTS_TOTAL,
    METRIC_KEEPALIVE_TIMEOUTS_TOTAL,
    METRIC_MALFORMED_MESSAGES_TOTAL,
    METRIC_RECONNECT_EXHAUSTED_TOTAL,
    METRIC_UPSTREAM_RECONNECTS_TOTAL,
)


def _counter(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Counter:
    name, unit, desc = spec
    return meter.create_counter(name, unit=unit, description=desc)


def _updown(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.UpDownCounter:
    name, unit, desc = spec
    return meter.create_up_down_counter(name, unit=unit, description=desc)


class MetricInstruments:
    """Holds all OTel metric instruments created from config specs."""

    __slots__ = (
        "upstream_connects_total",
        "upstream_reconnects_total",
        "upstream_errors_total",
        "keepalive_timeouts_total",
        "reconnect_exhausted_total",
        "malformed_messages_total",
        "history_evictions_total",
        "active_sessions",
    )

    def __init__(self, meter: metrics.Meter) -> None:
        # Counters
        self.upstream_connects_total = _counter(meter, METRIC_UPSTREAM_CONNECTS_TOTAL)
        self.upstream_reconnects_total = _counter(meter, METRIC_UPSTREAM_RECONNECTS_TOTAL)
        self.upstream_errors_total = _counter(meter, METRIC_UPSTREAM_ERRORS_TOTAL)
        self.keepalive_timeouts_total = _counter(meter, METRIC_KEEPALIVE_TIMEOUTS_TOTAL)
        self.reconnect_exhausted_total = _counter(meter, METRIC_RECONNECT_EXHAUSTED_TOTAL)
        self.malformed_messages_total = _counter(meter, METRIC_MALFORMED_MESSAGES_TOTAL)
        self.history_evictions_total = _counter(meter, METRIC_HISTORY_EVICTIONS_TOTAL)
        # UpDown counters
        self.active_sessions = _updown(meter, METRIC_ACTIVE_SESSIONS)


_metrics: MetricInstruments | None = None


def get_metrics() -> MetricInstruments:
    """Return the global MetricInstruments (no-op meter if OTel not initialized)."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        meter = metrics.get_meter(OTEL_SERVICE_NAME)
        _metrics = MetricInstruments(meter)
    return _metrics


def initialize_metrics() -> MetricInstruments:
    """Rebuild instruments against the current global MeterProvider."""
    global _metrics  # noqa: PLW0603
    _metrics = None
    return get_metrics()


__all__ = ["MetricInstruments", "get_metrics", "initialize_metrics"]
