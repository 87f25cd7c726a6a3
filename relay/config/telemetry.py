"""Telemetry configuration: env vars, metric specs, Sentry constants."""

import os

# ---------------------------------------------------------------------------
# Sentry
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_RELEASE: str = os.getenv("SENTRY_RELEASE", "")
SENTRY_SAMPLE_RATE: float = float(os.getenv("SENTRY_SAMPLE_RATE", "1.0"))

# ---------------------------------------------------------------------------
# OTel metrics (OTLP over HTTP)
# ---------------------------------------------------------------------------
OTEL_METRICS_ENDPOINT: str = os.getenv("OTEL_METRICS_ENDPOINT", "")
OTEL_API_TOKEN: str = os.getenv("OTEL_API_TOKEN", "")
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "live-relay")
OTEL_ENVIRONMENT: str = os.getenv("OTEL_ENVIRONMENT", "production")
OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "15000"))

# ---------------------------------------------------------------------------
# Metric spec tuples: (name, unit, description)
# ---------------------------------------------------------------------------

# Counters
METRIC_UPSTREAM_CONNECTS_TOTAL = ("relay.upstream_connects_total", "{connection}", "Upstream connections opened")
METRIC_UPSTREAM_RECONNECTS_TOTAL = (
    "relay.upstream_reconnects_total",
    "{attempt}",
    "Scheduled upstream reconnect attempts",
)
METRIC_UPSTREAM_ERRORS_TOTAL = ("relay.upstream_errors_total", "{error}", "Upstream transport errors")
METRIC_KEEPALIVE_TIMEOUTS_TOTAL = (
    "relay.keepalive_timeouts_total",
    "{connection}",
    "Upstream connections closed by the keepalive watchdog",
)
METRIC_RECONNECT_EXHAUSTED_TOTAL = (
    "relay.reconnect_exhausted_total",
    "{session}",
    "Sessions left without upstream after the retry sequence",
)
METRIC_MALFORMED_MESSAGES_TOTAL = ("relay.malformed_messages_total", "{message}", "Unparseable frames")
METRIC_HISTORY_EVICTIONS_TOTAL = ("relay.history_evictions_total", "{entry}", "History entries trimmed")

# UpDown counters
METRIC_ACTIVE_SESSIONS = ("relay.active_sessions", "{session}", "Current downstream sessions")

# ---------------------------------------------------------------------------
# Sentry constants
# ---------------------------------------------------------------------------
SENTRY_RATE_LIMIT_S: float = 10.0
SENTRY_TAG_SESSION_ID = "session_id"
SENTRY_TAG_GENERATION = "upstream.generation"
SENTRY_TAG_CATEGORY = "error.category"


__all__ = [
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
    "SENTRY_RELEASE",
    "SENTRY_SAMPLE_RATE",
    "OTEL_METRICS_ENDPOINT",
    "OTEL_API_TOKEN",
    "OTEL_SERVICE_NAME",
    "OTEL_ENVIRONMENT",
    "OTEL_METRICS_EXPORT_INTERVAL_MS",
    "METRIC_UPSTREAM_CONNECTS_TOTAL",
    "METRIC_UPSTREAM_RECONNECTS_TOTAL",
    "METRIC_UPSTREAM_ERRORS_TOTAL",
    "METRIC_KEEPALIVE_TIMEOUTS_TOTAL",
    "METRIC_RECONNECT_EXHAUSTED_TOTAL",
    "METRIC_MALFORMED_MESSAGES_TOTAL",
    "METRIC_HISTORY_EVICTIONS_TOTAL",
    "METRIC_ACTIVE_SESSIONS",
    "SENTRY_RATE_LIMIT_S",
    "SENTRY_TAG_SESSION_ID",
    "SENTRY_TAG_GENERATION",
    "SENTRY_TAG_CATEGORY",
]
