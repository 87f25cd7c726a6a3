"""Sentry error capture for relay sessions.

Events carry the owning session id and, for upstream failures, the epoch of
the connection that failed. Reports are rate-limited per error category so a
flapping upstream produces one event per window instead of one per reconnect.
"""

from __future__ import annotations

import time
import logging
from typing import Any

import sentry_sdk

from ..errors import classify_error
from ..logging.context import current_session_id
from ..config.telemetry import (
    SENTRY_DSN,
    SENTRY_RELEASE,
    SENTRY_ENVIRONMENT,
    SENTRY_SAMPLE_RATE,
    SENTRY_RATE_LIMIT_S,
    SENTRY_TAG_CATEGORY,
    SENTRY_TAG_GENERATION,
    SENTRY_TAG_SESSION_ID,
)

logger = logging.getLogger(__name__)

_last_reported: dict[str, float] = {}
_enabled: bool = False


def init_sentry() -> None:
    """Initialize the Sentry SDK once; errors only, no tracing."""
    global _enabled  # noqa: PLW0603
    if _enabled:
        return
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        release=SENTRY_RELEASE or None,
        sample_rate=SENTRY_SAMPLE_RATE,
        traces_sample_rate=0.0,
        send_default_pii=False,
    )
    _enabled = True
    logger.info("Sentry initialized: environment=%s", SENTRY_ENVIRONMENT)


def shutdown_sentry() -> None:
    global _enabled  # noqa: PLW0603
    if not _enabled:
        return
    try:
        sentry_sdk.flush(timeout=2.0)
    except Exception:  # noqa: BLE001
        logger.debug("Sentry flush failed", exc_info=True)
    _enabled = False


def _should_report(category: str) -> bool:
    now = time.monotonic()
    if now - _last_reported.get(category, float("-inf")) < SENTRY_RATE_LIMIT_S:
        return False
    _last_reported[category] = now
    return True


def capture_error(
    error: BaseException,
    *,
    session_id: str | None = None,
    generation: int | None = None,
) -> None:
    """Report ``error`` tagged with its session and upstream epoch."""
    if not _enabled:
        return
    category = classify_error(error)
    if not _should_report(category):
        return

    with sentry_sdk.new_scope() as scope:
        scope.set_tag(SENTRY_TAG_SESSION_ID, session_id or current_session_id())
        scope.set_tag(SENTRY_TAG_CATEGORY, category)
        if generation is not None:
            scope.set_tag(SENTRY_TAG_GENERATION, generation)
        sentry_sdk.capture_exception(error)


def add_breadcrumb(message: str, *, category: str, data: dict[str, Any] | None = None) -> None:
    """Record a lifecycle step on the current scope; no-op when Sentry is off."""
    if _enabled:
        sentry_sdk.add_breadcrumb(message=message, category=category, level="info", data=data or {})


__all__ = ["init_sentry", "shutdown_sentry", "capture_error", "add_breadcrumb"]
