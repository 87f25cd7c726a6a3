"""Root logger configuration."""

from __future__ import annotations

import contextlib
import logging

from .context import install_log_context


def configure_logging() -> None:
    """Initialize root logging configuration once per process."""
    from ..config.logging import APP_LOG_LEVEL, APP_LOG_FORMAT, APP_LOG_DATEFMT  # noqa: PLC0415

    install_log_context()
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=APP_LOG_LEVEL, format=APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT)
    else:
        root_logger.setLevel(APP_LOG_LEVEL)
        for handler in root_logger.handlers:
            with contextlib.suppress(Exception):
                handler.setLevel(APP_LOG_LEVEL)
                handler.setFormatter(logging.Formatter(APP_LOG_FORMAT, datefmt=APP_LOG_DATEFMT))

    logging.getLogger("relay").setLevel(APP_LOG_LEVEL)
    # websockets logs every frame at DEBUG; keep it quiet unless asked
    logging.getLogger("websockets").setLevel(max(logging.INFO, root_logger.level))


__all__ = ["configure_logging"]
