"""FastAPI server for the live relay.

Endpoints:
    GET /          liveness for load balancers
    GET /healthz   liveness
    GET /health    per-session introspection (history size, reconnects, pong age)
    WS  /ws        downstream client connections

Server Lifecycle:
    1. On startup: configure logging, validate config, start telemetry
    2. Accept WebSocket connections on /ws; each gets its own session
    3. On shutdown: tear down every session, flush telemetry

Example:
    Run with uvicorn:
        $ uvicorn relay.server:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

import logging
import time

import psutil
from dotenv import load_dotenv

# Config modules read the environment at import time
load_dotenv()

from fastapi import FastAPI, WebSocket  # noqa: E402
from fastapi.responses import ORJSONResponse  # noqa: E402

from .config import validate_env  # noqa: E402
from .handlers.instances import session_registry  # noqa: E402
from .handlers.websocket.manager import handle_websocket_connection  # noqa: E402
from .logging import configure_logging  # noqa: E402
from .telemetry import init_telemetry, shutdown_telemetry  # noqa: E402

logger = logging.getLogger(__name__)

app = FastAPI(default_response_class=ORJSONResponse)

configure_logging()
validate_env()

_started_at = time.monotonic()
_process = psutil.Process()


@app.on_event("startup")
async def start_telemetry() -> None:
    init_telemetry()
    logger.info("relay ready; connect clients to /ws")


@app.on_event("shutdown")
async def close_sessions() -> None:
    """Close every session and its upstream before the process exits."""
    logger.info("shutting down: closing %s sessions", len(session_registry))
    await session_registry.close_all()
    shutdown_telemetry()


@app.get("/")
async def root():
    """Root endpoint for load balancer health checks."""
    return {"status": "ok"}


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def _memory_usage() -> dict[str, int]:
    """Resident and virtual size of the relay process, in bytes."""
    info = _process.memory_info()
    return {"rss": info.rss, "vms": info.vms}


@app.get("/health")
async def health():
    """Detailed health: one entry per live session."""
    return {
        "status": "ok",
        "connections": len(session_registry),
        "connectionsInfo": session_registry.snapshot(),
        "uptime": f"{round(time.monotonic() - _started_at)}s",
        "memory": _memory_usage(),
    }


@app.get("/favicon.ico", status_code=204)
async def favicon():
    """Suppress favicon requests from browsers/probes."""
    return None


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Downstream client endpoint."""
    await handle_websocket_connection(websocket)
