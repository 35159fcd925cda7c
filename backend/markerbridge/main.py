"""
markerbridge: FastAPI Application Factory
============================================

What:  Builds the bridge application from a Settings object and a sink.
How:   create_app(settings, sink) wires services onto app.state, registers
       the logging middleware, the exception handlers and the three routers.
Who:   BridgeServer (server.py), uvicorn in factory mode
       (uvicorn markerbridge.main:create_app --factory) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │                                                      │
    │  Middleware:   RequestLogging ("METHOD URL")         │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────────┐ ┌────────────────┐ ┌─────────────┐ │
    │  │ POST /qr/*   │ │ GET /*         │ │ POST / 405  │ │
    │  └──────────────┘ └────────────────┘ └─────────────┘ │
    │                                                      │
    │  Exception Handlers → plain-text bodies              │
    │  404 NotFound │ 405 Method │ 500 Read/JSON/Sink      │
    └──────────────────────────────────────────────────────┘

The OpenAPI/docs routes are disabled: GET on any path belongs to the asset
roots, including /docs.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional, TextIO

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from markerbridge import __version__
from markerbridge.config import Settings
from markerbridge.exceptions import BridgeError
from markerbridge.middleware.logging import RequestLoggingMiddleware
from markerbridge.routes import assets, fallback, ingest
from markerbridge.services.ingest_service import IngestService
from markerbridge.services.sink_base import EmitSink
from markerbridge.services.sinks import build_sink
from markerbridge.services.static_files import StaticFileService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """
    Configure process-wide logging.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Args:
        level:  Logging level name (already validated by Settings).
        stream: Where log records go. Defaults to stdout; the stdout sink
                needs stdout to itself, so __main__ passes stderr then.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(stream or sys.stdout)],
        force=True,
    )

    # RequestLoggingMiddleware already writes one line per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: report the asset roots (warn when one is missing).
    Shutdown: close the sink.
    """
    settings: Settings = app.state.settings
    for label, files in (("UI", app.state.ui_files), ("Script", app.state.script_files)):
        if Path(files.root).is_dir():
            logger.info("%s asset root: %s", label, files.root)
        else:
            logger.warning("%s asset root does not exist: %s", label, files.root)
    logger.info("Forwarding markers to %s sink", settings.sink_kind)

    yield

    await app.state.sink.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text responses.

    Handler hierarchy:
        BridgeError (and subclasses) → exc.status_code, exc.message
        Starlette HTTPException      → exc.status_code, status phrase
        Exception (fallback)         → 500 "Internal Server Error"

    Context dicts are logged here and never sent to the client.
    """

    @app.exception_handler(BridgeError)
    async def handle_bridge_error(request: Request, exc: BridgeError):
        if exc.status_code >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Starlette's own 404/405 for requests no route accepted."""
        logger.warning("%s %s rejected with %d", request.method, request.url.path, exc.status_code)
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None, sink: Optional[EmitSink] = None) -> FastAPI:
    """
    Create and configure the bridge application.

    Args:
        settings: Bridge settings. Read from the environment when omitted.
        sink:     Where markers go. Built from settings.sink_kind when omitted.

    Returns: FastAPI instance with its services on app.state.

    Raises:
        ValueError: When no sink is given and the sink settings are inconsistent.
    """
    settings = settings or Settings()
    if sink is None:
        sink = build_sink(settings)

    app = FastAPI(
        title="markerbridge",
        description="Serves the marker tracker UI and forwards marker positions to a host process.",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # ── Services ──────────────────────────────────────────────────────────
    app.state.settings = settings
    app.state.sink = sink
    app.state.ui_files = StaticFileService(settings.ui_root)
    app.state.script_files = StaticFileService(settings.script_root)
    app.state.ingest_service = IngestService(
        sink,
        max_body_size=settings.max_body_size,
        body_timeout=settings.body_timeout,
        invalid_body_status=settings.invalid_body_status,
    )

    # ── Middleware ────────────────────────────────────────────────────────
    app.add_middleware(RequestLoggingMiddleware)

    # ── Exception Handlers ────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    # ingest before fallback: both accept POST, /qr/ must win
    app.include_router(ingest.router)
    app.include_router(assets.router)
    app.include_router(fallback.router)

    return app
