"""Application entry point and FastAPI app factory."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config.settings import Settings, settings
from .controllers import calls
from .middleware import StructuredLoggingMiddleware, TelemetryMiddleware
from .views import ErrorResponse

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_STAGE_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"

# Third-party loggers that log every request/part at INFO.
_QUIET_LOGGERS = ("httpx", "httpcore", "multipart")


def _rotating_handler(path_value: str, *, max_bytes: int, fmt: str) -> RotatingFileHandler:
    log_path = Path(path_value)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _attach(
    name: str,
    handler: logging.Handler,
    *,
    level: int,
    propagate: bool = True,
) -> None:
    """Give a named logger exactly one handler."""

    target = logging.getLogger(name)
    target.handlers.clear()
    target.addHandler(handler)
    target.setLevel(level)
    target.propagate = propagate


def _configure_logging(app_settings: Settings) -> None:
    """Route request lines to stdout, pipeline and transcript logs to their own files."""

    base_level = logging.DEBUG if app_settings.debug else logging.INFO

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter(_LOG_FORMAT))
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console)
    root_logger.addHandler(
        _rotating_handler(app_settings.log_file, max_bytes=1_000_000, fmt=_LOG_FORMAT)
    )
    root_logger.setLevel(base_level)

    request_lines = logging.StreamHandler(sys.stdout)
    request_lines.setFormatter(logging.Formatter("%(message)s"))
    _attach(
        "callsight.middleware.structured",
        request_lines,
        level=logging.INFO,
        propagate=False,
    )

    _attach(
        "callsight.services.analysis_pipeline",
        _rotating_handler(
            app_settings.pipeline_log_file, max_bytes=500_000, fmt=_STAGE_LOG_FORMAT
        ),
        level=base_level,
    )

    # Transcripts can contain personal data; keep them out of the main log.
    _attach(
        "callsight.logs.transcript",
        _rotating_handler(
            app_settings.transcript_log_file, max_bytes=500_000, fmt=_STAGE_LOG_FORMAT
        ),
        level=logging.INFO,
        propagate=False,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app_settings = app_settings or settings
    _configure_logging(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
        description="Speaker-attributed call transcription and quality analysis API",
    )

    app.add_middleware(TelemetryMiddleware)
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=app_settings.cors_allow_credentials,
        allow_methods=app_settings.cors_allow_methods,
        allow_headers=app_settings.cors_allow_headers,
    )

    app.include_router(calls.router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""

        return {
            "message": f"Welcome to {app_settings.app_name}",
            "version": app_settings.app_version,
            "status": "operational",
        }

    @app.get("/health", include_in_schema=False)
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""

        return {
            "status": "healthy",
            "service": app_settings.app_name,
            "version": app_settings.app_version,
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Expose application metrics for Prometheus scraping."""

        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(detail="Internal server error").model_dump(exclude_none=True),
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "callsight.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
