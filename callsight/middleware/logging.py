"""Per-request log line for the call analysis API."""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

logger = logging.getLogger("callsight.middleware.structured")

REQUEST_ID_HEADER = "X-Request-ID"

_ANSI_RESET = "\u001b[0m"
_STATUS_COLORS = (
    (500, "\u001b[31m"),
    (400, "\u001b[33m"),
    (200, "\u001b[32m"),
)
_NEUTRAL_COLOR = "\u001b[36m"


def _color_for(status_code: int) -> str:
    for floor, color in _STATUS_COLORS:
        if status_code >= floor:
            return color
    return _NEUTRAL_COLOR


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and latency of every request.

    Each request gets an ``X-Request-ID`` (the caller's, when supplied) that is
    echoed on the response so client reports can be matched to log lines.
    Bodies are never logged: uploads carry call audio.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()
        entry: dict[str, Any] = {
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
            "content_length": request.headers.get("content-length"),
        }

        try:
            response = await call_next(request)
        except Exception as exc:
            entry.update(status=500, duration_ms=_elapsed_ms(started), error=repr(exc))
            logger.exception(_render(entry))
            raise

        entry.update(status=response.status_code, duration_ms=_elapsed_ms(started))
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(_render(entry))
        logger.debug(json.dumps(entry, default=str, separators=(",", ":")))
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _render(entry: dict[str, Any]) -> str:
    status_code = entry.get("status") or 0
    body = " ".join(
        f"{key}={entry[key] if entry.get(key) is not None else '-'}"
        for key in ("request_id", "method", "path", "status", "duration_ms", "client_ip")
    )
    return f"{_color_for(status_code)}{body}{_ANSI_RESET}"
