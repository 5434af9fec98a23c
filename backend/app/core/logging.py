"""Request-scoped logging for the sizing API.

Every log line emitted while a request is being served carries that
request's ID, taken from ``X-Request-ID`` or generated.  ``setup_logging``
picks plain text for development or one JSON object per line.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

access_logger = logging.getLogger("solarsizer.access")

# ``extra={...}`` keys promoted into JSON records.
_EXTRA_FIELDS = (
    "method", "path", "status_code", "duration_ms", "client_ip",
    "solver_status", "points", "failed_points",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    """Set ``record.request_id`` so text formats can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id
        entry.update(
            (key, getattr(record, key))
            for key in _EXTRA_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _log_access(request: Request, status_code: int, elapsed: float) -> None:
    duration_ms = round(elapsed * 1000, 1)
    access_logger.info(
        "%s %s -> %s (%.1fms)",
        request.method, request.url.path, status_code, duration_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request ID for the duration of the request and echo it back."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            _log_access(request, response.status_code, time.perf_counter() - started)
            return response
        finally:
            request_id_var.reset(token)


def setup_logging(json_format: bool = False, level: int | str = logging.INFO) -> None:
    """Install a single stream handler on the root logger."""
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
