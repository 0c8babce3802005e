"""
Access Logging

One structured line per request on the ``preference_api.access`` logger,
tagged with the request id, the locale LanguageMiddleware negotiated and,
for signed-in callers, the user id. ``setup_structured_logging`` installs
the formatter on the root logger at startup.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

ACCESS_LOGGER = "preference_api.access"
REQUEST_ID_HEADER = "X-Request-ID"

# Polled by health checks
UNLOGGED_PATHS = frozenset({"/health"})

access_logger = logging.getLogger(ACCESS_LOGGER)


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", ""):
            record.request_id = request_id_var.get()
        return True


class StructuredFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    FIELDS = ("method", "path", "status_code", "duration_ms", "locale", "user_id", "error_code")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        entry.update({key: getattr(record, key) for key in self.FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _access_level(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def log_access(request: Request, status_code: int, started: float) -> None:
    if request.url.path in UNLOGGED_PATHS:
        return

    duration_ms = round((time.perf_counter() - started) * 1000, 2)
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }

    locale = getattr(request.state, "locale", None)
    if locale:
        extra["locale"] = locale

    auth = getattr(request.state, "auth", None)
    if auth is not None and auth.is_authenticated:
        extra["user_id"] = auth.user.id

    access_logger.log(
        _access_level(status_code),
        "%s %s -> %s (%.2fms)",
        request.method,
        request.url.path,
        status_code,
        duration_ms,
        extra=extra,
    )


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Assign a request id (or honour X-Request-ID) and write the access line."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request_id_var.set(request_id)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            log_access(request, 500, started)
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        log_access(request, response.status_code, started)
        return response


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Send all logging through one stream handler that carries the request id.

    Args:
        log_level: Root logging level name (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines when True, plain text otherwise (local runs)
    """
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"))
    logging.basicConfig(level=getattr(logging, log_level.upper()), handlers=[handler], force=True)

    # uvicorn's own access line duplicates ours
    for name in ("uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(name).setLevel(logging.WARNING)
