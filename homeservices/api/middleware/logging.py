"""
Request logging middleware.

One log line per request with method, path, status and timing. Each request
carries a correlation id, taken from `X-Request-ID` or generated, which is
echoed on the response. Bodies are only logged when enabled, and credential
fields in them are redacted. Headers are never logged, since they carry
Basic credentials and the session cookie.
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Set

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("homeservices.api")


@dataclass
class LoggingConfig:
    """Configuration for request logging."""

    enabled: bool = True
    log_request_body: bool = False
    max_body_log_size: int = 10000

    excluded_paths: Set[str] = field(default_factory=lambda: {"/health", "/favicon.ico"})
    redacted_fields: Set[str] = field(default_factory=lambda: {"password", "secret", "token"})

    # Seconds
    slow_request_threshold: float = 2.0

    request_id_header: str = "X-Request-ID"


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per record, tagged with the current request id."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        http = getattr(record, "http", None)
        if http:
            entry["http"] = http

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry)


def redact_sensitive_data(
    data: Any,
    redacted_fields: Set[str],
    replacement: str = "[REDACTED]",
) -> Any:
    """
    Replace the values of sensitive keys, at any depth, with `replacement`.

    Keys match case-insensitively. Lists are walked item by item; anything
    else is returned unchanged.
    """
    if isinstance(data, dict):
        return {
            key: replacement if key.lower() in redacted_fields else redact_sensitive_data(value, redacted_fields, replacement)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item, redacted_fields, replacement) for item in data]
    return data


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request and stamps responses with the request id."""

    def __init__(self, app: FastAPI, config: Optional[LoggingConfig] = None):
        super().__init__(app)
        self.config = config or LoggingConfig()

    async def _body_for_log(self, request: Request) -> Optional[str]:
        body = await request.body()
        if not body:
            return None
        if len(body) > self.config.max_body_log_size:
            return f"[{len(body)} bytes]"

        try:
            parsed = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "[NON-JSON BODY]"
        return json.dumps(redact_sensitive_data(parsed, self.config.redacted_fields))

    def _level_for(self, status_code: int, elapsed: float) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400 or elapsed > self.config.slow_request_threshold:
            return logging.WARNING
        return logging.INFO

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.config.request_id_header) or uuid.uuid4().hex[:8]
        request_id_var.set(request_id)

        if not self.config.enabled or request.url.path in self.config.excluded_paths:
            response = await call_next(request)
            response.headers[self.config.request_id_header] = request_id
            return response

        http = {"method": request.method, "path": request.url.path}
        if self.config.log_request_body:
            body = await self._body_for_log(request)
            if body:
                http["body"] = body

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers[self.config.request_id_header] = request_id
        http["status_code"] = response.status_code
        http["duration_ms"] = round(elapsed * 1000, 2)

        logger.log(
            self._level_for(response.status_code, elapsed),
            f"{request.method} {request.url.path} -> {response.status_code} ({http['duration_ms']}ms)",
            extra={"http": http},
        )
        return response


def setup_logging(
    app: FastAPI,
    config: Optional[LoggingConfig] = None,
    structured: bool = True,
) -> None:
    """
    Install the request logging middleware.

    With `structured`, records under the `homeservices` logger are also
    written as JSON lines.
    """
    if structured:
        app_logger = logging.getLogger("homeservices")
        if not any(isinstance(h.formatter, StructuredLogFormatter) for h in app_logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredLogFormatter())
            app_logger.addHandler(handler)
        app_logger.setLevel(logging.INFO)

    app.add_middleware(RequestLoggingMiddleware, config=config or LoggingConfig())
