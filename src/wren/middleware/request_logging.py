"""Request logging middleware.

Logs one line when a request arrives and one when its response is
ready, on the ``wren.request`` logger. Completion lines are logged at
INFO for 1xx-3xx, WARNING for 4xx, and ERROR for 5xx.
"""

import logging
import time
from typing import Any

from wren.context import get_correlation_id
from wren.http.request import Request
from wren.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("wren.request")

REDACTED = "[REDACTED]"

# Request headers copied into the start record
_LOGGED_HEADERS = ("user-agent", "content-type", "accept", "authorization")
_SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _header_summary(request: Request) -> dict[str, str]:
    summary: dict[str, str] = {}
    for name in _LOGGED_HEADERS:
        value = request.headers.get(name)
        if value is None:
            continue
        summary[name] = REDACTED if name in _SENSITIVE_HEADERS else value
    return summary


class RequestLoggingMiddleware:
    """Log request start and completion with timing.

    Usage::

        app.add_middleware(RequestLoggingMiddleware())
    """

    __slots__ = ("logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.logger = log or logger

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        start = time.perf_counter()
        request_id = get_correlation_id() or "unknown"
        start_record: dict[str, Any] = {
            "requestId": request_id,
            "method": request.method,
            "url": request.url,
            "ip": request.client_ip,
            "headers": _header_summary(request),
        }
        if request.query:
            start_record["query"] = request.query.to_dict()
        self.logger.info(
            "--> %s %s",
            request.method,
            request.url,
            extra={"http_request": start_record},
        )

        response = await next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        self.logger.log(
            _level_for(response.status),
            "<-- %s %s %d (%.1fms)",
            request.method,
            request.url,
            response.status,
            duration_ms,
            extra={
                "http_response": {
                    "requestId": request_id,
                    "method": request.method,
                    "url": request.url,
                    "statusCode": response.status,
                    "durationMs": round(duration_ms, 3),
                    "contentLength": len(response.body_bytes),
                }
            },
        )
        return response
