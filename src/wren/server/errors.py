"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to JSON error
responses, using registered error handlers where present::

    {"error": {"code": "NOT_FOUND", "message": "...",
               "timestamp": "2024-01-01T00:00:00.000Z", "requestId": "..."}}
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

from wren.context import get_correlation_id
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

INTERNAL_ERROR_MESSAGE = "An internal server error occurred"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with millisecond precision."""
    now = datetime.now(UTC)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def error_body(
    code: str,
    message: str,
    details: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the JSON error envelope."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = dict(details)
    error["timestamp"] = utc_timestamp()
    error["requestId"] = get_correlation_id() or "unknown"
    return {"error": error}


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: Mapping[int | type, Callable[..., Any]],
    *,
    log_errors: bool = True,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    if log_errors:
        logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Preserve the HTTP status from the exception unless the handler
        # explicitly returned a Response with its own status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    message = exc.detail or f"Error {exc.status}"
    response = Response.json(error_body(exc.code, message, exc.details), status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: Mapping[int | type, Callable[..., Any]],
    *,
    debug: bool = False,
    log_errors: bool = True,
) -> Response:
    """Handle unexpected exceptions as 500 errors.

    The exception message is only exposed when *debug* is set.
    """
    if log_errors:
        logger.exception(
            "500 %s %s",
            request.method,
            request.path,
            extra={
                "http_error": {
                    "requestId": get_correlation_id() or "unknown",
                    "method": request.method,
                    "url": request.url,
                    "ip": request.client_ip,
                    "error": {"name": type(exc).__name__, "message": str(exc)},
                }
            },
        )

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    message = f"{type(exc).__name__}: {exc}" if debug else INTERNAL_ERROR_MESSAGE
    return Response.json(error_body("INTERNAL_SERVER_ERROR", message), status=500)
