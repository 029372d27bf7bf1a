"""Correlation id middleware.

Every request gets an id: the caller's ``X-Correlation-ID`` when it
sends one, a fresh UUID4 otherwise. The id is visible to handlers and
log records through ``wren.context.get_correlation_id()`` and is echoed
on the response.
"""

import uuid
from collections.abc import Callable

from wren.context import correlation_id_var
from wren.http.request import Request
from wren.middleware.protocol import AnyResponse, Next

CORRELATION_HEADER = "X-Correlation-ID"

# Longest caller-supplied id accepted before a fresh one is generated
_MAX_ID_LENGTH = 200


def _new_id() -> str:
    return str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Propagate a per-request correlation id.

    Add it first so every other middleware, the handler, and the error
    envelope see the same id::

        app.add_middleware(CorrelationIdMiddleware())
    """

    __slots__ = ("generate", "header")

    def __init__(
        self,
        header: str = CORRELATION_HEADER,
        generate: Callable[[], str] = _new_id,
    ) -> None:
        self.header = header
        self.generate = generate

    def _incoming_id(self, request: Request) -> str | None:
        value = request.headers.get(self.header)
        if value is None:
            return None
        value = value.strip()
        if not value or len(value) > _MAX_ID_LENGTH or not value.isprintable():
            return None
        return value

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        correlation_id = self._incoming_id(request) or self.generate()
        token = correlation_id_var.set(correlation_id)
        try:
            response = await next(request)
        finally:
            correlation_id_var.reset(token)
        return response.with_header(self.header, correlation_id)
