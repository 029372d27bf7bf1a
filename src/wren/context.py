"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task.
- ``correlation_id_var``: The correlation id of the current request.

Both are set by the request pipeline and reset after each request.
Accessing ``request_var`` outside a request raises ``LookupError``;
``get_correlation_id()`` returns ``None`` instead, so log records
written at startup carry no id.
"""

from contextvars import ContextVar

from wren.http.request import Request

# -- Request context --

request_var: ContextVar[Request] = ContextVar("wren_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


# -- Correlation id --

correlation_id_var: ContextVar[str | None] = ContextVar("wren_correlation_id", default=None)
"""Set by ``CorrelationIdMiddleware`` for the duration of a request."""


def get_correlation_id() -> str | None:
    """Return the current request's correlation id, if any."""
    return correlation_id_var.get()
