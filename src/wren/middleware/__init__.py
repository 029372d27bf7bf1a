"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    CORSMiddleware -- Cross-Origin Resource Sharing
    CorrelationIdMiddleware -- X-Correlation-ID propagation
    RequestLoggingMiddleware -- Request start/finish logging with timing
    SecurityHeadersMiddleware -- Helmet-style security headers
"""

from wren.middleware.builtin import CORSConfig, CORSMiddleware
from wren.middleware.correlation import CORRELATION_HEADER, CorrelationIdMiddleware
from wren.middleware.protocol import AnyResponse, Middleware, Next
from wren.middleware.request_logging import RequestLoggingMiddleware
from wren.middleware.security_headers import (
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)

__all__ = [
    "CORRELATION_HEADER",
    "AnyResponse",
    "CORSConfig",
    "CORSMiddleware",
    "CorrelationIdMiddleware",
    "Middleware",
    "Next",
    "RequestLoggingMiddleware",
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
]
