"""Security headers middleware.

Adds the usual hardening headers to every response: clickjacking,
MIME sniffing, referrer leakage, transport security, and cross-origin
isolation. Values follow the defaults of the helmet middleware that
JSON API servers commonly ship with.
"""

from dataclasses import dataclass

from wren.http.request import Request
from wren.middleware.protocol import AnyResponse, Next


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Configuration for security headers.

    All values are applied as-is. Set a field to ``None`` to omit
    that header.
    """

    x_frame_options: str | None = "SAMEORIGIN"
    x_content_type_options: str | None = "nosniff"
    referrer_policy: str | None = "no-referrer"
    content_security_policy: str | None = (
        "default-src 'self'; base-uri 'self'; frame-ancestors 'self'; "
        "object-src 'none'; style-src 'self' 'unsafe-inline'"
    )
    strict_transport_security: str | None = "max-age=15552000; includeSubDomains"
    x_dns_prefetch_control: str | None = "off"
    cross_origin_opener_policy: str | None = "same-origin"
    cross_origin_resource_policy: str | None = "same-origin"

    def headers(self) -> tuple[tuple[str, str], ...]:
        """The configured headers, skipping disabled ones."""
        pairs = (
            ("X-Frame-Options", self.x_frame_options),
            ("X-Content-Type-Options", self.x_content_type_options),
            ("Referrer-Policy", self.referrer_policy),
            ("Content-Security-Policy", self.content_security_policy),
            ("Strict-Transport-Security", self.strict_transport_security),
            ("X-DNS-Prefetch-Control", self.x_dns_prefetch_control),
            ("Cross-Origin-Opener-Policy", self.cross_origin_opener_policy),
            ("Cross-Origin-Resource-Policy", self.cross_origin_resource_policy),
        )
        return tuple((name, value) for name, value in pairs if value)


class SecurityHeadersMiddleware:
    """Add security headers to every response.

    Headers the handler already set are left alone.

    Usage::

        from wren.middleware import SecurityHeadersMiddleware

        app.add_middleware(SecurityHeadersMiddleware())

    Or with custom config::

        app.add_middleware(SecurityHeadersMiddleware(SecurityHeadersConfig(
            x_frame_options="DENY",
            strict_transport_security=None,
        )))
    """

    __slots__ = ("_headers", "config")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._headers = self.config.headers()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        for name, value in self._headers:
            if response.header(name) is None:
                response = response.with_header(name, value)
        return response
