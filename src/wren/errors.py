"""Wren exception hierarchy.

Shared across the route discovery engine, Router, App, handler, and
middleware so every module raises and catches the same types.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Typically raised by ``AppConfig`` validation or caught during
    ``App._freeze()`` at startup.
    """


# -- Route discovery --


class RouteError(WrenError):
    """Base for errors raised while discovering route modules."""


class DirectoryUnavailable(RouteError):  # noqa: N818
    """The route root is missing or unreadable. Aborts startup."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = path
        self.reason = reason or "directory not found"
        super().__init__(f"Route directory unavailable: {path} ({self.reason})")


class TransformInvalid(RouteError):  # noqa: N818
    """A file path cannot be turned into a URL pattern.

    Recoverable: the file is skipped and reported.
    """

    def __init__(self, segments: tuple[str, ...], reason: str) -> None:
        self.segments = segments
        self.reason = reason
        super().__init__(f"Invalid route path {'/'.join(segments)!r}: {reason}")


class ModuleLoadFailed(RouteError):  # noqa: N818
    """A route module failed to import, had the wrong shape, or raised
    while registering its handlers.

    Recoverable: the file is skipped and reported.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load route module {path}: {reason}")


class DuplicateRoute(RouteError):  # noqa: N818
    """Two registrations resolve to the same method and path. Aborts startup."""

    def __init__(
        self,
        method: str,
        path: str,
        *,
        existing: object = None,
        incoming: object = None,
    ) -> None:
        self.method = method
        self.path = path
        self.existing = existing
        self.incoming = incoming
        msg = f"Duplicate route {method} {path!r}"
        if existing is not None or incoming is not None:
            msg += f": defined in {existing or '<app>'} and {incoming or '<app>'}"
        super().__init__(msg)


# -- HTTP errors --


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler,
    or renders the JSON error envelope.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()
    code: str = "HTTP_ERROR"
    details: Mapping[str, Any] | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — the request could not be understood."""

    def __init__(
        self,
        detail: str = "Bad Request",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(status=400, detail=detail, code="BAD_REQUEST", details=details)


class ValidationFailed(HTTPError):  # noqa: N818
    """400 — request data failed validation."""

    def __init__(
        self,
        detail: str = "Validation failed",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(status=400, detail=detail, code="VALIDATION_ERROR", details=details)


class Unauthorized(HTTPError):  # noqa: N818
    """401 — authentication is required."""

    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(status=401, detail=detail, code="UNAUTHORIZED")


class Forbidden(HTTPError):  # noqa: N818
    """403 — authenticated but not allowed."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail, code="FORBIDDEN")


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path, or a resource is missing."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail, code="NOT_FOUND")


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods and embeds
    the allowed methods in the detail string for developer visibility.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
            code="METHOD_NOT_ALLOWED",
        )


class InternalServerError(HTTPError):  # noqa: N818
    """500 — a handler failed in a way it chose to report."""

    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(status=500, detail=detail, code="INTERNAL_SERVER_ERROR")
