"""Wren — JSON API servers with convention-based route discovery.

Route modules live in a versioned directory tree and are found, loaded,
and mounted at startup. File names become URL patterns::

    routes/v1/users/index.py   -> GET /api/v1/users
    routes/v1/users/[id].py    -> GET /api/v1/users/:id

Each route module exposes a ``register`` unit::

    def register(router):
        @router.get()
        async def show(id: int):
            return {"id": id}

Basic usage::

    from wren import create_app, load_config

    app = create_app(load_config())
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "DirectoryUnavailable",
    "DuplicateRoute",
    "Forbidden",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "ModuleLoadFailed",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "RouteDiscovery",
    "RouteScope",
    "TransformInvalid",
    "Unauthorized",
    "ValidationFailed",
    "WrenError",
    "create_app",
    "discover_routes",
    "get_correlation_id",
    "get_request",
    "load_config",
]

_ERRORS = frozenset(
    {
        "BadRequest",
        "ConfigurationError",
        "DirectoryUnavailable",
        "DuplicateRoute",
        "Forbidden",
        "HTTPError",
        "MethodNotAllowed",
        "ModuleLoadFailed",
        "NotFound",
        "TransformInvalid",
        "Unauthorized",
        "ValidationFailed",
        "WrenError",
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name in ("AppConfig", "load_config"):
        from wren import config as _config

        return getattr(_config, name)

    if name == "create_app":
        from wren.bootstrap import create_app

        return create_app

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name in ("RouteDiscovery", "discover_routes"):
        from wren.routes import discovery as _discovery

        return getattr(_discovery, name)

    if name == "RouteScope":
        from wren.routes.scope import RouteScope

        return RouteScope

    if name in ("AnyResponse", "Middleware", "Next"):
        from wren.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("get_correlation_id", "get_request"):
        from wren import context as _ctx

        return getattr(_ctx, name)

    if name in _ERRORS:
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
