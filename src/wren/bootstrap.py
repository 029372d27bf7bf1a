"""Build a fully wired API application from configuration.

``create_app()`` is the one call most projects need::

    from wren import create_app, load_config

    app = create_app(load_config())
    app.run()

It configures logging, installs the standard middleware stack, adds
the health check and API docs, and mounts the route directory under
``config.api_base_path``.
"""

import logging
from pathlib import Path

from wren.app import App
from wren.config import AppConfig
from wren.docs import build_openapi, render_docs_page
from wren.http.response import HTML_CONTENT_TYPE, Response
from wren.log import configure_logging
from wren.middleware.builtin import CORSConfig, CORSMiddleware
from wren.middleware.correlation import CorrelationIdMiddleware
from wren.middleware.request_logging import RequestLoggingMiddleware
from wren.middleware.security_headers import SecurityHeadersMiddleware
from wren.routing.registry import join_paths
from wren.server.errors import utc_timestamp

logger = logging.getLogger("wren.app")


def add_health_route(app: App) -> None:
    """``GET {health_path}`` -> ``{"status": "healthy", "timestamp": ...}``."""

    @app.route(app.config.health_path, name="health", include_in_docs=False)
    def health() -> dict[str, str]:
        """Health check."""
        logger.debug("Health check requested")
        return {"status": "healthy", "timestamp": utc_timestamp()}


def add_docs_routes(app: App) -> None:
    """Serve the OpenAPI document and its HTML page under ``docs_path``.

    The document is built on first request from the frozen registry
    and cached for the life of the process.
    """
    config = app.config
    spec_path = join_paths(config.docs_path, "openapi.json")
    cache: dict[str, object] = {}

    def document() -> dict:
        if "openapi" not in cache:
            cache["openapi"] = build_openapi(app.registry, config)
        return cache["openapi"]  # type: ignore[return-value]

    @app.route(spec_path, name="openapi", include_in_docs=False)
    def openapi_json() -> dict:
        return document()

    @app.route(config.docs_path, name="docs", include_in_docs=False)
    def docs_page() -> Response:
        if "html" not in cache:
            cache["html"] = render_docs_page(document(), spec_path)
        return Response(body=str(cache["html"]), content_type=HTML_CONTENT_TYPE)


def install_middleware(app: App) -> None:
    """Install the standard middleware stack, outermost first."""
    config = app.config
    app.add_middleware(CorrelationIdMiddleware())
    if config.request_logging:
        app.add_middleware(RequestLoggingMiddleware())
    app.add_middleware(SecurityHeadersMiddleware())
    app.add_middleware(
        CORSMiddleware(
            CORSConfig(
                allow_origins=config.cors_origins,
                allow_credentials=config.cors_credentials,
            )
        )
    )


def create_app(
    config: AppConfig | None = None,
    *,
    routes_dir: str | Path | None = None,
    configure_logs: bool = True,
) -> App:
    """Build an ``App`` with logging, middleware, health, docs, and routes.

    Args:
        config: Application configuration. Defaults to ``AppConfig()``.
        routes_dir: Route root. Defaults to ``config.routes_dir``.
        configure_logs: Set to False to leave logging configuration to
            the caller.

    Route discovery itself runs when the app starts, not here.
    """
    config = config or AppConfig()
    if configure_logs:
        configure_logging(config)

    logger.info(
        "Starting application",
        extra={
            "startup": {
                "host": config.host,
                "port": config.port,
                "environment": config.environment,
                "apiBasePath": config.api_base_path,
            }
        },
    )

    app = App(config)
    install_middleware(app)
    add_health_route(app)
    if config.docs_enabled:
        add_docs_routes(app)
        logger.info("API documentation enabled at %s", config.docs_path)
    app.mount_routes(routes_dir)
    return app
