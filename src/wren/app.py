"""Wren application class.

Mutable during setup (route registration, route mounts, middleware,
error handlers, lifecycle hooks). Frozen before the first request:
route discovery runs, the registry is sealed, and the router compiled.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren._internal.types import ErrorHandler, Handler
from wren.config import AppConfig
from wren.middleware.protocol import Middleware
from wren.routes.discovery import DiscoveryReport, discover_routes
from wren.routing.registry import Registry, RouteRegistration, join_paths
from wren.routing.router import Router
from wren.server.handler import handle_request

logger = logging.getLogger("wren.app")


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: tuple[str, ...]
    name: str | None
    include_in_docs: bool = True


@dataclass(slots=True)
class _PendingMount:
    """A route directory waiting to be discovered."""

    routes_dir: Path
    base_path: str


class App:
    """The wren application.

    Mutable during setup. Frozen by the ASGI lifespan startup,
    ``startup()``, ``run()``, or (failing those) the first request.

    Concurrency:
        The setup phase is single-threaded (decorators at import time).
        Freezing is async because it imports route modules; an
        ``anyio.Lock`` with a double check makes sure discovery runs
        once even if several requests arrive before startup finished.
    """

    __slots__ = (
        "_discovery_reports",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_mounts",
        "_pending_routes",
        "_registry",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._mounts: list[_PendingMount] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: anyio.Lock | None = None

        # Compiled state — set during _freeze()
        self._registry: Registry | None = None
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._discovery_reports: tuple[DiscoveryReport, ...] = ()

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: Iterable[str] | None = None,
        name: str | None = None,
        include_in_docs: bool = True,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``:param`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name, used as the OpenAPI operation id.
            include_in_docs: Set to False to leave the route out of the
                generated OpenAPI document.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            normalized = tuple(m.upper() for m in (methods or ("GET",)))
            self._pending_routes.append(
                _PendingRoute(path, func, normalized, name, include_in_docs)
            )
            return func

        return decorator

    def mount_routes(
        self,
        routes_dir: str | Path | None = None,
        *,
        base_path: str | None = None,
    ) -> None:
        """Discover route modules under *routes_dir* when the app freezes.

        The directory holds one subdirectory per API version. Each
        ``.py`` file below it exposes ``register(router)`` and is mounted
        at ``base_path + /version + url_pattern``::

            app.mount_routes("routes")              # /api/v1/users/...
            app.mount_routes("internal", base_path="/internal")

        Args:
            routes_dir: Route root. Defaults to ``config.routes_dir``.
            base_path: URL prefix. Defaults to ``config.api_base_path``.
        """
        self._check_not_frozen()
        directory = Path(routes_dir) if routes_dir is not None else self.config.routes_path
        prefix = self.config.api_base_path if base_path is None else base_path
        self._mounts.append(_PendingMount(directory, prefix))

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline. The first added runs outermost."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order after route discovery, before
        the server begins accepting HTTP requests.

        Usage::

            @app.on_startup
            async def setup():
                await cache.connect()
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        after the server stops accepting new requests.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Compiled state --

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def registry(self) -> Registry:
        """The frozen route registry. Only available once the app froze."""
        if self._registry is None:
            msg = "The app has not been started yet; its routes are not compiled."
            raise RuntimeError(msg)
        return self._registry

    @property
    def discovery_reports(self) -> tuple[DiscoveryReport, ...]:
        """One report per ``mount_routes()`` call, in mount order."""
        return self._discovery_reports

    # -- Lifecycle --

    async def startup(self) -> None:
        """Freeze the app and run startup hooks.

        Servers speaking ASGI lifespan do this automatically; call it
        yourself when driving the app another way.
        """
        await self._ensure_frozen()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Discover routes and serve the app with pounce.

        Route discovery finishes before the server binds, so a missing
        route directory or a duplicate route stops the process before
        any traffic is accepted.

        Args:
            host: Override bind host.
            port: Override bind port.
        """
        from wren.server.serve import run_server

        anyio.run(self._ensure_frozen)
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            workers=self.config.workers,
            reload=self.config.reload,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        await self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            log_errors=self.config.error_logging,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server. A failed discovery is reported as
        ``lifespan.startup.failed``.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Application startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    async def _ensure_frozen(self) -> None:
        """Freeze once, with double-check locking.

        Several requests can reach an unfrozen app at once when no
        lifespan startup ran. Only the first one runs discovery.
        """
        if self._frozen:
            return
        if self._freeze_lock is None:
            self._freeze_lock = anyio.Lock()
        async with self._freeze_lock:
            if self._frozen:
                return
            await self._freeze()

    async def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.

        Raises:
            DirectoryUnavailable: If a mounted route directory is missing.
            DuplicateRoute: If two routes share a method and path.
        """
        # 1. Routes registered on the app, in registration order
        registry = Registry()
        for pending in self._pending_routes:
            for method in pending.methods:
                registry.add(
                    RouteRegistration(
                        method=method,
                        path=join_paths(pending.path),
                        handler=pending.handler,
                        name=pending.name,
                        include_in_docs=pending.include_in_docs,
                    )
                )

        # 2. Discovered routes, one mount at a time
        reports: list[DiscoveryReport] = []
        for mount in self._mounts:
            report = await discover_routes(
                mount.routes_dir,
                base_path=mount.base_path,
                registry=registry,
                freeze=False,
            )
            reports.append(report)

        # 3. Seal the registry and compile the route table
        registry.freeze()
        self._registry = registry
        self._router = Router.from_registry(registry)
        self._discovery_reports = tuple(reports)

        # 4. Capture middleware as immutable tuple
        self._middleware = tuple(self._middleware_list)

        self._frozen = True
        logger.info("Application ready: %d routes registered", len(registry))
        for registration in registry:
            logger.debug(
                "  %-7s %s  (%s)",
                registration.method,
                registration.path,
                registration.origin,
            )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, mounts, and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
