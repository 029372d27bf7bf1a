"""Route scope — the object a route module's ``register`` unit receives.

A scope collects route declarations relative to the file's URL pattern.
It never touches the registry; the registrar binds the collected
declarations once the unit has returned successfully::

    # routes/v1/users/[id].py
    def register(router):
        @router.get()
        async def show(id: int):
            return {"id": id}

        @router.route("/avatar", methods=["GET", "PUT"])
        async def avatar(request):
            ...
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from wren._internal.types import Handler
from wren.routes.transform import RoutePattern

HTTP_METHODS: frozenset[str] = frozenset(
    {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"}
)


@dataclass(frozen=True, slots=True)
class RouteDeclaration:
    """One ``(method, sub_path, handler)`` declared by a route module."""

    method: str
    sub_path: str
    handler: Handler
    name: str | None = None
    include_in_docs: bool = True


class RouteScope:
    """Collects the routes one module declares.

    Sub-paths are relative to the module's URL pattern and may contain
    ``:param`` segments. ``"/"`` (the default) means the pattern itself.
    """

    __slots__ = ("_declarations", "pattern")

    def __init__(self, pattern: RoutePattern) -> None:
        self.pattern = pattern
        self._declarations: list[RouteDeclaration] = []

    @property
    def declarations(self) -> tuple[RouteDeclaration, ...]:
        return tuple(self._declarations)

    def add(
        self,
        method: str,
        path: str,
        handler: Handler,
        *,
        name: str | None = None,
        include_in_docs: bool = True,
    ) -> None:
        """Declare *handler* for *method* at *path*."""
        normalized = method.upper()
        if normalized not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r}"
            raise ValueError(msg)
        if not callable(handler):
            msg = f"Handler for {normalized} {path!r} is not callable"
            raise TypeError(msg)
        self._declarations.append(
            RouteDeclaration(normalized, path, handler, name, include_in_docs)
        )

    def route(
        self,
        path: str = "/",
        *,
        methods: Iterable[str] | None = None,
        name: str | None = None,
        include_in_docs: bool = True,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator. Methods default to ``["GET"]``."""

        def decorator(func: Handler) -> Handler:
            for method in methods or ("GET",):
                self.add(method, path, func, name=name, include_in_docs=include_in_docs)
            return func

        return decorator

    def get(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("GET",), **kwargs)  # type: ignore[arg-type]

    def post(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("POST",), **kwargs)  # type: ignore[arg-type]

    def put(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PUT",), **kwargs)  # type: ignore[arg-type]

    def patch(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PATCH",), **kwargs)  # type: ignore[arg-type]

    def delete(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("DELETE",), **kwargs)  # type: ignore[arg-type]

    def head(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("HEAD",), **kwargs)  # type: ignore[arg-type]

    def options(self, path: str = "/", **kwargs: object) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("OPTIONS",), **kwargs)  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"RouteScope({self.pattern.url_pattern!r}, {len(self._declarations)} routes)"
