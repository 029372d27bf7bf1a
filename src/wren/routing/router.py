"""Compiled router with trie-based path matching.

Routes are compiled from a frozen Registry into an immutable lookup
structure when the app freezes.
"""

from dataclasses import dataclass, field

from wren.errors import MethodNotAllowed, NotFound
from wren.routing.registry import Registry
from wren.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/:id"      -> [PathSegment("users"), PathSegment(":id", is_param=True, ...)]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith(":") and len(part) > 1:
            segments.append(PathSegment(value=part, is_param=True, param_name=part[1:]))
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("children", "param_children", "routes_by_method")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by name, in registration order
        self.param_children: dict[str, _ParamEdge] = {}
        # Routes at this node, keyed by HTTP method
        self.routes_by_method: dict[str, Route] = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_name: str
    node: _TrieNode = field(default_factory=_TrieNode)


class Router:
    """Compiled router with trie-based path matching.

    Static segments are tried before parameters at every depth, and
    parameter edges are tried in the order they were registered.

    Usage::

        router = Router()
        router.add(Route("/users", handler, frozenset({"GET"})))
        router.add(Route("/users/:id", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False

    @classmethod
    def from_registry(cls, registry: Registry) -> "Router":
        """Compile a router from every registration in *registry*."""
        router = cls()
        for registration in registry:
            router.add(
                Route(
                    path=registration.path,
                    handler=registration.handler,
                    methods=frozenset({registration.method}),
                    name=registration.name,
                )
            )
        router.compile()
        return router

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            if seg.is_param:
                name = seg.param_name or ""
                if name not in node.param_children:
                    node.param_children[name] = _ParamEdge(param_name=name)
                node = node.param_children[name].node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        # Register methods at the terminal node
        for method in route.methods:
            node.routes_by_method[method] = route

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes.

        Traverses the trie to collect every unique Route object.
        """
        seen: set[int] = set()
        result: list[Route] = []
        self._collect_routes(self._root, seen, result)
        return result

    def _collect_routes(
        self,
        node: _TrieNode,
        seen: set[int],
        result: list[Route],
    ) -> None:
        """Recursively collect routes from the trie."""
        for route in node.routes_by_method.values():
            route_id = id(route)
            if route_id not in seen:
                seen.add(route_id)
                result.append(route)

        for child in node.children.values():
            self._collect_routes(child, seen, result)

        for edge in node.param_children.values():
            self._collect_routes(edge.node, seen, result)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path!r}")

        node, params = result

        if method in node.routes_by_method:
            return RouteMatch(route=node.routes_by_method[method], path_params=params)

        # HEAD falls back to GET; the sender drops the body
        if method == "HEAD" and "GET" in node.routes_by_method:
            return RouteMatch(route=node.routes_by_method["GET"], path_params=params)

        raise MethodNotAllowed(frozenset(node.routes_by_method))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[_TrieNode, dict[str, str]] | None:
        """Recursively match path parts against the trie."""
        # All parts consumed — return this node
        if index == len(parts):
            if node.routes_by_method:
                return node, params
            return None

        part = parts[index]

        # 1. Try static child first (exact match)
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        # 2. Try parameter children in registration order
        for edge in node.param_children.values():
            new_params = {**params, edge.param_name: part}
            result = self._match_node(edge.node, parts, index + 1, new_params)
            if result is not None:
                return result

        return None
