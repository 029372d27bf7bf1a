"""Tests for wren.routes.scope — the object route modules register against."""

import pytest

from wren.routes.scope import RouteScope
from wren.routes.transform import RoutePattern


def _scope() -> RouteScope:
    return RouteScope(RoutePattern("/users", "v1"))


def _handler() -> str:
    return "ok"


class TestRouteScope:
    def test_decorator_defaults_to_get_at_pattern_root(self) -> None:
        scope = _scope()

        @scope.route()
        def index():
            return []

        (declaration,) = scope.declarations
        assert declaration.method == "GET"
        assert declaration.sub_path == "/"
        assert declaration.handler is index

    def test_method_shortcuts(self) -> None:
        scope = _scope()
        for name in ("get", "post", "put", "patch", "delete", "head", "options"):
            getattr(scope, name)(f"/{name}")(_handler)

        assert [d.method for d in scope.declarations] == [
            "GET",
            "POST",
            "PUT",
            "PATCH",
            "DELETE",
            "HEAD",
            "OPTIONS",
        ]

    def test_multiple_methods_one_handler(self) -> None:
        scope = _scope()
        scope.route("/avatar", methods=["get", "put"])(_handler)

        assert [(d.method, d.sub_path) for d in scope.declarations] == [
            ("GET", "/avatar"),
            ("PUT", "/avatar"),
        ]

    def test_name_and_docs_flag(self) -> None:
        scope = _scope()
        scope.get(name="list_users", include_in_docs=False)(_handler)

        (declaration,) = scope.declarations
        assert declaration.name == "list_users"
        assert declaration.include_in_docs is False

    def test_rejects_unknown_method(self) -> None:
        with pytest.raises(ValueError, match="Unsupported HTTP method"):
            _scope().add("BREW", "/", _handler)

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(TypeError, match="not callable"):
            _scope().add("GET", "/", "handler")  # type: ignore[arg-type]

    def test_declarations_are_a_snapshot(self) -> None:
        scope = _scope()
        before = scope.declarations
        scope.get()(_handler)

        assert before == ()
        assert len(scope.declarations) == 1

    def test_repr(self) -> None:
        scope = _scope()
        scope.get()(_handler)
        assert repr(scope) == "RouteScope('/users', 1 routes)"
