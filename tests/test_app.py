"""Tests for wren.app — App lifecycle, routing, and discovered routes."""

from pathlib import Path

import pytest

from wren.app import App
from wren.config import AppConfig
from wren.errors import DirectoryUnavailable, DuplicateRoute, NotFound
from wren.http.request import Request
from wren.testing import TestClient, assert_error, assert_json

USERS_SOURCE = """
def register(router):
    @router.get()
    def list_users():
        return [{"id": 1}]

    @router.post()
    async def create_user(request):
        data = await request.json()
        return ({"id": 2, **data}, 201)
"""

USER_SOURCE = """
from wren.errors import NotFound

def register(router):
    @router.get()
    def show(id: int):
        if id > 100:
            raise NotFound(f"User {id} not found")
        return {"id": id}

    @router.get("/posts/:postId")
    def post(id: int, postId: str):
        return {"user": id, "post": postId}
"""


class TestAppConfig:
    def test_default_config(self) -> None:
        app = App()
        assert app.config == AppConfig()

    def test_custom_config(self) -> None:
        app = App(config=AppConfig(port=8080, debug=True))
        assert app.config.port == 8080
        assert app.config.debug is True


class TestAppRoutes:
    async def test_hello_world(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return "Hello, World!"

        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert response.text == "Hello, World!"

    async def test_json_response(self) -> None:
        app = App()

        @app.route("/data")
        def data():
            return {"message": "hello", "count": 42}

        async with TestClient(app) as client:
            body = assert_json(await client.get("/data"))
            assert body == {"message": "hello", "count": 42}

    async def test_request_injection(self) -> None:
        app = App()

        @app.route("/echo", methods=["POST"])
        async def echo(req: Request):
            return {"method": req.method, "body": await req.json()}

        async with TestClient(app) as client:
            body = assert_json(await client.post("/echo", json={"a": 1}))
            assert body == {"method": "POST", "body": {"a": 1}}

    async def test_query_params(self) -> None:
        app = App()

        @app.route("/search")
        def search(request: Request):
            return {"q": request.query.get("q")}

        async with TestClient(app) as client:
            body = assert_json(await client.get("/search", query={"q": "wren"}))
            assert body == {"q": "wren"}

    async def test_not_found_envelope(self) -> None:
        app = App()

        async with TestClient(app) as client:
            error = assert_error(await client.get("/nope"), status=404, code="NOT_FOUND")
            assert error["requestId"] == "unknown"

    async def test_method_not_allowed(self) -> None:
        app = App()

        @app.route("/items")
        def items():
            return []

        async with TestClient(app) as client:
            response = await client.delete("/items")
            assert_error(response, status=405, code="METHOD_NOT_ALLOWED")
            assert response.header("allow") == "GET"

    async def test_head_uses_get_without_body(self) -> None:
        app = App()

        @app.route("/items")
        def items():
            return [1, 2, 3]

        async with TestClient(app) as client:
            response = await client.head("/items")
            assert response.status == 200
            assert response.body_bytes == b""

    async def test_unhandled_exception_is_500(self) -> None:
        app = App()

        @app.route("/boom")
        def boom():
            raise RuntimeError("secret detail")

        async with TestClient(app) as client:
            error = assert_error(
                await client.get("/boom"), status=500, code="INTERNAL_SERVER_ERROR"
            )
            assert "secret detail" not in error["message"]

    async def test_debug_exposes_exception(self) -> None:
        app = App(AppConfig(debug=True))

        @app.route("/boom")
        def boom():
            raise RuntimeError("secret detail")

        async with TestClient(app) as client:
            error = assert_error(
                await client.get("/boom"), status=500, code="INTERNAL_SERVER_ERROR"
            )
            assert error["message"] == "RuntimeError: secret detail"

    async def test_custom_error_handler(self) -> None:
        app = App()

        @app.error(404)
        def not_found(request: Request):
            return {"missing": request.path}

        async with TestClient(app) as client:
            response = await client.get("/gone")
            assert response.status == 404
            assert response.json_body() == {"missing": "/gone"}

    async def test_invalid_json_body(self) -> None:
        app = App()

        @app.route("/items", methods=["POST"])
        async def create(request: Request):
            return await request.json()

        async with TestClient(app) as client:
            response = await client.post(
                "/items", body=b"{nope", headers={"content-type": "application/json"}
            )
            assert_error(response, status=400, code="BAD_REQUEST")


class TestPathParams:
    async def test_int_conversion(self) -> None:
        app = App()

        @app.route("/users/:id")
        def user(id: int):
            return {"id": id, "type": type(id).__name__}

        async with TestClient(app) as client:
            body = assert_json(await client.get("/users/42"))
            assert body == {"id": 42, "type": "int"}

    async def test_conversion_failure_is_400(self) -> None:
        app = App()

        @app.route("/users/:id")
        def user(id: int):
            return {"id": id}

        async with TestClient(app) as client:
            error = assert_error(await client.get("/users/abc"), status=400, code="BAD_REQUEST")
            assert error["details"] == {"param": "id", "value": "abc", "expected": "int"}

    async def test_unannotated_param_is_str(self) -> None:
        app = App()

        @app.route("/files/:name")
        def file(name):
            return {"name": name}

        async with TestClient(app) as client:
            assert assert_json(await client.get("/files/a.txt")) == {"name": "a.txt"}

    async def test_path_params_on_request(self) -> None:
        app = App()

        @app.route("/users/:id")
        def user(request: Request):
            return dict(request.path_params)

        async with TestClient(app) as client:
            assert assert_json(await client.get("/users/9")) == {"id": "9"}


class TestMountedRoutes:
    async def test_discovered_routes_served(self, routes_root: Path, write_route) -> None:
        write_route("v1/users/index.py", USERS_SOURCE)
        write_route("v1/users/[id].py", USER_SOURCE)
        app = App()
        app.mount_routes(routes_root)

        async with TestClient(app) as client:
            assert assert_json(await client.get("/api/v1/users")) == [{"id": 1}]
            assert assert_json(await client.get("/api/v1/users/7")) == {"id": 7}
            created = assert_json(
                await client.post("/api/v1/users", json={"name": "ada"}), status=201
            )
            assert created == {"id": 2, "name": "ada"}
            nested = assert_json(await client.get("/api/v1/users/7/posts/abc"))
            assert nested == {"user": 7, "post": "abc"}
            assert_error(await client.get("/api/v1/users/101"), status=404, code="NOT_FOUND")

    async def test_custom_base_path(self, routes_root: Path, write_route) -> None:
        write_route("v1/users/index.py", USERS_SOURCE)
        app = App()
        app.mount_routes(routes_root, base_path="/internal")

        async with TestClient(app) as client:
            assert (await client.get("/internal/v1/users")).status == 200
            assert (await client.get("/api/v1/users")).status == 404

    async def test_dashed_parameter_served(self, routes_root: Path, write_route) -> None:
        write_route(
            "v1/users/[user-id].py",
            """
            def register(router):
                @router.get()
                def show(request):
                    return {"userId": request.path_params["user-id"]}
            """,
        )
        app = App()
        app.mount_routes(routes_root)

        async with TestClient(app) as client:
            assert assert_json(await client.get("/api/v1/users/u-42")) == {"userId": "u-42"}

    async def test_default_routes_dir_from_config(self, routes_root: Path, write_route) -> None:
        write_route("v2/users/index.py", USERS_SOURCE)
        app = App(AppConfig(routes_dir=routes_root, api_base_path="/v2-api"))
        app.mount_routes()

        async with TestClient(app) as client:
            assert (await client.get("/v2-api/v2/users")).status == 200

    async def test_broken_module_skipped(self, routes_root: Path, write_route) -> None:
        write_route("v1/users/index.py", USERS_SOURCE)
        write_route("v1/orders/index.py", "raise RuntimeError('bad')\n")
        app = App()
        app.mount_routes(routes_root)

        async with TestClient(app) as client:
            assert (await client.get("/api/v1/users")).status == 200
            assert (await client.get("/api/v1/orders")).status == 404

        (report,) = app.discovery_reports
        assert len(report.failed) == 1

    async def test_missing_directory_fails_startup(self, tmp_path: Path) -> None:
        app = App()
        app.mount_routes(tmp_path / "missing")

        with pytest.raises(DirectoryUnavailable):
            await app.startup()
        assert app.frozen is False

    async def test_app_route_collides_with_discovered(
        self, routes_root: Path, write_route
    ) -> None:
        write_route("v1/users/index.py", USERS_SOURCE)
        app = App()

        @app.route("/api/v1/users")
        def shadow():
            return []

        app.mount_routes(routes_root)

        with pytest.raises(DuplicateRoute) as exc_info:
            await app.startup()
        assert exc_info.value.existing.endswith(".shadow>")


class TestFreeze:
    async def test_registry_available_after_startup(self) -> None:
        app = App()

        @app.route("/items", name="items")
        def items():
            return []

        with pytest.raises(RuntimeError, match="not been started"):
            _ = app.registry

        await app.startup()

        assert app.frozen is True
        assert app.registry.frozen is True
        assert app.registry.get("GET", "/items") is not None

    async def test_route_paths_normalized(self) -> None:
        app = App()

        @app.route("items/")
        def items():
            return []

        await app.startup()
        assert ("GET", "/items") in app.registry

    async def test_modifications_rejected_after_freeze(self) -> None:
        app = App()
        await app.startup()

        with pytest.raises(RuntimeError, match="Cannot modify"):
            app.route("/late")(lambda: None)
        with pytest.raises(RuntimeError):
            app.mount_routes("routes")
        with pytest.raises(RuntimeError):
            app.add_middleware(lambda request, next: next(request))

    async def test_startup_twice_discovers_once(self, routes_root: Path, write_route) -> None:
        write_route("v1/users/index.py", USERS_SOURCE)
        app = App()
        app.mount_routes(routes_root)

        await app.startup()
        await app.startup()

        assert len(app.discovery_reports) == 1

    async def test_first_request_freezes_without_lifespan(self) -> None:
        app = App()

        @app.route("/")
        def index():
            return "ok"

        # No startup(): drive the ASGI callable directly
        messages: list[dict] = []

        async def receive() -> dict:
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message: dict) -> None:
            messages.append(message)

        await app(
            {"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""},
            receive,
            send,
        )

        assert app.frozen is True
        assert messages[0]["status"] == 200


class TestLifecycle:
    async def test_hooks_run_in_order(self) -> None:
        calls: list[str] = []
        app = App()

        @app.on_startup
        def first():
            calls.append("startup-1")

        @app.on_startup
        async def second():
            calls.append("startup-2")

        @app.on_shutdown
        def closing():
            calls.append("shutdown")

        async with TestClient(app):
            assert calls == ["startup-1", "startup-2"]
        assert calls == ["startup-1", "startup-2", "shutdown"]

    async def test_lifespan_protocol(self) -> None:
        app = App()
        incoming = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[dict] = []

        async def receive() -> dict:
            return next(incoming)

        async def send(message: dict) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert [m["type"] for m in sent] == [
            "lifespan.startup.complete",
            "lifespan.shutdown.complete",
        ]

    async def test_lifespan_startup_failure(self, tmp_path: Path) -> None:
        app = App()
        app.mount_routes(tmp_path / "missing")
        sent: list[dict] = []

        async def receive() -> dict:
            return {"type": "lifespan.startup"}

        async def send(message: dict) -> None:
            sent.append(message)

        await app({"type": "lifespan"}, receive, send)

        assert sent[0]["type"] == "lifespan.startup.failed"
        assert "missing" in sent[0]["message"]


class TestErrorTypes:
    def test_not_found_is_http_error(self) -> None:
        exc = NotFound("User 1 not found")
        assert exc.status == 404
        assert exc.code == "NOT_FOUND"
        assert str(exc) == "404: User 1 not found"
