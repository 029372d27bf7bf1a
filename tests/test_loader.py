"""Tests for wren.routes.loader — importing route modules and running register()."""

import sys
from pathlib import Path

from wren.errors import ModuleLoadFailed
from wren.routes.loader import Failed, Loaded, load_route_module, module_name_for
from wren.routes.transform import transform
from wren.routes.walker import CandidateFile


def _candidate(root: Path, relative: str) -> CandidateFile:
    return CandidateFile(full_path=root / relative, relative_segments=tuple(relative.split("/")))


async def _load(root: Path, relative: str) -> Loaded | Failed:
    candidate = _candidate(root, relative)
    return await load_route_module(candidate, transform(candidate.relative_segments))


class TestModuleName:
    def test_identifier_segments_kept(self, tmp_path: Path) -> None:
        candidate = _candidate(tmp_path, "v1/users/index.py")
        assert module_name_for(candidate) == "wren_routes.v1.users.index"

    def test_bracket_segment_rewritten(self, tmp_path: Path) -> None:
        name = module_name_for(_candidate(tmp_path, "v1/users/[id].py"))
        prefix, _, digest = name.rpartition("_")
        assert prefix == "wren_routes.v1.users._id_"
        assert len(digest) == 8

    def test_non_identifier_characters_replaced(self, tmp_path: Path) -> None:
        name = module_name_for(_candidate(tmp_path, "v1-beta/user-posts.py"))
        assert name.startswith("wren_routes.v1_beta_")
        assert ".user_posts_" in name

    def test_names_that_clean_alike_stay_distinct(self, tmp_path: Path) -> None:
        dashed = module_name_for(_candidate(tmp_path, "v1/a-b.py"))
        underscored = module_name_for(_candidate(tmp_path, "v1/a_b.py"))
        assert underscored == "wren_routes.v1.a_b"
        assert dashed != underscored

    def test_stable_across_calls(self, tmp_path: Path) -> None:
        candidate = _candidate(tmp_path, "v1/users/[id].py")
        assert module_name_for(candidate) == module_name_for(candidate)


class TestLoadRouteModule:
    async def test_sync_register(self, routes_root: Path, write_route) -> None:
        write_route(
            "v1/users/index.py",
            """
            def register(router):
                @router.get()
                def list_users():
                    return []

                @router.post()
                def create_user():
                    return {}
            """,
        )

        outcome = await _load(routes_root, "v1/users/index.py")

        assert isinstance(outcome, Loaded)
        assert outcome.path == routes_root / "v1/users/index.py"
        assert outcome.pattern.url_pattern == "/users"
        assert [(r.method, r.sub_path) for r in outcome.routes] == [("GET", "/"), ("POST", "/")]

    async def test_async_register(self, routes_root: Path, write_route) -> None:
        write_route(
            "v1/status.py",
            """
            async def register(router):
                router.add("GET", "/", lambda: "up")
            """,
        )

        outcome = await _load(routes_root, "v1/status.py")

        assert isinstance(outcome, Loaded)
        assert outcome.routes[0].method == "GET"

    async def test_module_registered_under_synthetic_name(
        self, routes_root: Path, write_route
    ) -> None:
        write_route("v1/users/index.py")

        outcome = await _load(routes_root, "v1/users/index.py")

        assert isinstance(outcome, Loaded)
        assert "wren_routes.v1.users.index" in sys.modules

    async def test_register_with_no_routes_is_loaded(self, routes_root: Path, write_route) -> None:
        write_route("v1/empty.py", "def register(router):\n    pass\n")

        outcome = await _load(routes_root, "v1/empty.py")

        assert isinstance(outcome, Loaded)
        assert outcome.routes == ()


class TestLoadRouteModuleFailures:
    async def test_missing_register(self, routes_root: Path, write_route) -> None:
        write_route("v1/users.py", "VALUE = 1\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, ModuleLoadFailed)
        assert "'register'" in outcome.reason
        assert outcome.path == routes_root / "v1/users.py"

    async def test_register_not_callable(self, routes_root: Path, write_route) -> None:
        write_route("v1/users.py", "register = {'GET': None}\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "must be callable" in outcome.reason
        assert "dict" in outcome.reason

    async def test_syntax_error(self, routes_root: Path, write_route) -> None:
        write_route("v1/users.py", "def register(router)\n    pass\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "SyntaxError" in outcome.reason
        assert isinstance(outcome.error.__cause__, SyntaxError)

    async def test_import_time_exception(self, routes_root: Path, write_route) -> None:
        write_route("v1/users.py", "raise RuntimeError('boom at import')\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "boom at import" in outcome.reason

    async def test_register_raises(self, routes_root: Path, write_route) -> None:
        write_route(
            "v1/users.py",
            """
            def register(router):
                raise ValueError("bad config")
            """,
        )

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "register() raised ValueError: bad config" in outcome.reason
        assert isinstance(outcome.error.__cause__, ValueError)

    async def test_unsupported_method_fails_the_module(
        self, routes_root: Path, write_route
    ) -> None:
        write_route(
            "v1/users.py",
            """
            def register(router):
                router.add("FETCH", "/", lambda: None)
            """,
        )

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "FETCH" in outcome.reason

    async def test_failed_module_removed_from_sys_modules(
        self, routes_root: Path, write_route
    ) -> None:
        write_route("v1/users.py", "raise ImportError('nope')\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "wren_routes.v1.users" not in sys.modules

    async def test_exit_at_import_time(self, routes_root: Path, write_route) -> None:
        write_route("v1/users.py", "import sys\nsys.exit(1)\n")

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "SystemExit" in outcome.reason
        assert isinstance(outcome.error.__cause__, SystemExit)
        assert "wren_routes.v1.users" not in sys.modules

    async def test_exit_inside_register(self, routes_root: Path, write_route) -> None:
        write_route(
            "v1/users.py",
            """
            import sys

            def register(router):
                sys.exit("no routes today")
            """,
        )

        outcome = await _load(routes_root, "v1/users.py")

        assert isinstance(outcome, Failed)
        assert "register() raised SystemExit: no routes today" in outcome.reason

    async def test_failed_sibling_keeps_similar_module(
        self, routes_root: Path, write_route
    ) -> None:
        write_route("v1/a_b.py")
        write_route("v1/a-b.py", "raise RuntimeError('broken')\n")

        loaded = await _load(routes_root, "v1/a_b.py")
        failed = await _load(routes_root, "v1/a-b.py")

        assert isinstance(loaded, Loaded)
        assert isinstance(failed, Failed)
        assert "wren_routes.v1.a_b" in sys.modules
