"""Shared fixtures: route trees built on disk under tmp_path."""

import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from wren.routes.loader import MODULE_NAMESPACE

type WriteRoute = Callable[[str, str], Path]

LIST_SOURCE = """
def register(router):
    @router.get()
    def list_items():
        return {"items": []}
"""

SHOW_SOURCE = """
def register(router):
    @router.get()
    def show(id: int):
        return {"id": id}
"""


@pytest.fixture
def routes_root(tmp_path: Path) -> Path:
    root = tmp_path / "routes"
    root.mkdir()
    return root


@pytest.fixture
def write_route(routes_root: Path) -> WriteRoute:
    """Write a route module at a path relative to ``routes_root``."""

    def write(relative: str, source: str = LIST_SOURCE) -> Path:
        path = routes_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return write


@pytest.fixture(autouse=True)
def _forget_route_modules() -> Iterator[None]:
    """Drop route modules imported by a test so the next one starts clean."""
    yield
    for name in [n for n in sys.modules if n.split(".")[0] == MODULE_NAMESPACE]:
        del sys.modules[name]
