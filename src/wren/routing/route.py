"""Compiled route records used by the trie router.

A ``Route`` is built from one ``RouteRegistration`` when the app freezes.
Path params use ``:name`` segments, where *name* is whatever text the
route file's brackets held (``[user-id].py`` -> ``:user-id``).
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a route path.

    ``users`` is static. ``:id`` is a param named ``id``. Param segments
    under the same parent become ordered edges in the trie, tried after
    every static child and in the order their routes were registered.
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A handler bound to a path for a set of methods.

    ``Router.from_registry`` creates one per registration, so
    ``methods`` holds a single verb there; ``HEAD`` is not listed and
    falls back to ``GET`` at match time.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A matched route plus the raw string values of its path params."""

    route: Route
    path_params: dict[str, str]
