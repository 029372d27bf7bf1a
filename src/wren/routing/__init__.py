"""Routing — route registry and compiled route table.

Routes are collected into a ``Registry`` during startup and compiled
into an immutable trie when the app freezes.
"""

from wren.routing.registry import Registry, RouteRegistration, join_paths
from wren.routing.route import PathSegment, Route, RouteMatch
from wren.routing.router import Router, parse_path

__all__ = [
    "PathSegment",
    "Registry",
    "Route",
    "RouteMatch",
    "RouteRegistration",
    "Router",
    "join_paths",
    "parse_path",
]
