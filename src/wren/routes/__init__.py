"""Convention-based route discovery.

A route root holds one directory per API version; files below it map to
URL patterns by name (``index`` elided, ``[id]`` -> ``:id``). Each file
exposes a ``register(router)`` unit that declares its handlers::

    routes/
        v1/
            users/
                index.py     -> /api/v1/users
                [id].py      -> /api/v1/users/:id
"""

from wren.routes.discovery import (
    DiscoveryReport,
    DiscoveryState,
    RouteDiscovery,
    discover_routes,
)
from wren.routes.loader import Failed, Loaded, LoadOutcome, load_route_module
from wren.routes.registrar import mount_path, register_outcome
from wren.routes.report import DiagnosticReporter, DiscoveryRecord
from wren.routes.scope import RouteDeclaration, RouteScope
from wren.routes.transform import RoutePattern, transform
from wren.routes.walker import CandidateFile, iter_candidates

__all__ = [
    "CandidateFile",
    "DiagnosticReporter",
    "DiscoveryRecord",
    "DiscoveryReport",
    "DiscoveryState",
    "Failed",
    "LoadOutcome",
    "Loaded",
    "RouteDeclaration",
    "RouteDiscovery",
    "RoutePattern",
    "RouteScope",
    "discover_routes",
    "iter_candidates",
    "load_route_module",
    "mount_path",
    "register_outcome",
    "transform",
]
