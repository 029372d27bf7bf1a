"""Registrar — binds a loaded route module into the registry.

The mount path of a module is ``base_path + version + url_pattern``;
each declaration's sub-path is appended to that. A module's routes are
all checked before any is written, so a collision leaves the registry
exactly as it was.
"""

from wren.errors import DuplicateRoute
from wren.routes.loader import Loaded
from wren.routing.registry import Registry, RouteRegistration, join_paths


def mount_path(outcome: Loaded, base_path: str = "") -> str:
    """Return the URL prefix a module's routes are mounted under.

    ``/api`` + ``v1`` + ``/users/:id`` -> ``/api/v1/users/:id``
    """
    return join_paths(base_path, outcome.pattern.version_segment, outcome.pattern.url_pattern)


def register_outcome(
    registry: Registry,
    outcome: Loaded,
    *,
    base_path: str = "",
) -> tuple[RouteRegistration, ...]:
    """Record every route declared by *outcome* in *registry*.

    Returns the new registrations in declaration order.

    Raises:
        DuplicateRoute: If a ``(method, path)`` key is already in the
            registry or declared twice by the same module.
    """
    mount = mount_path(outcome, base_path)
    source = outcome.candidate.full_path

    pending: dict[tuple[str, str], RouteRegistration] = {}
    for declaration in outcome.routes:
        registration = RouteRegistration(
            method=declaration.method,
            path=join_paths(mount, declaration.sub_path),
            handler=declaration.handler,
            name=declaration.name,
            pattern=outcome.pattern,
            source=source,
            include_in_docs=declaration.include_in_docs,
        )
        existing = registry.get(*registration.key)
        if existing is not None:
            raise DuplicateRoute(
                registration.method,
                registration.path,
                existing=existing.origin,
                incoming=registration.origin,
            )
        if registration.key in pending:
            raise DuplicateRoute(
                registration.method,
                registration.path,
                existing=_declared_by(pending[registration.key]),
                incoming=_declared_by(registration),
            )
        pending[registration.key] = registration

    for registration in pending.values():
        registry.add(registration)
    return tuple(pending.values())


def _declared_by(registration: RouteRegistration) -> str:
    """``<file>:<handler qualname>`` for collisions inside one module."""
    handler_name = getattr(registration.handler, "__qualname__", repr(registration.handler))
    return f"{registration.origin}:{handler_name}"
