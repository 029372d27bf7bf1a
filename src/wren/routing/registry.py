"""Route registry — the single place routes are recorded before compilation.

Populated during startup (app routes, built-in routes, discovered routes),
frozen, then read-only for the lifetime of the process. The Router is
compiled from a frozen registry.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from wren.errors import DuplicateRoute

if TYPE_CHECKING:
    from wren.routes.transform import RoutePattern


def join_paths(*parts: str) -> str:
    """Join URL path fragments into one normalized path.

    Empty fragments and stray slashes are dropped; the result always
    starts with ``/`` and never ends with one (except the root)::

        join_paths("/api", "v1", "/users/:id") == "/api/v1/users/:id"
        join_paths("/api/v1/users", "/") == "/api/v1/users"
        join_paths("", "") == "/"
    """
    segments = [seg for part in parts for seg in part.split("/") if seg]
    return "/" + "/".join(segments)


@dataclass(frozen=True, slots=True)
class RouteRegistration:
    """One ``(method, path)`` entry in the registry.

    ``pattern`` and ``source`` are set for routes found by discovery and
    are ``None`` for routes registered on the app directly.
    """

    method: str
    path: str
    handler: Callable[..., Any]
    name: str | None = None
    pattern: RoutePattern | None = None
    source: Path | None = None
    include_in_docs: bool = True

    @property
    def key(self) -> tuple[str, str]:
        return (self.method, self.path)

    @property
    def origin(self) -> str:
        """Human-readable origin for diagnostics."""
        if self.source is not None:
            return str(self.source)
        handler_name = getattr(self.handler, "__qualname__", repr(self.handler))
        return f"<app:{handler_name}>"


class Registry:
    """Insertion-ordered mapping of ``(method, path)`` to registrations.

    Usage::

        registry = Registry()
        registry.add(RouteRegistration("GET", "/api/v1/users", list_users))
        registry.freeze()
        ("GET", "/api/v1/users") in registry  # True
    """

    __slots__ = ("_entries", "_frozen")

    def __init__(self) -> None:
        self._entries: dict[tuple[str, str], RouteRegistration] = {}
        self._frozen = False

    def add(self, registration: RouteRegistration) -> RouteRegistration:
        """Record *registration*.

        Raises:
            DuplicateRoute: If the ``(method, path)`` key is already taken.
            RuntimeError: If the registry has been frozen.
        """
        self._check_not_frozen()
        existing = self._entries.get(registration.key)
        if existing is not None:
            raise DuplicateRoute(
                registration.method,
                registration.path,
                existing=existing.origin,
                incoming=registration.origin,
            )
        self._entries[registration.key] = registration
        return registration

    def get(self, method: str, path: str) -> RouteRegistration | None:
        return self._entries.get((method, path))

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def paths(self) -> list[str]:
        """Distinct registered paths in first-registration order."""
        return list(dict.fromkeys(path for _, path in self._entries))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[RouteRegistration]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"Registry({len(self._entries)} routes, {state})"

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot register routes after the registry has been frozen."
            raise RuntimeError(msg)
