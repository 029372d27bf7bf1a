"""Route module loader.

Imports a route file by path, checks that it exposes a callable
``register`` unit, and runs that unit against a ``RouteScope``. Every
failure along the way is captured in a ``Failed`` outcome; nothing
raised by user code escapes ``load_route_module``.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

import anyio.to_thread

from wren._internal.invoke import invoke
from wren._internal.types import RegistrationUnit
from wren.errors import ModuleLoadFailed
from wren.routes.scope import RouteDeclaration, RouteScope
from wren.routes.transform import RoutePattern
from wren.routes.walker import CandidateFile

logger = logging.getLogger("wren.routes")

# Synthetic package that every loaded route module is named under
MODULE_NAMESPACE = "wren_routes"

# Name of the module attribute holding the handler-registration unit
UNIT_ATTRIBUTE = "register"

_NON_IDENTIFIER_RE = re.compile(r"\W")


@dataclass(frozen=True, slots=True)
class Loaded:
    """A route module that imported and registered cleanly."""

    candidate: CandidateFile
    pattern: RoutePattern
    unit: RegistrationUnit
    routes: tuple[RouteDeclaration, ...]

    @property
    def path(self) -> Path:
        return self.candidate.full_path


@dataclass(frozen=True, slots=True)
class Failed:
    """A route module that could not be used. ``error`` is the wrapped cause."""

    path: Path
    reason: str
    error: ModuleLoadFailed


type LoadOutcome = Loaded | Failed


def _module_part(segment: str) -> str:
    cleaned = _NON_IDENTIFIER_RE.sub("_", segment)
    if cleaned == segment and segment:
        return segment
    # Rewritten names carry a digest of the original so "a-b" and "a_b" stay distinct
    digest = hashlib.sha1(segment.encode("utf-8"), usedforsecurity=False).hexdigest()[:8]
    return f"{cleaned}_{digest}"


def module_name_for(candidate: CandidateFile) -> str:
    """Return the synthetic import name for *candidate*.

    Segments that are already identifiers are used as-is; any other
    segment has its invalid characters replaced and a short digest of
    the original text appended::

        ("v1", "users", "index.py") -> "wren_routes.v1.users.index"
        ("v1", "users", "[id].py")  -> "wren_routes.v1.users._id__<digest>"
    """
    parts = [*candidate.relative_segments[:-1], Path(candidate.relative_segments[-1]).stem]
    return ".".join([MODULE_NAMESPACE, *(_module_part(part) for part in parts)])


def _import_module(name: str, path: Path) -> ModuleType:
    """Execute the file at *path* as module *name*. Blocking."""
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        msg = f"cannot create an import spec for {path}"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module


def _failure(candidate: CandidateFile, reason: str, cause: BaseException | None = None) -> Failed:
    error = ModuleLoadFailed(candidate.full_path, reason)
    if cause is not None:
        error.__cause__ = cause
    return Failed(path=candidate.full_path, reason=reason, error=error)


async def load_route_module(candidate: CandidateFile, pattern: RoutePattern) -> LoadOutcome:
    """Import *candidate* and run its ``register`` unit.

    Returns ``Loaded`` with the declarations the unit made, or ``Failed``
    if the import raised, the module has no callable ``register``, or the
    unit raised while declaring routes. A failed module is removed from
    ``sys.modules``.
    """
    name = module_name_for(candidate)
    try:
        module = await anyio.to_thread.run_sync(_import_module, name, candidate.full_path)
    except (Exception, SystemExit) as exc:
        sys.modules.pop(name, None)
        return _failure(candidate, f"import failed: {type(exc).__name__}: {exc}", exc)

    unit = getattr(module, UNIT_ATTRIBUTE, None)
    if unit is None:
        sys.modules.pop(name, None)
        return _failure(candidate, f"module does not define a {UNIT_ATTRIBUTE!r} function")
    if not callable(unit):
        sys.modules.pop(name, None)
        return _failure(
            candidate,
            f"{UNIT_ATTRIBUTE!r} must be callable, got {type(unit).__name__}",
        )

    scope = RouteScope(pattern)
    try:
        await invoke(unit, scope)
    except (Exception, SystemExit) as exc:
        sys.modules.pop(name, None)
        return _failure(candidate, f"{UNIT_ATTRIBUTE}() raised {type(exc).__name__}: {exc}", exc)

    if not scope.declarations:
        logger.debug("Route module %s declared no routes", candidate.full_path)

    return Loaded(candidate=candidate, pattern=pattern, unit=unit, routes=scope.declarations)
