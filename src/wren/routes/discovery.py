"""Route discovery orchestration.

Drives the walker, transformer, loader, and registrar over one route
root, strictly in walk order::

    IDLE -> WALKING -> (TRANSFORMING -> LOADING -> REGISTERING)* -> COMPLETE
                                                                 -> FATAL_ABORTED

Per-file problems (bad path, failing import, missing ``register``) are
recorded and skipped. A missing root or a duplicate route aborts the
whole pass.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from wren.errors import DirectoryUnavailable, DuplicateRoute, TransformInvalid
from wren.routes.loader import Failed, load_route_module
from wren.routes.registrar import mount_path, register_outcome
from wren.routes.report import DiagnosticReporter, DiscoveryRecord
from wren.routes.transform import transform
from wren.routes.walker import DEFAULT_EXTENSIONS, CandidateFile, iter_candidates
from wren.routing.registry import Registry

logger = logging.getLogger("wren.routes")


class DiscoveryState(Enum):
    IDLE = "idle"
    WALKING = "walking"
    TRANSFORMING = "transforming"
    LOADING = "loading"
    REGISTERING = "registering"
    COMPLETE = "complete"
    FATAL_ABORTED = "fatal_aborted"


@dataclass(frozen=True, slots=True)
class DiscoveryReport:
    """Result of a completed discovery pass."""

    root: Path
    state: DiscoveryState
    registry: Registry
    records: tuple[DiscoveryRecord, ...]

    @property
    def succeeded(self) -> tuple[DiscoveryRecord, ...]:
        return tuple(r for r in self.records if r.ok)

    @property
    def failed(self) -> tuple[DiscoveryRecord, ...]:
        return tuple(r for r in self.records if not r.ok)

    @property
    def ok(self) -> bool:
        """True when every candidate file was registered."""
        return not self.failed


class RouteDiscovery:
    """One discovery pass over a route root.

    Usage::

        discovery = RouteDiscovery("routes", base_path="/api")
        report = await discovery.run()
        report.registry  # frozen, ready for Router.from_registry()

    Pass an existing *registry* to add discovered routes next to routes
    registered elsewhere; with ``freeze=False`` the caller freezes it.
    """

    __slots__ = ("_state", "base_path", "extensions", "freeze", "registry", "reporter", "root")

    def __init__(
        self,
        root: str | Path,
        *,
        base_path: str = "",
        registry: Registry | None = None,
        reporter: DiagnosticReporter | None = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        freeze: bool = True,
    ) -> None:
        self.root = Path(root)
        self.base_path = base_path
        self.registry = registry if registry is not None else Registry()
        self.reporter = reporter or DiagnosticReporter()
        self.extensions = tuple(extensions)
        self.freeze = freeze
        self._state = DiscoveryState.IDLE

    @property
    def state(self) -> DiscoveryState:
        return self._state

    async def run(self) -> DiscoveryReport:
        """Discover, load, and register every route module under the root.

        Raises:
            DirectoryUnavailable: If the root is missing or unreadable.
                Nothing is registered.
            DuplicateRoute: If two declarations resolve to the same
                method and path. The registry is left unfrozen.
            RuntimeError: If this pass has already run.
        """
        if self._state is not DiscoveryState.IDLE:
            msg = f"Route discovery already ran (state: {self._state.value})"
            raise RuntimeError(msg)

        started = time.perf_counter()
        logger.info("Loading routes from %s", self.root)
        self._state = DiscoveryState.WALKING
        try:
            candidates = iter_candidates(
                self.root,
                extensions=self.extensions,
                on_error=self._on_walk_error,
            )
            for candidate in candidates:
                await self._process(candidate)
                self._state = DiscoveryState.WALKING
        except (DirectoryUnavailable, DuplicateRoute) as exc:
            self._state = DiscoveryState.FATAL_ABORTED
            logger.error("Route discovery aborted: %s", exc)
            raise

        if self.freeze:
            self.registry.freeze()
        self._state = DiscoveryState.COMPLETE

        report = DiscoveryReport(
            root=self.root,
            state=self._state,
            registry=self.registry,
            records=self.reporter.records,
        )
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Route discovery complete: %d loaded, %d failed (%.1fms)",
            len(report.succeeded),
            len(report.failed),
            elapsed_ms,
        )
        return report

    async def _process(self, candidate: CandidateFile) -> None:
        path = candidate.full_path

        self._state = DiscoveryState.TRANSFORMING
        try:
            pattern = transform(candidate.relative_segments)
        except TransformInvalid as exc:
            self.reporter.failure(path, exc, kind=type(exc).__name__)
            return

        self._state = DiscoveryState.LOADING
        outcome = await load_route_module(candidate, pattern)
        if isinstance(outcome, Failed):
            self.reporter.failure(
                path,
                outcome.error,
                kind=type(outcome.error).__name__,
                pattern=pattern,
            )
            return

        self._state = DiscoveryState.REGISTERING
        registrations = register_outcome(self.registry, outcome, base_path=self.base_path)
        self.reporter.success(
            path,
            pattern,
            mount_path=mount_path(outcome, self.base_path),
            methods=tuple(dict.fromkeys(r.method for r in registrations)),
        )

    def _on_walk_error(self, path: Path, exc: OSError) -> None:
        self.reporter.failure(path, exc, kind="DirectoryUnreadable")


async def discover_routes(
    root: str | Path,
    *,
    base_path: str = "",
    registry: Registry | None = None,
    reporter: DiagnosticReporter | None = None,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    freeze: bool = True,
) -> DiscoveryReport:
    """Run a single discovery pass. See ``RouteDiscovery``."""
    discovery = RouteDiscovery(
        root,
        base_path=base_path,
        registry=registry,
        reporter=reporter,
        extensions=extensions,
        freeze=freeze,
    )
    return await discovery.run()
