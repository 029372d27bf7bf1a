"""Diagnostic reporting for route discovery.

One ``DiscoveryRecord`` per processed file, kept in memory for the
caller and logged on ``wren.routes`` with the record attached under
``extra={"route_discovery": ...}`` so JSON log output carries it as
structured data.
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Literal

from wren.routes.transform import RoutePattern

logger = logging.getLogger("wren.routes")

type Outcome = Literal["success", "failure"]


@dataclass(frozen=True, slots=True)
class DiscoveryRecord:
    """What happened to one candidate file.

    ``kind`` names the error class for failures (``TransformInvalid``,
    ``ModuleLoadFailed``, ``DirectoryUnreadable``) and is ``None`` on
    success.
    """

    path: Path
    outcome: Outcome
    pattern: RoutePattern | None = None
    error: str | None = None
    kind: str | None = None
    mount_path: str | None = None
    methods: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome == "success"

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly form used for structured log output."""
        data: dict[str, Any] = {"path": str(self.path), "outcome": self.outcome}
        if self.pattern is not None:
            data["pattern"] = asdict(self.pattern)
        if self.mount_path is not None:
            data["mountPath"] = self.mount_path
        if self.methods:
            data["methods"] = list(self.methods)
        if self.error is not None:
            data["error"] = self.error
        if self.kind is not None:
            data["kind"] = self.kind
        return data


class DiagnosticReporter:
    """Collects discovery records and logs each one as it arrives.

    Successes log at INFO, failures at ERROR. Subclass and override
    ``emit`` to send records somewhere other than the logger.
    """

    __slots__ = ("_records", "logger")

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.logger = log or logger
        self._records: list[DiscoveryRecord] = []

    @property
    def records(self) -> tuple[DiscoveryRecord, ...]:
        return tuple(self._records)

    def success(
        self,
        path: Path,
        pattern: RoutePattern,
        *,
        mount_path: str,
        methods: tuple[str, ...] = (),
    ) -> DiscoveryRecord:
        record = DiscoveryRecord(
            path=path,
            outcome="success",
            pattern=pattern,
            mount_path=mount_path,
            methods=methods,
        )
        self._record(record)
        return record

    def failure(
        self,
        path: Path,
        error: BaseException | str,
        *,
        kind: str,
        pattern: RoutePattern | None = None,
    ) -> DiscoveryRecord:
        record = DiscoveryRecord(
            path=path,
            outcome="failure",
            pattern=pattern,
            error=str(error),
            kind=kind,
        )
        self._record(record)
        return record

    def _record(self, record: DiscoveryRecord) -> None:
        self._records.append(record)
        self.emit(record)

    def emit(self, record: DiscoveryRecord) -> None:
        extra = {"route_discovery": record.to_dict()}
        if record.ok:
            self.logger.info("Loaded route %s from %s", record.mount_path, record.path, extra=extra)
        else:
            self.logger.error(
                "Failed to load route from %s: %s", record.path, record.error, extra=extra
            )
