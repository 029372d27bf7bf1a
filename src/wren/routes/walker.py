"""Directory walker for route modules.

Enumerates every route source file under a root directory in byte-wise
lexical order, depth-first, so two walks over an unchanged tree yield
the same sequence. Entries whose names start with ``_`` or ``.`` are
private (``__init__.py``, ``__pycache__``, hidden files) and skipped.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from wren.errors import DirectoryUnavailable

DEFAULT_EXTENSIONS: tuple[str, ...] = (".py",)

type WalkErrorHandler = Callable[[Path, OSError], None]


@dataclass(frozen=True, slots=True)
class CandidateFile:
    """A file eligible for transformation and loading.

    ``relative_segments`` are relative to the discovery root: the first
    is the version directory and the last keeps its extension.
    """

    full_path: Path
    relative_segments: tuple[str, ...]

    @property
    def relative_path(self) -> str:
        return "/".join(self.relative_segments)


def _is_private(name: str) -> bool:
    return name.startswith(("_", "."))


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    """Read *directory* and return its entries in byte-wise name order."""
    with os.scandir(directory) as it:
        entries = list(it)
    entries.sort(key=lambda entry: os.fsencode(entry.name))
    return entries


def iter_candidates(
    root: str | Path,
    *,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    on_error: WalkErrorHandler | None = None,
) -> Iterator[CandidateFile]:
    """Walk *root* and yield a ``CandidateFile`` per route source file.

    The root is opened before this function returns, so a missing or
    unreadable root raises immediately rather than on first iteration.
    Each call starts a fresh walk.

    Args:
        root: The discovery root (one subdirectory per API version).
        extensions: File suffixes to yield, e.g. ``(".py",)``.
        on_error: Called with ``(path, exc)`` for each subdirectory that
            cannot be read. The walk continues with its siblings.

    Raises:
        DirectoryUnavailable: If *root* is missing, not a directory, or
            cannot be read.
    """
    root_path = Path(root)
    if not root_path.exists():
        raise DirectoryUnavailable(root_path, "directory not found")
    if not root_path.is_dir():
        raise DirectoryUnavailable(root_path, "not a directory")
    try:
        entries = _sorted_entries(root_path)
    except OSError as exc:
        raise DirectoryUnavailable(root_path, exc.strerror or str(exc)) from exc

    allowed = frozenset(extensions)
    return _walk(entries, (), allowed, on_error)


def _walk(
    entries: list[os.DirEntry[str]],
    prefix: tuple[str, ...],
    allowed: frozenset[str],
    on_error: WalkErrorHandler | None,
) -> Iterator[CandidateFile]:
    for entry in entries:
        if _is_private(entry.name):
            continue
        segments = (*prefix, entry.name)
        path = Path(entry.path)

        # Symlinked directories are not followed
        if entry.is_dir(follow_symlinks=False):
            try:
                children = _sorted_entries(path)
            except OSError as exc:
                if on_error is not None:
                    on_error(path, exc)
                continue
            yield from _walk(children, segments, allowed, on_error)
        elif entry.is_file() and path.suffix in allowed:
            yield CandidateFile(full_path=path, relative_segments=segments)
