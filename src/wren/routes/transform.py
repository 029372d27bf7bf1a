"""Filesystem path to URL pattern transformation.

Pure functions, no I/O. The first relative segment names the API
version; the rest encode URL structure::

    ("v1", "users", "index.py")  -> RoutePattern("/users", "v1", ())
    ("v1", "users", "[id].py")   -> RoutePattern("/users/:id", "v1", ("id",))
    ("v1", "[user-id].py")       -> RoutePattern("/:user-id", "v1", ("user-id",))
    ("v1", "index.py")           -> RoutePattern("/", "v1", ())
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePosixPath

from wren.errors import TransformInvalid

INDEX_SEGMENT = "index"

# [name] where name is any non-empty text without brackets or slashes
_PARAM_SEGMENT_RE = re.compile(r"^\[([^\[\]/]+)\]$")


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """The URL template derived from a route file's location.

    ``url_pattern`` always starts with ``/`` and never contains an
    ``index`` segment. Each ``:name`` segment appears in
    ``dynamic_param_names`` in left-to-right order.
    """

    url_pattern: str
    version_segment: str
    dynamic_param_names: tuple[str, ...] = ()


def _convert_segment(segment: str, segments: tuple[str, ...]) -> tuple[str, str | None]:
    """Map one path segment to ``(url_segment, param_name or None)``."""
    if segment == INDEX_SEGMENT:
        return "", None
    match = _PARAM_SEGMENT_RE.match(segment)
    if match:
        name = match.group(1)
        return f":{name}", name
    if segment == "[]":
        raise TransformInvalid(segments, "empty parameter name '[]'")
    if "[" in segment or "]" in segment:
        raise TransformInvalid(segments, f"malformed parameter segment {segment!r}")
    return segment, None


def transform(relative_segments: Sequence[str]) -> RoutePattern:
    """Turn a file's path relative to the discovery root into a ``RoutePattern``.

    Raises:
        TransformInvalid: If the file sits directly under the root (no
            version directory), or a bracket segment is empty, malformed,
            or repeats a parameter name already used in the path.
    """
    segments = tuple(relative_segments)
    if len(segments) < 2:
        raise TransformInvalid(segments, "route files must live inside a version directory")

    version, *rest = segments
    if not version or _is_bracketed(version):
        raise TransformInvalid(segments, f"invalid version directory {version!r}")

    # Drop the extension of the file name only
    rest[-1] = PurePosixPath(rest[-1]).stem

    url_parts: list[str] = []
    params: list[str] = []
    for segment in rest:
        url_segment, param = _convert_segment(segment, segments)
        if param is not None:
            if param in params:
                raise TransformInvalid(segments, f"duplicate parameter name {param!r}")
            params.append(param)
        if url_segment:
            url_parts.append(url_segment)

    return RoutePattern(
        url_pattern="/" + "/".join(url_parts),
        version_segment=version,
        dynamic_param_names=tuple(params),
    )


def _is_bracketed(segment: str) -> bool:
    return "[" in segment or "]" in segment
