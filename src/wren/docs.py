"""OpenAPI document and HTML reference page.

Both are generated from the frozen route registry, so they always
match what the server actually routes. ``:param`` segments become
OpenAPI ``{param}`` templates; the version directory becomes the tag.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from wren.config import AppConfig
from wren.errors import ConfigurationError
from wren.routing.registry import Registry, RouteRegistration
from wren.routing.router import parse_path

if TYPE_CHECKING:
    from kida import Environment

OPENAPI_VERSION = "3.1.0"
DEFAULT_TAG = "default"

_ERROR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "details": {"type": "object"},
                "timestamp": {"type": "string", "format": "date-time"},
                "requestId": {"type": "string"},
            },
            "required": ["code", "message", "timestamp", "requestId"],
        }
    },
}


def openapi_path(path: str) -> str:
    """``/users/:id`` -> ``/users/{id}``."""
    parts = [
        f"{{{seg.param_name}}}" if seg.is_param else seg.value for seg in parse_path(path)
    ]
    return "/" + "/".join(parts)


def _summary(registration: RouteRegistration) -> str | None:
    doc = inspect.getdoc(registration.handler)
    if not doc:
        return None
    return doc.splitlines()[0].strip() or None


def _operation_id(registration: RouteRegistration) -> str:
    if registration.name:
        return registration.name
    slug = "_".join(
        seg.param_name or "" if seg.is_param else seg.value
        for seg in parse_path(registration.path)
    )
    slug = "".join(ch if ch.isalnum() else "_" for ch in slug) or "root"
    return f"{registration.method.lower()}_{slug}"


def _operation(registration: RouteRegistration) -> dict[str, Any]:
    tag = registration.pattern.version_segment if registration.pattern else DEFAULT_TAG
    operation: dict[str, Any] = {
        "operationId": _operation_id(registration),
        "tags": [tag],
    }
    summary = _summary(registration)
    if summary:
        operation["summary"] = summary

    params = [seg.param_name for seg in parse_path(registration.path) if seg.is_param]
    if params:
        operation["parameters"] = [
            {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
            for name in params
        ]

    operation["responses"] = {
        "200": {"description": "Successful response"},
        "default": {
            "description": "Error response",
            "content": {
                "application/json": {"schema": {"$ref": "#/components/schemas/Error"}}
            },
        },
    }
    if registration.source is not None:
        operation["x-source"] = str(registration.source)
    return operation


def build_openapi(registry: Registry, config: AppConfig) -> dict[str, Any]:
    """Build an OpenAPI 3.1 document for every documented route."""
    paths: dict[str, dict[str, Any]] = {}
    tags: dict[str, None] = {}
    for registration in registry:
        if not registration.include_in_docs:
            continue
        operation = _operation(registration)
        tags.update(dict.fromkeys(operation["tags"]))
        item = paths.setdefault(openapi_path(registration.path), {})
        item[registration.method.lower()] = operation

    return {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": config.docs_title,
            "description": config.docs_description,
            "version": config.docs_version,
        },
        "servers": [{"url": "/"}],
        "tags": [{"name": name} for name in tags],
        "paths": paths,
        "components": {"schemas": {"Error": _ERROR_SCHEMA}},
    }


DOCS_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>{{ title }}</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 2rem auto; max-width: 60rem; }
    .op { display: flex; gap: 1rem; padding: .4rem .6rem; border-bottom: 1px solid #ddd; }
    .method { font-weight: bold; min-width: 5rem; text-transform: uppercase; }
    code { font-size: 1rem; }
    .summary { color: #555; }
  </style>
</head>
<body>
  <h1>{{ title }} <small>{{ version }}</small></h1>
  <p>{{ description }}</p>
  <p><a href="{{ spec_url }}">OpenAPI document</a></p>
  {% for group in groups %}
  <h2>{{ group.tag }}</h2>
  {% for op in group.operations %}
  <div class="op">
    <span class="method">{{ op.method }}</span>
    <code>{{ op.path }}</code>
    {% if op.summary %}<span class="summary">{{ op.summary }}</span>{% end %}
  </div>
  {% end %}
  {% end %}
</body>
</html>
"""


def _docs_environment() -> Environment:
    try:
        from kida import Environment
    except ImportError as exc:
        msg = "The HTML docs page requires kida. Install it with: pip install kida-templates"
        raise ConfigurationError(msg) from exc
    return Environment(autoescape=True)


@dataclass(frozen=True, slots=True)
class _DocsOperation:
    method: str
    path: str
    summary: str | None


@dataclass(frozen=True, slots=True)
class _DocsGroup:
    tag: str
    operations: tuple[_DocsOperation, ...]


def _groups(document: dict[str, Any]) -> list[_DocsGroup]:
    by_tag: dict[str, list[_DocsOperation]] = {}
    for path, item in document["paths"].items():
        for method, operation in item.items():
            for tag in operation["tags"]:
                by_tag.setdefault(tag, []).append(
                    _DocsOperation(method, path, operation.get("summary"))
                )
    return [_DocsGroup(tag, tuple(ops)) for tag, ops in by_tag.items()]


def render_docs_page(document: dict[str, Any], spec_url: str) -> str:
    """Render the HTML reference page for an OpenAPI *document*.

    Raises:
        ConfigurationError: If kida is not installed.
    """
    env = _docs_environment()
    template = env.from_string(DOCS_TEMPLATE)
    info = document["info"]
    return template.render(
        {
            "title": info["title"],
            "version": info["version"],
            "description": info["description"],
            "groups": _groups(document),
            "spec_url": spec_url,
        }
    )
