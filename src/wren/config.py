"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``load_config()`` builds one from environment
variables for deployments that configure through the process environment.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from wren.errors import ConfigurationError

ENVIRONMENTS: frozenset[str] = frozenset({"development", "staging", "production"})
LOG_LEVELS: frozenset[str] = frozenset({"debug", "info", "warning", "error", "critical"})
LOG_FORMATS: frozenset[str] = frozenset({"text", "json"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, api_base_path="/v2-api", docs_enabled=False)
    """

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "development"
    debug: bool = False
    workers: int = 1
    reload: bool = False

    # Routes
    routes_dir: str | Path = "routes"
    api_base_path: str = "/api"
    health_path: str = "/health"

    # Documentation
    docs_enabled: bool = True
    docs_path: str = "/api-docs"
    docs_title: str = "API Documentation"
    docs_description: str = "API Documentation"
    docs_version: str = "1.0.0"

    # CORS
    cors_origins: tuple[str, ...] = ("*",)
    cors_credentials: bool = True

    # Logging
    log_level: str = "info"
    log_format: str = "text"
    log_file: str | None = None
    request_logging: bool = True
    error_logging: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.port <= 65535:
            msg = f"port must be between 1 and 65535, got {self.port}"
            raise ConfigurationError(msg)
        if self.environment not in ENVIRONMENTS:
            msg = (
                f"environment must be one of {sorted(ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )
            raise ConfigurationError(msg)
        if self.log_level not in LOG_LEVELS:
            msg = f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}"
            raise ConfigurationError(msg)
        if self.log_format not in LOG_FORMATS:
            msg = f"log_format must be one of {sorted(LOG_FORMATS)}, got {self.log_format!r}"
            raise ConfigurationError(msg)
        if self.workers < 0:
            msg = f"workers must be >= 0, got {self.workers}"
            raise ConfigurationError(msg)
        for name in ("api_base_path", "health_path", "docs_path"):
            value = getattr(self, name)
            if value and not value.startswith("/"):
                msg = f"{name} must start with '/', got {value!r}"
                raise ConfigurationError(msg)

    @property
    def is_development(self) -> bool:
        """True when running in the development environment."""
        return self.environment == "development"

    @property
    def routes_path(self) -> Path:
        """The route directory as a ``Path``."""
        return Path(self.routes_dir)


# Environment variable -> AppConfig field
_ENV_FIELDS: dict[str, str] = {
    "HOST": "host",
    "PORT": "port",
    "APP_ENV": "environment",
    "DEBUG": "debug",
    "WORKERS": "workers",
    "RELOAD": "reload",
    "ROUTES_DIR": "routes_dir",
    "API_BASE_PATH": "api_base_path",
    "HEALTH_PATH": "health_path",
    "DOCS_ENABLED": "docs_enabled",
    "DOCS_PATH": "docs_path",
    "DOCS_TITLE": "docs_title",
    "DOCS_DESCRIPTION": "docs_description",
    "DOCS_VERSION": "docs_version",
    "CORS_ORIGIN": "cors_origins",
    "CORS_CREDENTIALS": "cors_credentials",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
    "LOG_FILE": "log_file",
    "LOG_ENABLE_REQUEST": "request_logging",
    "LOG_ENABLE_ERROR": "error_logging",
}

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f"{name} must be a boolean (true/false), got {raw!r}"
    raise ConfigurationError(msg)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from None


def _parse_origins(raw: str) -> tuple[str, ...]:
    """``true`` allows any origin, ``false`` none, otherwise a comma list."""
    value = raw.strip()
    if value.lower() == "true":
        return ("*",)
    if value.lower() == "false":
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _coerce(env_name: str, field_name: str, raw: str) -> Any:
    """Convert an environment string to the type of *field_name*."""
    if field_name == "cors_origins":
        return _parse_origins(raw)
    if field_name in ("port", "workers"):
        return _parse_int(env_name, raw)
    if field_name in (
        "debug",
        "reload",
        "docs_enabled",
        "cors_credentials",
        "request_logging",
        "error_logging",
    ):
        return _parse_bool(env_name, raw)
    if field_name in ("log_level", "environment"):
        return raw.strip().lower()
    return raw


def load_config(environ: Mapping[str, str] | None = None, **overrides: Any) -> AppConfig:
    """Build an ``AppConfig`` from environment variables.

    Unset variables keep the dataclass defaults. Keyword *overrides*
    take precedence over the environment::

        config = load_config(port=8080)

    Raises:
        ConfigurationError: If a variable cannot be coerced or a value
            fails ``AppConfig`` validation.
    """
    env = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for env_name, field_name in _ENV_FIELDS.items():
        raw = env.get(env_name)
        if raw is None:
            continue
        values[field_name] = _coerce(env_name, field_name, raw)

    known = {f.name for f in fields(AppConfig)}
    unknown = set(overrides) - known
    if unknown:
        msg = f"Unknown config option(s): {', '.join(sorted(unknown))}"
        raise ConfigurationError(msg)

    values.update(overrides)
    return AppConfig(**values)
