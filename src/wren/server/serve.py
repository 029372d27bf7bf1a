"""Serve a wren App with pounce.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
but wren has a live ``App`` object. We use ``pounce.Server`` directly
with the ASGI callable.
"""

from __future__ import annotations

from typing import Any

from wren.errors import ConfigurationError


def run_server(
    app: Any,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
) -> None:
    """Start a pounce server for *app* and block until it stops.

    Args:
        app: ASGI callable (wren App instance), already frozen.
        host: Bind host address.
        port: Bind port number.
        workers: Worker count. ``0`` lets pounce pick from the CPU count.
        reload: Enable auto-reload on file changes.

    Raises:
        ConfigurationError: If pounce is not installed.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = "Serving requires pounce. Install it with: pip install bengal-pounce"
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
    )
    Server(config, app).run()
