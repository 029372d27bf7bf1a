"""ASGI handler — translates ASGI scope/messages to wren types.

The only component that touches raw HTTP ASGI messages directly.
Converts scope dicts to typed Request objects, dispatches through
middleware and routing, and sends the Response back through ASGI send().
"""

import inspect
from collections.abc import Callable, Mapping
from contextvars import Token
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.context import request_var
from wren.errors import BadRequest, HTTPError
from wren.http.request import Request
from wren.middleware.protocol import AnyResponse, Next
from wren.routing.route import RouteMatch
from wren.routing.router import Router
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response

# Path parameter annotations converted before the handler is called
_CONVERTIBLE: tuple[type, ...] = (int, float)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: Mapping[int | type, Callable[..., Any]],
    debug: bool = False,
    log_errors: bool = True,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    # Build Request from ASGI scope
    request = Request.from_asgi(scope, receive)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)

    try:
        # Innermost handler: route, call, and turn errors into responses
        # so every middleware sees the final status
        async def dispatch(req: Request) -> AnyResponse:
            try:
                match = router.match(req.method, req.path)
                return await _invoke_handler(match, req)
            except HTTPError as exc:
                return await handle_http_error(exc, req, error_handlers, log_errors=log_errors)
            except Exception as exc:
                return await handle_internal_error(
                    exc, req, error_handlers, debug=debug, log_errors=log_errors
                )

        # Wrap middleware around the dispatch
        handler = dispatch
        for mw in reversed(middleware):
            outer = handler
            mw_ref = mw

            async def make_next(
                req: Request, _mw: Any = mw_ref, _next: Next = outer
            ) -> AnyResponse:
                return await _mw(req, _next)

            handler = make_next

        # Execute the full pipeline
        response = await handler(request)

    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, log_errors=log_errors)
    except Exception as exc:
        response = await handle_internal_error(
            exc, request, error_handlers, debug=debug, log_errors=log_errors
        )
    finally:
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(match: RouteMatch, request: Request) -> AnyResponse:
    """Call the matched route handler, converting path params and return value."""
    handler = match.route.handler

    # The body cache is shared so anything middleware already read stays available
    request = request.with_path_params(match.path_params)
    request_var.set(request)

    kwargs = _build_handler_kwargs(handler, request, match.path_params)

    # Call the handler (sync or async — invoke() handles both)
    result = await invoke(handler, **kwargs)

    return negotiate(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted when annotated ``int`` or ``float``)

    Raises:
        BadRequest: If a path parameter does not convert to its annotation.
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in path_params:
            value = path_params[name]
            if param.annotation in _CONVERTIBLE:
                try:
                    kwargs[name] = param.annotation(value)
                except ValueError:
                    raise BadRequest(
                        f"Invalid path parameter {name!r}",
                        {"param": name, "value": value, "expected": param.annotation.__name__},
                    ) from None
            else:
                kwargs[name] = value

    return kwargs
