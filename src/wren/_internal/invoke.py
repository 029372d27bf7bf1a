"""Invoke helpers — call sync or async callables uniformly.

Route handlers, error handlers, lifecycle hooks, and a route module's
``register`` unit can all be ``def`` or ``async def``. Any code that
calls one of them goes through this helper so the sync/async check
lives in exactly one place.

Usage::

    from wren._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync — returns immediately
        def register(router):
            router.get("/")(list_users)

        # async — returns a coroutine, awaited automatically
        async def register(router):
            await warm_cache()
            router.get("/")(list_users)
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
