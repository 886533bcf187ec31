"""Invoke helpers — call sync or async callables uniformly.

Steps, credential stores and error handlers can be ``def`` or
``async def``. Any code that calls a user-provided callable goes through
this helper so the sync/async check lives in exactly one place.

Usage::

    from perch._internal.invoke import invoke

    result = await invoke(step.func, request)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync: returns immediately
        def find_by_id(user_id):
            return users[user_id]

        # async: returns a coroutine, awaited here
        async def find_by_id(user_id):
            return await db.fetch_user(user_id)
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
