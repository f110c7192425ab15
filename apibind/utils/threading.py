from asyncio import get_running_loop
from concurrent.futures.thread import ThreadPoolExecutor
from contextvars import copy_context
from functools import partial, wraps
from inspect import iscoroutinefunction
from typing import Any, Awaitable, Callable, TypeVar, cast

T = TypeVar("T")


def async_wrapper(
    func: Callable[..., T],
    *,
    threaded: bool = True,
    workers: ThreadPoolExecutor | None = None,
) -> Callable[..., Awaitable[T]]:
    if iscoroutinefunction(func) or iscoroutinefunction(
        getattr(func, "__call__", None)
    ):
        return func  # type: ignore

    @wraps(func)
    async def dummy(*args: Any) -> T:
        return func(*args)

    if not threaded:
        return dummy

    @wraps(func)
    async def inner(*args: Any) -> T:
        ctx = copy_context()
        func_call = partial(ctx.run, func, *args)
        # Resolve the running loop at call time, the wrapper is usually
        # created at import time when no loop is running.
        loop = get_running_loop()
        res = await loop.run_in_executor(workers, func_call)
        return cast(T, res)

    return inner
