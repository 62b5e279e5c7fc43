import asyncio
import functools
from typing import Awaitable, Optional, TypeVar

T = TypeVar("T")


def _release_waiter(waiter: asyncio.Future, *args):  # pylint: disable=unused-argument
    if not waiter.done():
        waiter.set_result(None)


async def cancel_and_wait(fut: asyncio.Future, *, timeout: Optional[float] = None):
    """Cancel the *fut* future or task and wait until it completes."""
    waiter = asyncio.get_running_loop().create_future()
    cb = functools.partial(_release_waiter, waiter)
    fut.add_done_callback(cb)

    try:
        fut.cancel()
        # waiting on the waiter keeps the caller itself cancellable
        await asyncio.wait_for(waiter, timeout=timeout)
    finally:
        fut.remove_done_callback(cb)


async def wait_task(
    aw: Awaitable[T],
    *,
    event: asyncio.Event,
    cancel_timeout: Optional[float] = None,
) -> tuple[Optional[T], bool]:
    """
    Await *aw* unless *event* gets set first.
    Returns the result and whether the wait was interrupted by the event.
    """
    task = asyncio.ensure_future(aw)
    event_task = asyncio.ensure_future(event.wait())
    try:
        await asyncio.wait([task, event_task], return_when=asyncio.FIRST_COMPLETED)

        if not task.done():
            await cancel_and_wait(task, timeout=cancel_timeout)
            return None, True

        return task.result(), event.is_set()
    finally:
        for t in (task, event_task):
            if not t.done():
                t.cancel()
