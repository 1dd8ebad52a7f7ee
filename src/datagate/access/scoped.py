"""
Scoped execution ("ensure open").

Every driver round-trip made by ``DataAccess`` runs inside ``opened()``:
acquire an open reference, run, release on every path.  ``ensure_open``
wraps coroutine operations and ``ensure_open_stream`` wraps operations that
produce an async iterator, forwarding each item as soon as it arrives.

If the open fails the operation is never invoked.  The release step is a
``ConnectionHandle.close()``, which never raises, so it cannot mask the
operation's own outcome.

Example::

    total = await ensure_open(handle, lambda: driver.update_batch(cmd))

    async with aclosing(ensure_open_stream(handle, lambda: driver.query_lines(cmd))) as rows:
        async for item in rows:
            ...
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing, asynccontextmanager
from typing import TypeVar

from datagate.access.lifecycle import ConnectionHandle

T = TypeVar("T")


@asynccontextmanager
async def opened(handle: ConnectionHandle) -> AsyncIterator[ConnectionHandle]:
    """Hold one open reference on ``handle`` for the duration of the block."""
    await handle.open()
    try:
        yield handle
    finally:
        await handle.close()


async def ensure_open(handle: ConnectionHandle, operation: Callable[[], Awaitable[T]]) -> T:
    """Run ``operation`` with the connection open and return its result."""
    async with opened(handle):
        return await operation()


async def ensure_open_stream(
    handle: ConnectionHandle, operation: Callable[[], AsyncIterator[T]]
) -> AsyncIterator[T]:
    """Iterate ``operation()`` with the connection open, re-yielding every item.

    The connection reference is released when the stream is exhausted, when
    it fails, or when the consumer closes the generator early.
    """
    async with opened(handle):
        async with aclosing(operation()) as items:
            async for item in items:
                yield item


__all__ = ["opened", "ensure_open", "ensure_open_stream"]
