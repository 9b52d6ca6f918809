"""Fire-and-forget task spawning on the running event loop.

Spawned coroutines run detached from their caller. Failures are logged and
never re-raised, so a broken handler cannot take down the session loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)

# Strong references; the loop only keeps weak ones.
_PENDING: set[asyncio.Task[Any]] = set()


def _on_done(task: asyncio.Task[Any]) -> None:
    _PENDING.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("task %s failed", task.get_name(), exc_info=exc)


def spawn(coro: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
    """Schedule ``coro`` on the running loop without waiting for it."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _PENDING.add(task)
    task.add_done_callback(_on_done)
    return task


def pending_count() -> int:
    return len(_PENDING)


async def drain() -> None:
    """Wait until every spawned task, including ones spawned meanwhile, is done."""
    while _PENDING:
        await asyncio.wait(list(_PENDING))


__all__ = ["drain", "pending_count", "spawn"]
