# address_verification/services/background.py
"""
Detached asyncio tasks for work that must outlive the request that started
it (full address sync, post-approval cache enrichment).

The event loop only keeps weak references to tasks, so every spawned task is
held in a module-level set until it finishes. Failures are logged here and
never propagate to whoever spawned the task.
"""
import asyncio
import logging
from typing import Awaitable, Set

logger = logging.getLogger(__name__)

_running_tasks: Set[asyncio.Task] = set()


def _on_done(task: asyncio.Task) -> None:
    _running_tasks.discard(task)
    if task.cancelled():
        logger.warning(f"Background task '{task.get_name()}' was cancelled.")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            f"Background task '{task.get_name()}' failed: {exc}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.info(f"Background task '{task.get_name()}' finished.")


def spawn(coro: Awaitable, name: str) -> asyncio.Task:
    task = asyncio.create_task(coro, name=name)
    _running_tasks.add(task)
    task.add_done_callback(_on_done)
    logger.info(f"Background task '{name}' started.")
    return task


def running_tasks() -> Set[asyncio.Task]:
    return set(_running_tasks)


async def drain() -> None:
    """Waits for every task spawned so far (used by tests and shutdown)."""
    while _running_tasks:
        await asyncio.gather(*list(_running_tasks), return_exceptions=True)
