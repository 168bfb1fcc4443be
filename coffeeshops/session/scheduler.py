from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class DeferredScheduler:
    """
    Runs callables after a delay on the running event loop.

    Every ``schedule`` call takes a fresh generation number for its key. When
    a task wakes up it only applies its callable if it is still the newest
    generation for that key; otherwise the result is dropped. Stale timers
    are never cancelled, they just lose. A key is forgotten once its newest
    task finishes.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._generations: dict[str, int] = {}
        self._pending: set[asyncio.Task] = set()

    def schedule(self, key: str, delay: float, fn: Callable[..., Any], *args: Any) -> asyncio.Task:
        # Generations are unique across keys so a forgotten key never reuses one
        generation = next(self._counter)
        self._generations[key] = generation

        task = asyncio.get_running_loop().create_task(
            self._run(key, generation, delay, fn, args)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(
        self,
        key: str,
        generation: int,
        delay: float,
        fn: Callable[..., Any],
        args: tuple[Any, ...],
    ) -> Any:
        try:
            await asyncio.sleep(delay)
            if self._generations.get(key) != generation:
                logger.debug("Dropping stale deferred result for %s (generation %d)", key, generation)
                return None
            return fn(*args)
        finally:
            if self._generations.get(key) == generation:
                del self._generations[key]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def tracked_keys(self) -> list[str]:
        return list(self._generations)

    def cancel_pending(self) -> int:
        """Cancel every task that has not run yet; returns how many were cancelled."""
        cancelled = 0
        for task in list(self._pending):
            if task.cancel():
                cancelled += 1
        self._generations.clear()
        if cancelled:
            logger.info("Cancelled %d pending deferred tasks", cancelled)
        return cancelled

    async def drain(self) -> None:
        """Wait until every scheduled task has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
