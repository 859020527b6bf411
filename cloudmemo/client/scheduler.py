"""
CloudMemo Client - Debounce Scheduler
=======================================

One cancellable deferred task per draft. Scheduling again supersedes the
previous task, so a burst of edits produces a single callback after the last
one has been quiet for `delay` seconds.
"""

import asyncio
from typing import Awaitable, Callable, Optional


class DebounceScheduler:
    """Owns at most one pending asyncio.Task."""

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        """(Re)start the timer; `callback` runs once `delay` seconds from now."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(delay, callback))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(delay)
        # The timer has fired: from here on the callback may schedule or
        # cancel without cancelling itself.
        if self._task is asyncio.current_task():
            self._task = None
        await callback()
