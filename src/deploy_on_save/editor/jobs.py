from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from deploy_on_save.core.ports.jobs import LongJob

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str, str], None]


class LongJobRunner:
    """Run long jobs on the event loop, serialising exclusive jobs per key.

    Implements the ``JobRunnerPort`` protocol. Exclusive jobs sharing a key
    run one at a time in submission order; other jobs start immediately.
    Each job's terminal status goes to ``on_status`` once.
    """

    def __init__(self, on_status: StatusCallback | None = None) -> None:
        self._on_status = on_status
        self._locks: dict[str, asyncio.Lock] = {}
        self._queued: dict[str, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._running = 0

    @property
    def running(self) -> int:
        return self._running

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def queued(self, key: str) -> int:
        """Exclusive jobs for ``key`` that are running or waiting to run."""
        return self._queued.get(key, 0)

    def start_long_job(self, job: LongJob, key: str, exclusive: bool = False) -> None:
        task = asyncio.get_running_loop().create_task(self._run(job, key, exclusive))
        if exclusive:
            self._locks.setdefault(key, asyncio.Lock())
            self._queued[key] = self._queued.get(key, 0) + 1
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def join(self) -> None:
        """Wait until every scheduled job has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def _run(self, job: LongJob, key: str, exclusive: bool) -> None:
        if not exclusive:
            await self._invoke(job, key)
            return
        try:
            async with self._locks[key]:
                await self._invoke(job, key)
        finally:
            self._queued[key] -= 1
            if not self._queued[key]:
                del self._queued[key]
                del self._locks[key]

    async def _invoke(self, job: LongJob, key: str) -> None:
        reported = False

        def done(status: str) -> None:
            nonlocal reported
            if reported:
                logger.warning("Job %s reported completion more than once", key)
                return
            reported = True
            self._report(key, status)

        self._running += 1
        try:
            await job(done)
        except Exception:
            logger.exception("Long job %s failed", key)
        finally:
            self._running -= 1
            if not reported:
                logger.warning("Job %s finished without reporting a status", key)

    def _report(self, key: str, status: str) -> None:
        logger.info("Job %s finished: %s", key, status or "(no change)")
        if self._on_status is not None:
            self._on_status(key, status)
