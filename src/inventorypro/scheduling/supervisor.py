"""In-process sweep supervisor.

Owns one asyncio task per scheduled sweep. Each task sleeps until its next
wall-clock fire time, runs the job, and loops. Started once from the app
lifespan and stopped as a unit on shutdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone, tzinfo
from typing import Any

import structlog

from inventorypro.scheduling.schedule import SCHEDULE, ScheduledSweep, seconds_until_next_run

logger = structlog.get_logger()

JobRunner = Callable[[], Awaitable[Any]]


class SweepSupervisor:
    """Runs each sweep on its own timer task."""

    def __init__(
        self,
        runners: dict[str, JobRunner],
        tz: tzinfo = timezone.utc,
        schedule: Iterable[ScheduledSweep] = SCHEDULE,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.runners = runners
        self.tz = tz
        self.schedule = tuple(schedule)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def start(self) -> None:
        """Create one timer task per sweep. Calling twice is a no-op."""
        if self._tasks:
            return
        for sweep in self.schedule:
            runner = self.runners.get(sweep.name)
            if runner is None:
                logger.warning("sweep_runner_missing", sweep=sweep.name)
                continue
            self._tasks[sweep.name] = asyncio.create_task(
                self._run_forever(sweep, runner), name=f"sweep:{sweep.name}"
            )
        logger.info("sweep_supervisor_started", sweeps=sorted(self._tasks))

    async def stop(self) -> None:
        """Cancel every timer task and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("sweep_supervisor_stopped")

    async def run_once(self, name: str) -> Any:
        """Run a single sweep now, logging and swallowing its failure."""
        runner = self.runners[name]
        try:
            result = await runner()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("sweep_failed", sweep=name)
            return None
        logger.info("sweep_finished", sweep=name, result=result)
        return result

    async def _run_forever(self, sweep: ScheduledSweep, runner: JobRunner) -> None:
        while True:
            delay = seconds_until_next_run(self._clock(), sweep, self.tz)
            logger.debug("sweep_scheduled", sweep=sweep.name, delay_seconds=round(delay, 1))
            await asyncio.sleep(delay)
            await self.run_once(sweep.name)
