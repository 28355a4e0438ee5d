"""arq worker wiring for the sweep schedule."""

from unittest.mock import AsyncMock

import pytest

from inventorypro.scheduling.schedule import SCHEDULE
from inventorypro.workers import scheduler
from inventorypro.workers.scheduler import WorkerSettings


class TestWorkerSettings:
    def test_one_cron_job_per_scheduled_sweep(self):
        assert len(WorkerSettings.cron_jobs) == len(SCHEDULE)

    def test_cron_times_follow_schedule(self):
        by_name = {job.name: job for job in WorkerSettings.cron_jobs}
        assert by_name["cron:lifecycle_sweep"].hour == {0}
        assert by_name["cron:cleanup_sweep"].hour == {1}
        assert by_name["cron:payment_due_check"].hour == {8}
        assert by_name["cron:reminder_sweep"].hour == {9}
        assert by_name["cron:low_stock_check"].hour == {0, 6, 12, 18}
        assert all(job.minute == 0 for job in WorkerSettings.cron_jobs)

    def test_lifecycle_hooks(self):
        assert WorkerSettings.on_startup is scheduler.startup
        assert WorkerSettings.on_shutdown is scheduler.shutdown


class TestWorkerJobs:
    @pytest.mark.asyncio
    async def test_reminder_job_uses_remote_first_trigger(self, monkeypatch):
        trigger = AsyncMock(return_value={"mode": "local", "result": {"reminders_attempted": 0}})
        monkeypatch.setattr("inventorypro.scheduling.jobs.trigger_reminder_sweep", trigger)

        result = await scheduler.reminder_sweep({})

        assert result["mode"] == "local"
        trigger.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lifecycle_job_delegates(self, monkeypatch):
        run = AsyncMock(return_value=2)
        monkeypatch.setattr("inventorypro.scheduling.jobs.run_lifecycle_sweep", run)
        assert await scheduler.lifecycle_sweep({}) == 2
