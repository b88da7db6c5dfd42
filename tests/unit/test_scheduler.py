"""
Daily report scheduler wiring.
"""
import logging
from unittest.mock import AsyncMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from visitreport.services.background.scheduler import (
    DAILY_REPORT_JOB_ID,
    create_report_scheduler,
    run_daily_report_job,
)
from visitreport.services.reports.models import ScheduledRunResult


def test_scheduler_registers_single_daily_job():
    orchestrator = AsyncMock()

    scheduler = create_report_scheduler(orchestrator, "53 14 * * *", "Asia/Kolkata")

    [job] = scheduler.get_jobs()
    assert job.id == DAILY_REPORT_JOB_ID
    assert isinstance(job.trigger, CronTrigger)
    assert str(job.trigger.timezone) == "Asia/Kolkata"
    assert job.max_instances == 1
    assert job.args == (orchestrator,)
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["hour"] == "14"
    assert fields["minute"] == "53"


@pytest.mark.asyncio
async def test_job_returns_run_result():
    result = ScheduledRunResult(success=True, message="Daily report sent successfully", visit_count=3)
    orchestrator = AsyncMock()
    orchestrator.run_scheduled.return_value = result

    assert await run_daily_report_job(orchestrator) is result


@pytest.mark.asyncio
async def test_job_logs_and_swallows_failures(caplog):
    orchestrator = AsyncMock()
    orchestrator.run_scheduled.side_effect = RuntimeError("store down")

    with caplog.at_level(logging.ERROR):
        assert await run_daily_report_job(orchestrator) is None

    assert "store down" in caplog.text
