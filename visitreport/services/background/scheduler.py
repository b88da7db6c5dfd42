"""
Daily Report Scheduler
Runs the visit report once a day inside the API process (APScheduler on the
same asyncio loop as FastAPI).

A run triggered here and a manual run from POST /send-report may overlap;
neither writes to the store, so no lock is taken.

One-off run from a shell (same pipeline, same destinations):
    python -m visitreport.services.background.scheduler
"""
import asyncio
import logging
from typing import Optional
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from visitreport.services.orchestrator import ReportOrchestrator
from visitreport.services.reports.models import ScheduledRunResult

logger = logging.getLogger(__name__)

DAILY_REPORT_JOB_ID = "daily_visit_report"


async def run_daily_report_job(orchestrator: ReportOrchestrator) -> Optional[ScheduledRunResult]:
    """Fire-and-log wrapper: a failed run is logged and the scheduler keeps going."""
    logger.info("⏰ Running daily visit report (email + WhatsApp)...")
    try:
        result = await orchestrator.run_scheduled()
    except Exception as e:
        logger.error(f"❌ Error sending daily report: {e}", exc_info=True)
        return None

    logger.info(f"⏰ Daily report finished: {result.message} (visits: {result.visit_count})")
    return result


def create_report_scheduler(
    orchestrator: ReportOrchestrator,
    cron: str,
    timezone: str
) -> AsyncIOScheduler:
    """
    Build (but do not start) the scheduler for the daily report.

    Args:
        orchestrator: Pipeline to run
        cron: Crontab expression, e.g. "53 14 * * *"
        timezone: IANA timezone the expression is evaluated in
    """
    tz = ZoneInfo(timezone)
    scheduler = AsyncIOScheduler(timezone=tz)
    scheduler.add_job(
        func=run_daily_report_job,
        trigger=CronTrigger.from_crontab(cron, timezone=tz),
        args=[orchestrator],
        id=DAILY_REPORT_JOB_ID,
        name=f"Daily Visit Report ({cron} {timezone})",
        replace_existing=True,
        max_instances=1  # Prevent overlapping timer executions
    )
    logger.info(f"📅 Daily report scheduled: '{cron}' ({timezone})")
    return scheduler


async def run_once() -> Optional[ScheduledRunResult]:
    """Initialize clients, run the scheduled report a single time, clean up."""
    from visitreport.core.dependencies import get_orchestrator, initialize_clients, shutdown_clients

    await initialize_clients()
    try:
        return await run_daily_report_job(await get_orchestrator())
    finally:
        await shutdown_clients()


if __name__ == "__main__":
    from visitreport.core.logging import configure_logging

    configure_logging()
    asyncio.run(run_once())
