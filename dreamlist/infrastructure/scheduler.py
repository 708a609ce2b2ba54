"""
APScheduler setup for the sync loop.

The loop runs on a fixed interval with no backoff: a failed poll is simply
retried on the next tick. Runs never overlap.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from dreamlist.usecases.sync_service import TodoSyncService

logger = logging.getLogger(__name__)

SYNC_JOB_ID = "todo_sync"


def create_scheduler(service: TodoSyncService, interval_seconds: float) -> AsyncIOScheduler:
    """
    Build a scheduler with the sync job registered.

    Args:
        service: The sync service to drive
        interval_seconds: Seconds between runs

    Returns:
        A scheduler that has not been started yet
    """
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        service.run_once,
        trigger=IntervalTrigger(seconds=interval_seconds),
        id=SYNC_JOB_ID,
        name="Sync assistant sessions to Dream List",
        max_instances=1,
        coalesce=True,
        # First run right away (initial scan)
        next_run_time=datetime.now(timezone.utc),
        replace_existing=True,
    )
    return scheduler


def start_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Start the scheduler. Must be called from a running event loop."""
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started")


def stop_scheduler(scheduler: AsyncIOScheduler) -> None:
    """Stop the scheduler without waiting for a running job."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
