"""
Background scheduler service for periodic jobs.

Runs batch generation of recurring task instances on a monthly cron schedule.
Uses APScheduler for in-process scheduling without external dependencies.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from cadence.core.config import get_settings
from cadence.core.logger import logger
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.models.generation import BatchGenerationResult
from cadence.services.batch_generation import BatchReconciler

JOB_ID = "recurring_task_reconciliation"


class ReconciliationScheduler:
    """
    Background scheduler for recurring task generation.

    Features:
    - Batch generation on a cron trigger (default: 1st of each month, 00:00)
    - One non-blocking run at startup to catch up on missed runs
    - Runs never overlap
    """

    def __init__(
        self,
        recurring_task_repo: IRecurringTaskRepository,
        reconciler: BatchReconciler,
    ):
        self._recurring_task_repo = recurring_task_repo
        self._reconciler = reconciler
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._startup_task: Optional[asyncio.Task] = None
        self._run_lock = asyncio.Lock()
        self.last_run: Optional[datetime] = None
        self.last_result: Optional[BatchGenerationResult] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def start(self):
        """Start the scheduler and kick off a catch-up run."""
        settings = get_settings()

        # Only run scheduler in non-test environments
        if settings.ENVIRONMENT == "test":
            logger.info("Background scheduler disabled in test environment")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.run_reconciliation,
            CronTrigger(
                day=settings.RECONCILE_CRON_DAY,
                hour=settings.RECONCILE_CRON_HOUR,
                minute=0,
            ),
            id=JOB_ID,
            name="Recurring Task Generation",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info(
            "Background scheduler started:\n"
            f"  - Recurring task generation: day {settings.RECONCILE_CRON_DAY} "
            f"{settings.RECONCILE_CRON_HOUR:02d}:00"
        )

        if settings.RECONCILE_ON_STARTUP:
            self._startup_task = asyncio.create_task(self._run_startup_background())

    async def stop(self):
        """Stop the scheduler."""
        if self._startup_task and not self._startup_task.done():
            self._startup_task.cancel()
        self._startup_task = None
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Background scheduler stopped")

    async def run_reconciliation(self, now: Optional[datetime] = None) -> BatchGenerationResult:
        """
        Generate pending instances for every active recurring task.

        Runs are serialized: the start-up catch-up and the cron job never
        reconcile at the same time.
        """
        async with self._run_lock:
            result = await self._reconciler.generate_all_pending(
                self._recurring_task_repo, now=now
            )
            self.last_run = now or datetime.now()
            self.last_result = result
        if result.error_count:
            logger.warning(
                f"Recurring task generation finished with {result.error_count} error(s)"
            )
        return result

    async def _run_startup_background(self):
        """Background wrapper for the startup run with error handling."""
        try:
            logger.info("Starting startup recurring task generation...")
            await self.run_reconciliation()
            logger.info("Startup recurring task generation completed")
        except Exception as e:
            logger.error(f"Startup recurring task generation failed: {e}")


# Global scheduler instance
_scheduler: Optional[ReconciliationScheduler] = None


async def get_background_scheduler() -> ReconciliationScheduler:
    """Get the global background scheduler instance."""
    global _scheduler
    if _scheduler is None:
        from cadence.deps import get_batch_reconciler, get_recurring_task_repository

        _scheduler = ReconciliationScheduler(
            recurring_task_repo=get_recurring_task_repository(),
            reconciler=get_batch_reconciler(),
        )
    return _scheduler


async def start_background_scheduler():
    """Start the global background scheduler."""
    scheduler = await get_background_scheduler()
    await scheduler.start()


async def stop_background_scheduler():
    """Stop the global background scheduler."""
    global _scheduler
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
