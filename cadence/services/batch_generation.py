"""
Batch generation of pending recurring task instances.

Walks every active recurring task forward from its latest open instance and
creates whatever is missing up to the advance horizon. Existing instances are
matched by due date within a small tolerance, so running the batch twice
creates nothing the second time.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Iterable, Optional

from cadence.core.config import get_settings
from cadence.core.exceptions import ReconciliationItemError
from cadence.core.logger import setup_logger
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.interfaces.unit_of_work import IUnitOfWork
from cadence.models.generation import BatchGenerationResult
from cadence.models.recurring_task import RecurringTask
from cadence.models.task import Task
from cadence.services.recurring_task_generator import RecurringTaskGenerator

logger = setup_logger(__name__)

_EPOCH = datetime(1970, 1, 1)


class CoveredDates:
    """
    Due dates already taken by existing instances.

    Dates are bucketed by the tolerance window, so a lookup only has to
    compare against the neighbouring buckets.
    """

    def __init__(self, tolerance: timedelta, due_dates: Iterable[datetime] = ()):
        if tolerance <= timedelta(0):
            raise ValueError("tolerance must be positive")
        self.tolerance = tolerance
        self._window = tolerance.total_seconds()
        self._buckets: dict[int, list[datetime]] = defaultdict(list)
        for due_date in due_dates:
            self.add(due_date)

    def _bucket(self, value: datetime) -> int:
        return int((value.replace(tzinfo=None) - _EPOCH).total_seconds() // self._window)

    def add(self, value: datetime) -> None:
        self._buckets[self._bucket(value)].append(value)

    def __contains__(self, value: datetime) -> bool:
        key = self._bucket(value)
        for neighbour in (key - 1, key, key + 1):
            for existing in self._buckets.get(neighbour, ()):
                if abs(existing - value) < self.tolerance:
                    return True
        return False

    def __len__(self) -> int:
        return sum(len(dates) for dates in self._buckets.values())


class BatchReconciler:
    """Generates missing instances for many recurring tasks, isolating failures."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        link_repo: ITaskRecurringLinkRepository,
        unit_of_work: IUnitOfWork,
        generator: Optional[RecurringTaskGenerator] = None,
        tolerance: Optional[timedelta] = None,
    ):
        self.task_repo = task_repo
        self.link_repo = link_repo
        self.unit_of_work = unit_of_work
        self.generator = generator or RecurringTaskGenerator()
        self.tolerance = tolerance if tolerance is not None else get_settings().due_date_tolerance

    async def generate_all_pending(
        self,
        recurring_task_repo: IRecurringTaskRepository,
        now: Optional[datetime] = None,
    ) -> BatchGenerationResult:
        """
        Reconcile every active recurring task.

        Never raises: a failure to load the active set is reported as a single
        error in the result.
        """
        try:
            active = await recurring_task_repo.get_active()
        except Exception as e:
            logger.error(f"Batch generation failed: {e}")
            result = BatchGenerationResult()
            result.record_error(f"Batch generation failed: {e}")
            return result

        return await self.reconcile_all(active, now=now)

    async def reconcile_all(
        self,
        recurring_tasks: list[RecurringTask],
        now: Optional[datetime] = None,
    ) -> BatchGenerationResult:
        """Reconcile each recurring task in turn; one failure does not stop the rest."""
        now = now or datetime.now()
        result = BatchGenerationResult(processed_count=len(recurring_tasks))

        for recurring_task in recurring_tasks:
            try:
                result.generated_count += await self.reconcile_one(recurring_task, now)
            except Exception as e:
                error = ReconciliationItemError(recurring_task.id, e)
                logger.error(error.message)
                result.record_error(error.message)

        logger.info(
            f"Batch generation finished: processed={result.processed_count} "
            f"generated={result.generated_count} errors={result.error_count}"
        )
        return result

    async def reconcile_one(self, recurring_task: RecurringTask, now: datetime) -> int:
        """
        Create the missing instances of one recurring task.

        Returns:
            Number of instances created
        """
        linked = await self._linked_tasks(recurring_task)

        open_due_dates = [
            task.due_date for task in linked if task.due_date is not None and not task.is_closed
        ]
        covered = CoveredDates(
            self.tolerance,
            (task.due_date for task in linked if task.due_date is not None),
        )

        if open_due_dates:
            cursor = self.generator.advance_from(max(open_due_dates), recurring_task.intervals)
        else:
            cursor = recurring_task.start_date

        end = self.generator.effective_end(recurring_task, now)
        if cursor > end:
            return 0

        generated = 0
        while cursor <= end:
            if cursor not in covered:
                task = self.generator.create_instance(recurring_task, cursor, now)
                self.unit_of_work.register_generated(
                    self.generator.link_instance(recurring_task, task, now)
                )
                await self.unit_of_work.commit()
                covered.add(cursor)
                generated += 1
            cursor = self.generator.advance_from(cursor, recurring_task.intervals)

        if generated:
            logger.info(f"Generated {generated} instance(s) for recurring task {recurring_task.id}")
        return generated

    async def _linked_tasks(self, recurring_task: RecurringTask) -> list[Task]:
        links = await self.link_repo.get_by_recurring_task_id(recurring_task.id)
        tasks: list[Task] = []
        for link in links:
            task = await self.task_repo.get(link.task_id)
            if task is not None:
                tasks.append(task)
        return tasks
