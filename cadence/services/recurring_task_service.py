"""
Recurring task service.

Lifecycle of recurring task definitions and of the task instances they own.
Every operation that touches both a definition and its instances is applied
in a single unit-of-work commit.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from cadence.core.config import get_settings
from cadence.core.exceptions import ValidationError
from cadence.core.logger import setup_logger
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.interfaces.unit_of_work import EntityType, IUnitOfWork
from cadence.models.enums import RecurringTaskStatus
from cadence.models.recurring_task import (
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)
from cadence.models.task import Task
from cadence.models.task_recurring_link import TaskRecurringLink
from cadence.services.batch_generation import CoveredDates
from cadence.services.recurrence_calculator import RecurrenceCalculator
from cadence.services.recurring_task_generator import RecurringTaskGenerator

logger = setup_logger(__name__)

# A change to any of these fields is pushed to open instances
_PROPAGATED_FIELDS = ("title", "description", "priority", "tags", "category_ids")

# Fields that may be explicitly cleared with None
_NULLABLE_FIELDS = ("description", "end_date")


class RecurringTaskService:
    """Service for recurring task definitions."""

    def __init__(
        self,
        recurring_repo: IRecurringTaskRepository,
        task_repo: ITaskRepository,
        link_repo: ITaskRecurringLinkRepository,
        unit_of_work: IUnitOfWork,
        generator: Optional[RecurringTaskGenerator] = None,
        tolerance: Optional[timedelta] = None,
    ):
        self.recurring_repo = recurring_repo
        self.task_repo = task_repo
        self.link_repo = link_repo
        self.unit_of_work = unit_of_work
        self.generator = generator or RecurringTaskGenerator()
        self.tolerance = tolerance if tolerance is not None else get_settings().due_date_tolerance

    async def create(
        self, data: RecurringTaskCreate, now: Optional[datetime] = None
    ) -> RecurringTask:
        """
        Create a recurring task and backfill its instances up to the horizon.

        Raises:
            InvalidIntervalError: If any interval value is not positive
        """
        RecurrenceCalculator.validate_intervals(data.intervals)
        now = now or datetime.now()

        recurring_task = RecurringTask(
            id=uuid4(),
            status=RecurringTaskStatus.ACTIVE,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.unit_of_work.register_new(recurring_task, EntityType.RECURRING_TASK)

        try:
            instances = self.generator.generate_linked(recurring_task, now)
            for instance in instances:
                self.unit_of_work.register_generated(instance)
            await self.unit_of_work.commit()
        except Exception:
            self.unit_of_work.rollback()
            raise

        logger.info(
            f"Created recurring task {recurring_task.id} with {len(instances)} instance(s)"
        )
        return recurring_task

    async def update(
        self,
        recurring_task_id: UUID,
        update: RecurringTaskUpdate,
        now: Optional[datetime] = None,
    ) -> Optional[RecurringTask]:
        """
        Update a recurring task and keep its open instances in sync.

        An interval change replaces every open instance with a fresh series
        starting now. Any other change to the propagated fields is copied onto
        the open instances. Closed instances are never touched.

        Raises:
            ValidationError: If the title is blank or the interval list is empty
            InvalidIntervalError: If a new interval value is not positive
        """
        existing = await self.recurring_repo.get(recurring_task_id)
        if existing is None:
            return None

        if update.title is not None and not update.title.strip():
            raise ValidationError("Recurring task title cannot be empty")
        if update.intervals is not None:
            if not update.intervals:
                raise ValidationError("At least one interval is required")
            RecurrenceCalculator.validate_intervals(update.intervals)

        now = now or datetime.now()
        changes = {
            field: value
            for field, value in update.model_dump(exclude_unset=True).items()
            if value is not None or field in _NULLABLE_FIELDS
        }
        updated = RecurringTask.model_validate(
            {**existing.model_dump(), **changes, "updated_at": now}
        )
        self.unit_of_work.register_modified(updated, EntityType.RECURRING_TASK)

        intervals_changed = update.intervals is not None and updated.intervals != existing.intervals
        try:
            if intervals_changed:
                await self._regenerate_open_instances(updated, now)
            elif any(field in changes for field in _PROPAGATED_FIELDS):
                await self._propagate_to_open_instances(updated, now)
            await self.unit_of_work.commit()
        except Exception:
            self.unit_of_work.rollback()
            raise
        return updated

    async def stop(self, recurring_task_id: UUID) -> Optional[RecurringTask]:
        """Stop generating instances. Existing instances are kept."""
        return await self.update(
            recurring_task_id, RecurringTaskUpdate(status=RecurringTaskStatus.STOPPED)
        )

    async def reactivate(
        self, recurring_task_id: UUID, now: Optional[datetime] = None
    ) -> Optional[RecurringTask]:
        """
        Reactivate a stopped recurring task and generate instances from now.

        Returns None if the recurring task does not exist or is not stopped.
        """
        existing = await self.recurring_repo.get(recurring_task_id)
        if existing is None or existing.status != RecurringTaskStatus.STOPPED:
            return None

        now = now or datetime.now()
        updated = await self.update(
            recurring_task_id, RecurringTaskUpdate(status=RecurringTaskStatus.ACTIVE), now=now
        )
        if updated is None:
            return None

        linked = await self.get_linked_tasks(recurring_task_id)
        covered = CoveredDates(
            self.tolerance, (task.due_date for task in linked if task.due_date is not None)
        )
        generated = 0
        try:
            for instance in self.generator.generate_linked(
                updated.model_copy(update={"start_date": now}), now
            ):
                if instance.task.due_date in covered:
                    continue
                self.unit_of_work.register_generated(instance)
                covered.add(instance.task.due_date)
                generated += 1
            await self.unit_of_work.commit()
        except Exception:
            self.unit_of_work.rollback()
            raise

        logger.info(f"Reactivated recurring task {recurring_task_id} ({generated} new instance(s))")
        return updated

    async def get(self, recurring_task_id: UUID) -> Optional[RecurringTask]:
        return await self.recurring_repo.get(recurring_task_id)

    async def list_all(self) -> list[RecurringTask]:
        return await self.recurring_repo.get_all()

    async def get_by_status(self, status: RecurringTaskStatus) -> list[RecurringTask]:
        return await self.recurring_repo.get_by_status(status)

    async def get_active(self) -> list[RecurringTask]:
        return await self.recurring_repo.get_active()

    async def get_linked_tasks(self, recurring_task_id: UUID) -> list[Task]:
        """All task instances linked to a recurring task (any status)."""
        return [task for _, task in await self._linked_pairs(recurring_task_id)]

    async def delete(self, recurring_task_id: UUID) -> bool:
        """Delete a recurring task together with all its instances and links."""
        existing = await self.recurring_repo.get(recurring_task_id)
        if existing is None:
            return False

        links = await self.link_repo.get_by_recurring_task_id(recurring_task_id)
        try:
            for link in links:
                task = await self.task_repo.get(link.task_id)
                if task is not None:
                    self.unit_of_work.register_deleted(task, EntityType.TASK)
                self.unit_of_work.register_deleted(link, EntityType.TASK_RECURRING_LINK)
            self.unit_of_work.register_deleted(existing, EntityType.RECURRING_TASK)
            await self.unit_of_work.commit()
        except Exception:
            self.unit_of_work.rollback()
            raise

        logger.info(f"Deleted recurring task {recurring_task_id} and {len(links)} instance(s)")
        return True

    async def _linked_pairs(
        self, recurring_task_id: UUID
    ) -> list[tuple[TaskRecurringLink, Task]]:
        pairs = []
        for link in await self.link_repo.get_by_recurring_task_id(recurring_task_id):
            task = await self.task_repo.get(link.task_id)
            if task is not None:
                pairs.append((link, task))
        return pairs

    async def _regenerate_open_instances(self, recurring_task: RecurringTask, now: datetime) -> None:
        removed = 0
        for link, task in await self._linked_pairs(recurring_task.id):
            if task.is_closed:
                continue
            self.unit_of_work.register_deleted(task, EntityType.TASK)
            self.unit_of_work.register_deleted(link, EntityType.TASK_RECURRING_LINK)
            removed += 1

        instances = self.generator.generate_linked(
            recurring_task.model_copy(update={"start_date": now}), now
        )
        for instance in instances:
            self.unit_of_work.register_generated(instance)

        logger.info(
            f"Regenerating recurring task {recurring_task.id}: "
            f"removed {removed}, generated {len(instances)}"
        )

    async def _propagate_to_open_instances(self, recurring_task: RecurringTask, now: datetime) -> None:
        for _, task in await self._linked_pairs(recurring_task.id):
            if task.is_closed:
                continue
            self.unit_of_work.register_modified(
                task.model_copy(
                    update={
                        "title": recurring_task.title,
                        "description": recurring_task.description,
                        "priority": recurring_task.priority,
                        "tags": list(recurring_task.tags),
                        "updated_at": now,
                    }
                ),
                EntityType.TASK,
            )
