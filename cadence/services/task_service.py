"""
Task service.

Task lifecycle: TODO -> IN_PROGRESS -> DONE, with CANCELLED reachable from any
open state. A DONE task is locked: it can no longer be modified or deleted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from cadence.core.exceptions import BusinessLogicError, ValidationError
from cadence.core.logger import setup_logger
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.interfaces.unit_of_work import EntityType, IUnitOfWork
from cadence.models.enums import Priority, TaskStatus
from cadence.models.task import Task, TaskCreate, TaskUpdate
from cadence.services.recurrence_service import RecurrenceService

logger = setup_logger(__name__)


class TaskService:
    """Service for task operations."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        link_repo: ITaskRecurringLinkRepository,
        unit_of_work: IUnitOfWork,
        recurrence_service: Optional[RecurrenceService] = None,
    ):
        self.task_repo = task_repo
        self.link_repo = link_repo
        self.unit_of_work = unit_of_work
        self.recurrence_service = recurrence_service

    @staticmethod
    def _ensure_not_done(task: Task) -> None:
        if task.status == TaskStatus.DONE:
            raise BusinessLogicError(
                "Completed tasks cannot be modified",
                details={"task_id": str(task.id)},
            )

    async def _save(self, task: Task, **changes) -> Task:
        updated = task.model_copy(update={**changes, "updated_at": datetime.now()})
        self.unit_of_work.register_modified(updated, EntityType.TASK)
        await self.unit_of_work.commit()
        return updated

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create(self, data: TaskCreate, now: Optional[datetime] = None) -> Task:
        now = now or datetime.now()
        task = Task(
            id=uuid4(),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.unit_of_work.register_new(task, EntityType.TASK)
        await self.unit_of_work.commit()
        logger.debug(f"Created task {task.id}")
        return task

    async def get(self, task_id: UUID) -> Optional[Task]:
        return await self.task_repo.get(task_id)

    async def list_all(
        self,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        include_closed: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        return await self.task_repo.list(
            status=status,
            priority=priority,
            include_closed=include_closed,
            limit=limit,
            offset=offset,
        )

    async def update(self, task_id: UUID, update: TaskUpdate) -> Optional[Task]:
        """
        Update a task.

        Raises:
            ValidationError: If the title is blank
            BusinessLogicError: If the task is DONE
        """
        task = await self.task_repo.get(task_id)
        if task is None:
            return None

        if update.title is not None and not update.title.strip():
            raise ValidationError("Task title cannot be empty")
        self._ensure_not_done(task)

        changes = update.model_dump(exclude_unset=True)
        if changes.get("title") is not None:
            changes["title"] = changes["title"].strip()
        for field in ("status", "priority", "tags"):
            if field in changes and changes[field] is None:
                del changes[field]
        return await self._save(task, **changes)

    async def delete(self, task_id: UUID) -> bool:
        """
        Delete a task and its recurring links.

        Raises:
            BusinessLogicError: If the task is DONE
        """
        task = await self.task_repo.get(task_id)
        if task is None:
            return False
        self._ensure_not_done(task)

        for link in await self.link_repo.get_by_task_id(task_id):
            self.unit_of_work.register_deleted(link, EntityType.TASK_RECURRING_LINK)
        self.unit_of_work.register_deleted(task, EntityType.TASK)
        await self.unit_of_work.commit()
        return True

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    async def start(self, task_id: UUID) -> Optional[Task]:
        """TODO -> IN_PROGRESS. Returns None for any other status."""
        task = await self.task_repo.get(task_id)
        if task is None or task.status != TaskStatus.TODO:
            return None
        return await self._save(task, status=TaskStatus.IN_PROGRESS)

    async def complete(self, task_id: UUID) -> Optional[Task]:
        """IN_PROGRESS -> DONE. Returns None for any other status."""
        task = await self.task_repo.get(task_id)
        if task is None or task.status != TaskStatus.IN_PROGRESS:
            return None
        return await self._save(task, status=TaskStatus.DONE)

    async def complete_with_recurrence(
        self, task_id: UUID, now: Optional[datetime] = None
    ) -> Optional[Task]:
        """
        Mark an open task DONE and create its successor in the same commit.

        Returns:
            The newly generated task, or None if the task is missing, already
            closed, or has no recurrence template to follow
        """
        task = await self.task_repo.get(task_id)
        if task is None or task.is_closed:
            return None

        now = now or datetime.now()
        completed = task.model_copy(update={"status": TaskStatus.DONE, "updated_at": now})
        self.unit_of_work.register_modified(completed, EntityType.TASK)

        next_task = None
        try:
            if self.recurrence_service is not None:
                next_task = await self.recurrence_service.build_next_task(completed, now=now)
                if next_task is not None:
                    self.unit_of_work.register_new(next_task, EntityType.TASK)
            await self.unit_of_work.commit()
        except Exception:
            self.unit_of_work.rollback()
            raise

        if next_task is not None:
            logger.info(f"Completed task {task_id}; next occurrence {next_task.id} due {next_task.due_date}")
        return next_task

    async def cancel(self, task_id: UUID) -> Optional[Task]:
        """
        Cancel a task.

        Raises:
            BusinessLogicError: If the task is DONE
        """
        task = await self.task_repo.get(task_id)
        if task is None:
            return None
        self._ensure_not_done(task)
        return await self._save(task, status=TaskStatus.CANCELLED)

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    async def add_tag(self, task_id: UUID, tag: str) -> Optional[Task]:
        task = await self.task_repo.get(task_id)
        if task is None:
            return None

        tag = tag.strip()
        if not tag or tag in task.tags:
            return task
        self._ensure_not_done(task)
        return await self._save(task, tags=[*task.tags, tag])

    async def remove_tag(self, task_id: UUID, tag: str) -> Optional[Task]:
        task = await self.task_repo.get(task_id)
        if task is None:
            return None

        tag = tag.strip()
        if tag not in task.tags:
            return task
        self._ensure_not_done(task)
        return await self._save(task, tags=[t for t in task.tags if t != tag])

    async def change_priority(self, task_id: UUID, priority: Priority) -> Optional[Task]:
        task = await self.task_repo.get(task_id)
        if task is None:
            return None
        self._ensure_not_done(task)
        return await self._save(task, priority=priority)

    async def get_by_status(self, status: TaskStatus) -> list[Task]:
        return await self.task_repo.get_by_status(status)

    async def get_by_priority(self, priority: Priority) -> list[Task]:
        return await self.task_repo.get_by_priority(priority)

    async def is_recurring_instance(self, task_id: UUID) -> bool:
        """Whether the task was generated from a recurring task definition."""
        return bool(await self.link_repo.get_by_task_id(task_id))
