"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from cadence.infrastructure.local.database import TaskORM, get_session_factory
from cadence.infrastructure.local.mappers import task_from_orm, task_to_orm
from cadence.interfaces.task_repository import ITaskRepository
from cadence.models.enums import Priority, TaskStatus
from cadence.models.task import Task, TaskCreate, TaskUpdate

CLOSED_STATUSES = [TaskStatus.DONE.value, TaskStatus.CANCELLED.value]


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
        """
        self._session_factory = session_factory or get_session_factory()

    async def create(self, task: TaskCreate | Task) -> Task:
        """Create a new task."""
        if isinstance(task, Task):
            orm = task_to_orm(task)
        else:
            now = datetime.now()
            orm = TaskORM(
                id=str(uuid4()),
                title=task.title,
                description=task.description,
                status=task.status.value,
                priority=task.priority.value,
                due_date=task.due_date,
                tags=list(task.tags),
                recurrence_template_id=task.recurrence_template_id,
                created_at=now,
                updated_at=now,
            )
        async with self._session_factory() as session:
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return task_from_orm(orm)

    async def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            orm = await session.get(TaskORM, str(task_id))
            return task_from_orm(orm) if orm else None

    async def list(
        self,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        include_closed: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """List tasks with optional filters."""
        async with self._session_factory() as session:
            query = select(TaskORM)

            if status is not None:
                query = query.where(TaskORM.status == status.value)
            elif not include_closed:
                query = query.where(TaskORM.status.notin_(CLOSED_STATUSES))

            if priority is not None:
                query = query.where(TaskORM.priority == priority.value)

            query = (
                query.order_by(TaskORM.due_date.is_(None), TaskORM.due_date, TaskORM.created_at)
                .limit(limit)
                .offset(offset)
            )
            result = await session.execute(query)
            return [task_from_orm(orm) for orm in result.scalars().all()]

    async def update(self, task_id: UUID, update: TaskUpdate) -> Optional[Task]:
        """Update a task."""
        async with self._session_factory() as session:
            orm = await session.get(TaskORM, str(task_id))
            if not orm:
                return None

            update_data = update.model_dump(exclude_unset=True)
            for field, value in update_data.items():
                if field in ("status", "priority") and value is not None:
                    value = value.value if hasattr(value, "value") else value
                elif field == "tags":
                    value = list(value or [])
                setattr(orm, field, value)

            orm.updated_at = datetime.now()
            await session.commit()
            await session.refresh(orm)
            return task_from_orm(orm)

    async def delete(self, task_id: UUID) -> bool:
        """Delete a task."""
        async with self._session_factory() as session:
            orm = await session.get(TaskORM, str(task_id))
            if not orm:
                return False

            await session.delete(orm)
            await session.commit()
            return True

    async def get_by_status(self, status: TaskStatus) -> list[Task]:
        """Get all tasks with a status."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.status == status.value)
            )
            return [task_from_orm(orm) for orm in result.scalars().all()]

    async def get_by_priority(self, priority: Priority) -> list[Task]:
        """Get all tasks with a priority."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM).where(TaskORM.priority == priority.value)
            )
            return [task_from_orm(orm) for orm in result.scalars().all()]

    async def exists_with_template(self, template_id: str) -> bool:
        """Check whether any task references a recurrence template."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskORM.id)
                .where(TaskORM.recurrence_template_id == template_id)
                .limit(1)
            )
            return result.scalar_one_or_none() is not None
