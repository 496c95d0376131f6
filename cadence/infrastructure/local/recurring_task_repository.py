"""
SQLite implementation of recurring task repository.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from cadence.infrastructure.local.database import RecurringTaskORM, get_session_factory
from cadence.infrastructure.local.mappers import (
    recurring_task_from_orm,
    recurring_task_to_orm,
)
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.models.enums import RecurringTaskStatus
from cadence.models.recurring_task import (
    RecurringTask,
    RecurringTaskCreate,
    RecurringTaskUpdate,
)


class SqliteRecurringTaskRepository(IRecurringTaskRepository):
    """SQLite implementation of recurring task repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def create(self, data: RecurringTaskCreate | RecurringTask) -> RecurringTask:
        """Create a new recurring task definition."""
        if isinstance(data, RecurringTask):
            recurring_task = data
        else:
            now = datetime.now()
            recurring_task = RecurringTask(
                id=uuid4(),
                status=RecurringTaskStatus.ACTIVE,
                created_at=now,
                updated_at=now,
                **data.model_dump(),
            )
        async with self._session_factory() as session:
            orm = recurring_task_to_orm(recurring_task)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return recurring_task_from_orm(orm)

    async def get(self, recurring_task_id: UUID) -> Optional[RecurringTask]:
        """Get a recurring task by ID."""
        async with self._session_factory() as session:
            orm = await session.get(RecurringTaskORM, str(recurring_task_id))
            return recurring_task_from_orm(orm) if orm else None

    async def get_all(self) -> list[RecurringTask]:
        """List all recurring task definitions."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(RecurringTaskORM).order_by(RecurringTaskORM.created_at)
            )
            return [recurring_task_from_orm(orm) for orm in result.scalars().all()]

    async def get_by_status(self, status: RecurringTaskStatus) -> list[RecurringTask]:
        """List recurring task definitions with a status."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(RecurringTaskORM)
                .where(RecurringTaskORM.status == status.value)
                .order_by(RecurringTaskORM.created_at)
            )
            return [recurring_task_from_orm(orm) for orm in result.scalars().all()]

    async def update(
        self, recurring_task_id: UUID, update: RecurringTaskUpdate
    ) -> Optional[RecurringTask]:
        """Update a recurring task definition."""
        async with self._session_factory() as session:
            orm = await session.get(RecurringTaskORM, str(recurring_task_id))
            if not orm:
                return None

            update_data = update.model_dump(exclude_unset=True, mode="json")
            for field, value in update_data.items():
                if value is None and field != "end_date":
                    continue
                if field in ("start_date", "end_date"):
                    value = getattr(update, field)
                setattr(orm, field, value)

            orm.updated_at = datetime.now()
            await session.commit()
            await session.refresh(orm)
            return recurring_task_from_orm(orm)

    async def delete(self, recurring_task_id: UUID) -> bool:
        """Delete a recurring task definition."""
        async with self._session_factory() as session:
            orm = await session.get(RecurringTaskORM, str(recurring_task_id))
            if not orm:
                return False

            await session.delete(orm)
            await session.commit()
            return True
