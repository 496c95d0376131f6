"""
SQLite implementation of the task-recurring link repository.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select

from cadence.infrastructure.local.database import TaskRecurringLinkORM, get_session_factory
from cadence.infrastructure.local.mappers import link_from_orm, link_to_orm
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.models.task_recurring_link import TaskRecurringLink


class SqliteTaskRecurringLinkRepository(ITaskRecurringLinkRepository):
    """SQLite implementation of the task <-> recurring task junction."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def create(self, link: TaskRecurringLink) -> TaskRecurringLink:
        async with self._session_factory() as session:
            orm = link_to_orm(link)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return link_from_orm(orm)

    async def get_by_recurring_task_id(self, recurring_task_id: UUID) -> list[TaskRecurringLink]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskRecurringLinkORM)
                .where(TaskRecurringLinkORM.recurring_task_id == str(recurring_task_id))
                .order_by(TaskRecurringLinkORM.original_generated_date)
            )
            return [link_from_orm(orm) for orm in result.scalars().all()]

    async def get_by_task_id(self, task_id: UUID) -> list[TaskRecurringLink]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TaskRecurringLinkORM).where(TaskRecurringLinkORM.task_id == str(task_id))
            )
            return [link_from_orm(orm) for orm in result.scalars().all()]

    async def delete_by_recurring_task_id(self, recurring_task_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(TaskRecurringLinkORM).where(
                    TaskRecurringLinkORM.recurring_task_id == str(recurring_task_id)
                )
            )
            await session.commit()
            return result.rowcount or 0

    async def delete_by_task_id(self, task_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(TaskRecurringLinkORM).where(TaskRecurringLinkORM.task_id == str(task_id))
            )
            await session.commit()
            return result.rowcount or 0
