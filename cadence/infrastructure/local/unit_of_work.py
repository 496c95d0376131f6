"""
SQLite implementation of the unit of work.

All queued changes are applied inside one database transaction.
"""

from __future__ import annotations

from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.core.exceptions import InfrastructureError
from cadence.core.logger import setup_logger
from cadence.infrastructure.local.database import (
    RecurrenceTemplateORM,
    RecurringTaskORM,
    TaskORM,
    TaskRecurringLinkORM,
    get_session_factory,
)
from cadence.infrastructure.local.mappers import (
    link_to_orm,
    recurring_task_to_orm,
    task_to_orm,
    template_to_orm,
)
from cadence.interfaces.unit_of_work import Change, ChangeType, EntityType, IUnitOfWork

logger = setup_logger(__name__)

_ORM_CLASSES = {
    EntityType.TASK: TaskORM,
    EntityType.RECURRENCE_TEMPLATE: RecurrenceTemplateORM,
    EntityType.RECURRING_TASK: RecurringTaskORM,
    EntityType.TASK_RECURRING_LINK: TaskRecurringLinkORM,
}

_TO_ORM: dict[EntityType, Callable] = {
    EntityType.TASK: task_to_orm,
    EntityType.RECURRENCE_TEMPLATE: template_to_orm,
    EntityType.RECURRING_TASK: recurring_task_to_orm,
    EntityType.TASK_RECURRING_LINK: link_to_orm,
}


class SqliteUnitOfWork(IUnitOfWork):
    """Applies queued changes in a single SQLAlchemy transaction."""

    def __init__(self, session_factory=None):
        super().__init__()
        self._session_factory = session_factory or get_session_factory()

    async def commit(self) -> None:
        """
        Apply all pending changes atomically.

        On failure the transaction is rolled back, the queue is discarded and
        InfrastructureError is raised.
        """
        changes, self._changes = self._changes, []
        if not changes:
            return

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for change in changes:
                        await self._apply(session, change)
        except SQLAlchemyError as e:
            logger.error(f"Unit of work commit failed ({len(changes)} change(s)): {e}")
            raise InfrastructureError(f"Commit failed: {e}") from e

        logger.debug(f"Committed {len(changes)} change(s)")

    @staticmethod
    async def _apply(session: AsyncSession, change: Change) -> None:
        if change.change_type == ChangeType.NEW:
            session.add(_TO_ORM[change.entity_type](change.entity))
        elif change.change_type == ChangeType.MODIFIED:
            await session.merge(_TO_ORM[change.entity_type](change.entity))
        elif change.change_type == ChangeType.DELETED:
            orm = await session.get(_ORM_CLASSES[change.entity_type], str(change.entity.id))
            if orm is not None:
                await session.delete(orm)
