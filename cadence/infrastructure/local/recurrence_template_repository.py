"""
SQLite implementation of recurrence template repository.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from sqlalchemy import func, select

from cadence.core.exceptions import TemplateInUseError
from cadence.core.logger import setup_logger
from cadence.infrastructure.local.database import (
    RecurrenceTemplateORM,
    TaskORM,
    get_session_factory,
)
from cadence.infrastructure.local.mappers import template_from_orm, template_to_orm
from cadence.interfaces.recurrence_template_repository import IRecurrenceTemplateRepository
from cadence.models.enums import IntervalUnit
from cadence.models.interval import Interval
from cadence.models.recurrence_template import (
    RecurrenceTemplate,
    RecurrenceTemplateCreate,
    RecurrenceTemplateUpdate,
    WeekdayOccurrenceMode,
)

logger = setup_logger(__name__)


DEFAULT_TEMPLATES: list[RecurrenceTemplate] = [
    RecurrenceTemplate(
        id="default-daily",
        name="Daily",
        intervals=[Interval(value=1, unit=IntervalUnit.DAYS)],
    ),
    RecurrenceTemplate(
        id="default-weekly",
        name="Weekly",
        intervals=[Interval(value=1, unit=IntervalUnit.WEEKS)],
    ),
    RecurrenceTemplate(
        id="default-biweekly",
        name="Bi-weekly",
        intervals=[Interval(value=2, unit=IntervalUnit.WEEKS)],
    ),
    RecurrenceTemplate(
        id="default-monthly",
        name="Monthly",
        intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)],
    ),
    RecurrenceTemplate(
        id="default-quarterly",
        name="Quarterly",
        intervals=[Interval(value=3, unit=IntervalUnit.MONTHS)],
    ),
    RecurrenceTemplate(
        id="default-yearly",
        name="Yearly",
        intervals=[Interval(value=1, unit=IntervalUnit.YEARS)],
    ),
    RecurrenceTemplate(
        id="default-first-monday",
        name="First Monday of month",
        intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)],
        mode=WeekdayOccurrenceMode(weekday=1, occurrence_in_month=1),
    ),
    RecurrenceTemplate(
        id="default-last-friday",
        name="Last Friday of month",
        intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)],
        mode=WeekdayOccurrenceMode(weekday=5, occurrence_in_month=-1),
    ),
]


class SqliteRecurrenceTemplateRepository(IRecurrenceTemplateRepository):
    """SQLite implementation of recurrence template repository."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session_factory()

    async def initialize(self) -> None:
        """Seed the default templates if the table is empty."""
        async with self._session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(RecurrenceTemplateORM))
            if count:
                return
            for template in DEFAULT_TEMPLATES:
                session.add(template_to_orm(template))
            await session.commit()
        logger.info(f"Seeded {len(DEFAULT_TEMPLATES)} default recurrence templates")

    async def get(self, template_id: str) -> Optional[RecurrenceTemplate]:
        """Get a template by ID."""
        async with self._session_factory() as session:
            orm = await session.get(RecurrenceTemplateORM, template_id)
            return template_from_orm(orm) if orm else None

    async def get_all(self) -> list[RecurrenceTemplate]:
        """Get all templates."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(RecurrenceTemplateORM).order_by(RecurrenceTemplateORM.name)
            )
            return [template_from_orm(orm) for orm in result.scalars().all()]

    async def create(self, data: RecurrenceTemplateCreate) -> RecurrenceTemplate:
        """Create a template."""
        template = RecurrenceTemplate(
            id=data.id or str(uuid4()),
            name=data.name,
            intervals=data.intervals,
            day_of_month=data.day_of_month,
            mode=data.mode,
        )
        async with self._session_factory() as session:
            orm = template_to_orm(template)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return template_from_orm(orm)

    async def update(
        self, template_id: str, update: RecurrenceTemplateUpdate
    ) -> Optional[RecurrenceTemplate]:
        """Update a template."""
        async with self._session_factory() as session:
            orm = await session.get(RecurrenceTemplateORM, template_id)
            if not orm:
                return None

            changes = {
                field: value
                for field, value in update.model_dump(exclude_unset=True).items()
                if value is not None or field == "day_of_month"
            }
            updated = RecurrenceTemplate(**{**template_from_orm(orm).model_dump(), **changes})
            replacement = template_to_orm(updated)
            orm.name = replacement.name
            orm.intervals = replacement.intervals
            orm.day_of_month = replacement.day_of_month
            orm.weekday = replacement.weekday
            orm.occurrence_in_month = replacement.occurrence_in_month

            await session.commit()
            await session.refresh(orm)
            return template_from_orm(orm)

    async def delete(self, template_id: str) -> bool:
        """Delete a template that no task references."""
        async with self._session_factory() as session:
            orm = await session.get(RecurrenceTemplateORM, template_id)
            if not orm:
                return False

            referenced = await session.scalar(
                select(TaskORM.id).where(TaskORM.recurrence_template_id == template_id).limit(1)
            )
            if referenced is not None:
                raise TemplateInUseError(template_id)

            await session.delete(orm)
            await session.commit()
            return True
