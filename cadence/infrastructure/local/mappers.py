"""
Conversions between ORM rows and Pydantic models.

Shared by the repositories and the unit of work.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from cadence.infrastructure.local.database import (
    RecurrenceTemplateORM,
    RecurringTaskORM,
    TaskORM,
    TaskRecurringLinkORM,
)
from cadence.models.enums import Priority, RecurringTaskStatus, TaskStatus
from cadence.models.interval import Interval
from cadence.models.recurrence_template import (
    RecurrenceTemplate,
    SequentialIntervalMode,
    WeekdayOccurrenceMode,
)
from cadence.models.recurring_task import RecurringTask
from cadence.models.task import Task
from cadence.models.task_recurring_link import TaskRecurringLink


def _dump_intervals(intervals: list[Interval]) -> list[dict[str, Any]]:
    return [interval.model_dump(mode="json") for interval in intervals]


def _load_intervals(raw: list[dict[str, Any]] | None) -> list[Interval]:
    return [Interval.model_validate(item) for item in (raw or [])]


# ===========================================
# Task
# ===========================================


def task_from_orm(orm: TaskORM) -> Task:
    return Task(
        id=UUID(orm.id),
        title=orm.title,
        description=orm.description,
        status=TaskStatus(orm.status),
        priority=Priority(orm.priority),
        due_date=orm.due_date,
        tags=list(orm.tags or []),
        recurrence_template_id=orm.recurrence_template_id,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def task_to_orm(task: Task) -> TaskORM:
    return TaskORM(
        id=str(task.id),
        title=task.title,
        description=task.description,
        status=task.status.value,
        priority=task.priority.value,
        due_date=task.due_date,
        tags=list(task.tags),
        recurrence_template_id=task.recurrence_template_id,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


# ===========================================
# Recurrence template
# ===========================================


def template_from_orm(orm: RecurrenceTemplateORM) -> RecurrenceTemplate:
    if orm.weekday is not None and orm.occurrence_in_month is not None:
        mode = WeekdayOccurrenceMode(
            weekday=orm.weekday, occurrence_in_month=orm.occurrence_in_month
        )
    else:
        mode = SequentialIntervalMode()
    return RecurrenceTemplate(
        id=orm.id,
        name=orm.name,
        intervals=_load_intervals(orm.intervals),
        day_of_month=orm.day_of_month,
        mode=mode,
    )


def template_to_orm(template: RecurrenceTemplate) -> RecurrenceTemplateORM:
    return RecurrenceTemplateORM(
        id=template.id,
        name=template.name,
        intervals=_dump_intervals(template.intervals),
        day_of_month=template.day_of_month,
        weekday=template.weekday,
        occurrence_in_month=template.occurrence_in_month,
    )


# ===========================================
# Recurring task
# ===========================================


def recurring_task_from_orm(orm: RecurringTaskORM) -> RecurringTask:
    return RecurringTask(
        id=UUID(orm.id),
        title=orm.title,
        description=orm.description,
        priority=Priority(orm.priority),
        start_date=orm.start_date,
        end_date=orm.end_date,
        intervals=_load_intervals(orm.intervals),
        tags=list(orm.tags or []),
        category_ids=list(orm.category_ids or []),
        status=RecurringTaskStatus(orm.status),
        created_at=orm.created_at,
        updated_at=orm.updated_at,
    )


def recurring_task_to_orm(recurring_task: RecurringTask) -> RecurringTaskORM:
    return RecurringTaskORM(
        id=str(recurring_task.id),
        title=recurring_task.title,
        description=recurring_task.description,
        priority=recurring_task.priority.value,
        start_date=recurring_task.start_date,
        end_date=recurring_task.end_date,
        intervals=_dump_intervals(recurring_task.intervals),
        tags=list(recurring_task.tags),
        category_ids=list(recurring_task.category_ids),
        status=recurring_task.status.value,
        created_at=recurring_task.created_at,
        updated_at=recurring_task.updated_at,
    )


# ===========================================
# Link
# ===========================================


def link_from_orm(orm: TaskRecurringLinkORM) -> TaskRecurringLink:
    return TaskRecurringLink(
        id=UUID(orm.id),
        recurring_task_id=UUID(orm.recurring_task_id),
        task_id=UUID(orm.task_id),
        original_generated_date=orm.original_generated_date,
        last_regenerated_date=orm.last_regenerated_date,
    )


def link_to_orm(link: TaskRecurringLink) -> TaskRecurringLinkORM:
    return TaskRecurringLinkORM(
        id=str(link.id),
        recurring_task_id=str(link.recurring_task_id),
        task_id=str(link.task_id),
        original_generated_date=link.original_generated_date,
        last_regenerated_date=link.last_regenerated_date,
    )
