"""Pydantic models (schemas) for the application."""

from cadence.models.enums import IntervalUnit, Priority, RecurringTaskStatus, TaskStatus
from cadence.models.generation import BatchGenerationResult, GeneratedInstance
from cadence.models.interval import Interval
from cadence.models.recurrence_template import (
    RecurrenceTemplate,
    RecurrenceTemplateCreate,
    RecurrenceTemplateUpdate,
    SequentialIntervalMode,
    WeekdayOccurrenceMode,
)
from cadence.models.recurring_task import RecurringTask, RecurringTaskCreate, RecurringTaskUpdate
from cadence.models.task import Task, TaskCreate, TaskUpdate
from cadence.models.task_recurring_link import TaskRecurringLink

__all__ = [
    # Enums
    "IntervalUnit",
    "Priority",
    "RecurringTaskStatus",
    "TaskStatus",
    # Recurrence
    "Interval",
    "RecurrenceTemplate",
    "RecurrenceTemplateCreate",
    "RecurrenceTemplateUpdate",
    "SequentialIntervalMode",
    "WeekdayOccurrenceMode",
    # Recurring tasks
    "RecurringTask",
    "RecurringTaskCreate",
    "RecurringTaskUpdate",
    "TaskRecurringLink",
    # Tasks
    "Task",
    "TaskCreate",
    "TaskUpdate",
    # Generation
    "BatchGenerationResult",
    "GeneratedInstance",
]
