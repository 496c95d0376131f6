"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/priority values.
"""

from enum import Enum


class TaskStatus(str, Enum):
    """Task status."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELLED = "CANCELLED"

    @property
    def is_closed(self) -> bool:
        """Terminal statuses no longer occupy a generation slot."""
        return self in (TaskStatus.DONE, TaskStatus.CANCELLED)


class Priority(str, Enum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def weight(self) -> int:
        """Sort weight (higher = more urgent)."""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}


class RecurringTaskStatus(str, Enum):
    """Recurring task definition status."""

    ACTIVE = "ACTIVE"
    STOPPED = "STOPPED"


class IntervalUnit(str, Enum):
    """Calendar unit of one recurrence step."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"
