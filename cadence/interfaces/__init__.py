"""Repository interfaces (ports) for the application."""

from cadence.interfaces.recurrence_template_repository import IRecurrenceTemplateRepository
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.interfaces.unit_of_work import ChangeType, EntityType, IUnitOfWork

__all__ = [
    "ChangeType",
    "EntityType",
    "IRecurrenceTemplateRepository",
    "IRecurringTaskRepository",
    "ITaskRecurringLinkRepository",
    "ITaskRepository",
    "IUnitOfWork",
]
