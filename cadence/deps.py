"""
Dependency wiring.

Repositories are process-wide singletons. Services are built per call, each
with its own unit of work, since a unit of work holds a pending-change queue.
"""

from functools import lru_cache

from cadence.interfaces.recurrence_template_repository import IRecurrenceTemplateRepository
from cadence.interfaces.recurring_task_repository import IRecurringTaskRepository
from cadence.interfaces.task_recurring_link_repository import ITaskRecurringLinkRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.interfaces.unit_of_work import IUnitOfWork
from cadence.services.batch_generation import BatchReconciler
from cadence.services.recurrence_service import RecurrenceService
from cadence.services.recurring_task_service import RecurringTaskService
from cadence.services.task_service import TaskService


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    from cadence.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository()


@lru_cache()
def get_recurrence_template_repository() -> IRecurrenceTemplateRepository:
    """Get recurrence template repository instance."""
    from cadence.infrastructure.local.recurrence_template_repository import (
        SqliteRecurrenceTemplateRepository,
    )
    return SqliteRecurrenceTemplateRepository()


@lru_cache()
def get_recurring_task_repository() -> IRecurringTaskRepository:
    """Get recurring task repository instance."""
    from cadence.infrastructure.local.recurring_task_repository import (
        SqliteRecurringTaskRepository,
    )
    return SqliteRecurringTaskRepository()


@lru_cache()
def get_task_recurring_link_repository() -> ITaskRecurringLinkRepository:
    """Get task-recurring link repository instance."""
    from cadence.infrastructure.local.task_recurring_link_repository import (
        SqliteTaskRecurringLinkRepository,
    )
    return SqliteTaskRecurringLinkRepository()


def get_unit_of_work() -> IUnitOfWork:
    """Get a fresh unit of work."""
    from cadence.infrastructure.local.unit_of_work import SqliteUnitOfWork
    return SqliteUnitOfWork()


def get_recurrence_service() -> RecurrenceService:
    return RecurrenceService(
        template_repo=get_recurrence_template_repository(),
        task_repo=get_task_repository(),
    )


def get_recurring_task_service() -> RecurringTaskService:
    return RecurringTaskService(
        recurring_repo=get_recurring_task_repository(),
        task_repo=get_task_repository(),
        link_repo=get_task_recurring_link_repository(),
        unit_of_work=get_unit_of_work(),
    )


def get_task_service() -> TaskService:
    return TaskService(
        task_repo=get_task_repository(),
        link_repo=get_task_recurring_link_repository(),
        unit_of_work=get_unit_of_work(),
        recurrence_service=get_recurrence_service(),
    )


def get_batch_reconciler() -> BatchReconciler:
    return BatchReconciler(
        task_repo=get_task_repository(),
        link_repo=get_task_recurring_link_repository(),
        unit_of_work=get_unit_of_work(),
    )
