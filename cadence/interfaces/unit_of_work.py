"""
Unit of work interface.

Collects create/update/delete operations and applies them together on commit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Union

from cadence.models.generation import GeneratedInstance
from cadence.models.recurrence_template import RecurrenceTemplate
from cadence.models.recurring_task import RecurringTask
from cadence.models.task import Task
from cadence.models.task_recurring_link import TaskRecurringLink

Entity = Union[Task, RecurrenceTemplate, RecurringTask, TaskRecurringLink]


class EntityType(str, Enum):
    """Routes a change to the right table."""

    TASK = "task"
    RECURRENCE_TEMPLATE = "recurrence_template"
    RECURRING_TASK = "recurring_task"
    TASK_RECURRING_LINK = "task_recurring_link"


class ChangeType(str, Enum):
    NEW = "new"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class Change:
    """One pending change."""

    entity: Entity
    change_type: ChangeType
    entity_type: EntityType


class IUnitOfWork(ABC):
    """
    Abstract commit coordinator.

    Changes are queued in registration order. ``commit`` applies the queue;
    whether or not it succeeds the queue is empty afterwards, and retrying is
    the caller's decision.
    """

    def __init__(self) -> None:
        self._changes: list[Change] = []

    @property
    def pending(self) -> list[Change]:
        return list(self._changes)

    @property
    def has_changes(self) -> bool:
        return bool(self._changes)

    def register_new(self, entity: Entity, entity_type: EntityType) -> None:
        self._changes.append(Change(entity, ChangeType.NEW, entity_type))

    def register_modified(self, entity: Entity, entity_type: EntityType) -> None:
        self._changes.append(Change(entity, ChangeType.MODIFIED, entity_type))

    def register_deleted(self, entity: Entity, entity_type: EntityType) -> None:
        self._changes.append(Change(entity, ChangeType.DELETED, entity_type))

    def register_generated(self, instance: GeneratedInstance) -> None:
        """Queue a generated task and its link as one unit."""
        self.register_new(instance.task, EntityType.TASK)
        self.register_new(instance.link, EntityType.TASK_RECURRING_LINK)

    def rollback(self) -> None:
        """Discard all pending changes without touching storage."""
        self._changes = []

    @abstractmethod
    async def commit(self) -> None:
        """
        Apply all pending changes.

        Raises:
            InfrastructureError: If applying the changes failed
        """
        pass
