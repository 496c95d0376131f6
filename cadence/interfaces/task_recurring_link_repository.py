"""
Task-recurring link repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from uuid import UUID

from cadence.models.task_recurring_link import TaskRecurringLink


class ITaskRecurringLinkRepository(ABC):
    """Abstract interface for the task <-> recurring task junction."""

    @abstractmethod
    async def create(self, link: TaskRecurringLink) -> TaskRecurringLink:
        """Persist a link."""
        pass

    @abstractmethod
    async def get_by_recurring_task_id(self, recurring_task_id: UUID) -> list[TaskRecurringLink]:
        """All links of a recurring task."""
        pass

    @abstractmethod
    async def get_by_task_id(self, task_id: UUID) -> list[TaskRecurringLink]:
        """All links pointing at a task instance."""
        pass

    @abstractmethod
    async def delete_by_recurring_task_id(self, recurring_task_id: UUID) -> int:
        """Delete all links of a recurring task. Returns the number deleted."""
        pass

    @abstractmethod
    async def delete_by_task_id(self, task_id: UUID) -> int:
        """Delete all links of a task instance. Returns the number deleted."""
        pass
