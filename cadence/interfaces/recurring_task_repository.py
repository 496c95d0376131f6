"""
Recurring task repository interface.

Defines contract for recurring task persistence operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from cadence.models.enums import RecurringTaskStatus
from cadence.models.recurring_task import RecurringTask, RecurringTaskCreate, RecurringTaskUpdate


class IRecurringTaskRepository(ABC):
    """Abstract interface for recurring task persistence."""

    @abstractmethod
    async def create(self, data: RecurringTaskCreate | RecurringTask) -> RecurringTask:
        """Create a new recurring task definition."""
        pass

    @abstractmethod
    async def get(self, recurring_task_id: UUID) -> Optional[RecurringTask]:
        """Get a recurring task by ID."""
        pass

    @abstractmethod
    async def get_all(self) -> list[RecurringTask]:
        """List all recurring task definitions."""
        pass

    @abstractmethod
    async def get_by_status(self, status: RecurringTaskStatus) -> list[RecurringTask]:
        """List recurring task definitions with a status."""
        pass

    async def get_active(self) -> list[RecurringTask]:
        """List active recurring task definitions."""
        return await self.get_by_status(RecurringTaskStatus.ACTIVE)

    @abstractmethod
    async def update(
        self, recurring_task_id: UUID, update: RecurringTaskUpdate
    ) -> Optional[RecurringTask]:
        """Update a recurring task definition. Returns None if not found."""
        pass

    @abstractmethod
    async def delete(self, recurring_task_id: UUID) -> bool:
        """Delete a recurring task definition."""
        pass
