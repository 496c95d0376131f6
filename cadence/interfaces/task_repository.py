"""
Task repository interface.

Defines the contract for task persistence operations.
Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from cadence.models.enums import Priority, TaskStatus
from cadence.models.task import Task, TaskCreate, TaskUpdate


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, task: TaskCreate | Task) -> Task:
        """
        Create a new task.

        Args:
            task: Task creation data, or a fully built task (generated
                instances keep their pre-assigned ID and timestamps)

        Returns:
            Created task
        """
        pass

    @abstractmethod
    async def get(self, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID.

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[TaskStatus] = None,
        priority: Optional[Priority] = None,
        include_closed: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Task]:
        """
        List tasks with optional filters, ordered by due date.

        Args:
            status: Only tasks with this status
            priority: Only tasks with this priority
            include_closed: Whether DONE/CANCELLED tasks are included
            limit: Maximum number of results
            offset: Pagination offset
        """
        pass

    @abstractmethod
    async def update(self, task_id: UUID, update: TaskUpdate) -> Optional[Task]:
        """
        Update a task.

        Returns:
            Updated task, or None if not found
        """
        pass

    @abstractmethod
    async def delete(self, task_id: UUID) -> bool:
        """
        Delete a task.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def get_by_status(self, status: TaskStatus) -> list[Task]:
        """Get all tasks with a status."""
        pass

    @abstractmethod
    async def get_by_priority(self, priority: Priority) -> list[Task]:
        """Get all tasks with a priority."""
        pass

    @abstractmethod
    async def exists_with_template(self, template_id: str) -> bool:
        """Check whether any task references a recurrence template."""
        pass
