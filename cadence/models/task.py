"""
Task model definitions.

Tasks are the concrete to-do items; generated occurrences are ordinary tasks.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cadence.models.enums import Priority, TaskStatus


def to_naive_local(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    priority: Priority = Priority.MEDIUM
    due_date: Optional[datetime] = None
    tags: list[str] = Field(default_factory=list)
    recurrence_template_id: Optional[str] = Field(
        None, description="Template used to regenerate this task on completion"
    )

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Task title is required")
        return value

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(value)


class TaskCreate(TaskBase):
    """Create a new task."""

    status: TaskStatus = TaskStatus.TODO


class TaskUpdate(BaseModel):
    """Update task fields. Only fields explicitly set are applied."""

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    tags: Optional[list[str]] = None
    recurrence_template_id: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def _naive_due_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(value)


class Task(TaskBase):
    """Complete task model with all fields."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: TaskStatus = TaskStatus.TODO
    created_at: datetime
    updated_at: datetime

    @property
    def is_closed(self) -> bool:
        return self.status.is_closed
