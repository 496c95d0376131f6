"""
Task-recurring link model.

Junction record from a generated task instance back to its recurring source.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class TaskRecurringLink(BaseModel):
    """Link between a generated task and the recurring task that produced it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(default_factory=uuid4)
    recurring_task_id: UUID
    task_id: UUID
    original_generated_date: datetime = Field(
        ..., description="Due date the instance was originally generated for"
    )
    last_regenerated_date: datetime = Field(default_factory=datetime.now)

    @classmethod
    def for_instance(
        cls,
        recurring_task_id: UUID,
        task_id: UUID,
        generated_date: datetime,
        now: Optional[datetime] = None,
    ) -> "TaskRecurringLink":
        """Build a link for a freshly generated instance."""
        return cls(
            recurring_task_id=recurring_task_id,
            task_id=task_id,
            original_generated_date=generated_date,
            last_regenerated_date=now or datetime.now(),
        )

    def mark_regenerated(self, now: Optional[datetime] = None) -> "TaskRecurringLink":
        return self.model_copy(update={"last_regenerated_date": now or datetime.now()})
