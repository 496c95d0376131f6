"""
Generation result models.
"""

from pydantic import BaseModel, Field

from cadence.models.task import Task
from cadence.models.task_recurring_link import TaskRecurringLink


class GeneratedInstance(BaseModel):
    """A generated task together with its link; persisted all-or-nothing."""

    task: Task
    link: TaskRecurringLink


class BatchGenerationResult(BaseModel):
    """Outcome of a batch reconciliation run."""

    generated_count: int = 0
    processed_count: int = 0
    error_count: int = 0
    errors: list[str] = Field(default_factory=list)

    def record_error(self, message: str) -> None:
        self.error_count += 1
        self.errors.append(message)
