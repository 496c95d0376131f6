"""
Recurring task models.

A recurring task is a generator definition, not a task: it owns a start/end
window and its own interval list, and produces linked task instances.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cadence.models.enums import Priority, RecurringTaskStatus
from cadence.models.interval import Interval
from cadence.models.task import to_naive_local


class RecurringTaskBase(BaseModel):
    """Base fields for recurring tasks."""

    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    priority: Priority = Priority.MEDIUM
    start_date: datetime
    end_date: Optional[datetime] = Field(
        None, description="Last date to generate for; indefinite when unset"
    )
    intervals: list[Interval] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    category_ids: list[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Recurring task title is required")
        return value

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(value)


class RecurringTaskCreate(RecurringTaskBase):
    """Create a new recurring task definition."""

    intervals: list[Interval] = Field(..., min_length=1)


class RecurringTaskUpdate(BaseModel):
    """Update recurring task fields."""

    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    priority: Optional[Priority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    intervals: Optional[list[Interval]] = None
    tags: Optional[list[str]] = None
    category_ids: Optional[list[str]] = None
    status: Optional[RecurringTaskStatus] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def _naive_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_local(value)


class RecurringTask(RecurringTaskBase):
    """Recurring task definition with metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    status: RecurringTaskStatus = RecurringTaskStatus.ACTIVE
    created_at: datetime
    updated_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == RecurringTaskStatus.ACTIVE

    @property
    def has_end_date(self) -> bool:
        return self.end_date is not None

    @property
    def is_indefinite(self) -> bool:
        return self.end_date is None
