"""
Recurrence template models.

A template is a reusable, named recurrence rule. Its mode is an explicit
tagged union: either plain sequential interval application, or
"nth weekday of the target month".
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cadence.models.interval import Interval

LAST_OCCURRENCE = -1
VALID_OCCURRENCES = (1, 2, 3, 4, 5, LAST_OCCURRENCE)


class SequentialIntervalMode(BaseModel):
    """Apply every interval in order; the resulting date is the occurrence."""

    kind: Literal["sequential"] = "sequential"


class WeekdayOccurrenceMode(BaseModel):
    """Intervals pick the target month; the nth (or last) weekday is the occurrence."""

    kind: Literal["weekday_occurrence"] = "weekday_occurrence"
    weekday: int = Field(..., ge=0, le=6, description="0=Sunday ... 6=Saturday")
    occurrence_in_month: int = Field(..., description="1..5, or -1 for the last one")

    @field_validator("occurrence_in_month")
    @classmethod
    def _check_occurrence(cls, value: int) -> int:
        if value not in VALID_OCCURRENCES:
            raise ValueError("occurrence_in_month must be 1..5 or -1")
        return value


RecurrenceMode = Annotated[
    Union[SequentialIntervalMode, WeekdayOccurrenceMode],
    Field(discriminator="kind"),
]


class RecurrenceTemplateBase(BaseModel):
    """Base fields for recurrence templates."""

    name: str = Field(..., min_length=1, max_length=200)
    intervals: list[Interval] = Field(..., min_length=1)
    day_of_month: Optional[int] = Field(
        None, ge=1, le=31, description="Pinned day for month steps (clamped to month end)"
    )
    mode: RecurrenceMode = Field(default_factory=SequentialIntervalMode)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("RecurrenceTemplate name is required")
        return value

    @property
    def is_weekday_based(self) -> bool:
        return isinstance(self.mode, WeekdayOccurrenceMode)

    @property
    def weekday(self) -> Optional[int]:
        return self.mode.weekday if isinstance(self.mode, WeekdayOccurrenceMode) else None

    @property
    def occurrence_in_month(self) -> Optional[int]:
        if isinstance(self.mode, WeekdayOccurrenceMode):
            return self.mode.occurrence_in_month
        return None


class RecurrenceTemplateCreate(RecurrenceTemplateBase):
    """Create a new recurrence template."""

    id: Optional[str] = Field(None, max_length=64)


class RecurrenceTemplateUpdate(BaseModel):
    """Update recurrence template fields."""

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    intervals: Optional[list[Interval]] = Field(None, min_length=1)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    mode: Optional[RecurrenceMode] = None


class RecurrenceTemplate(RecurrenceTemplateBase):
    """Recurrence template with identifier."""

    model_config = ConfigDict(from_attributes=True)

    id: str
