"""
Interval model.

One step of a recurrence rule: an amount and a calendar unit.
"""

from pydantic import BaseModel, ConfigDict

from cadence.models.enums import IntervalUnit


class Interval(BaseModel):
    """
    Single recurrence step, e.g. "2 weeks".

    The value is not range-checked on load; the calculator rejects
    non-positive values with InvalidIntervalError.
    """

    model_config = ConfigDict(frozen=True)

    value: int
    unit: IntervalUnit

    @property
    def is_valid(self) -> bool:
        return self.value > 0

    def __str__(self) -> str:
        unit = self.unit.value if isinstance(self.unit, IntervalUnit) else self.unit
        return f"{self.value} {unit}"
