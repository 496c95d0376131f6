"""
Recurring task generator.

Produces concrete task instances:

- ``next_instance``: one successor for a single task and its template
  (used when a task is completed).
- ``generate``: every occurrence of a recurring task definition from its
  effective start up to the advance horizon or its end date (backfill on
  creation and reactivation).

The bulk path steps with ``advance_from``, which only looks at the first
interval of a recurring task. This differs from RecurrenceCalculator, which
composes all intervals.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence
from uuid import uuid4

from cadence.core.config import get_settings
from cadence.core.logger import setup_logger
from cadence.models.enums import IntervalUnit, TaskStatus
from cadence.models.generation import GeneratedInstance
from cadence.models.interval import Interval
from cadence.models.recurrence_template import RecurrenceTemplateBase
from cadence.models.recurring_task import RecurringTask
from cadence.models.task import Task
from cadence.models.task_recurring_link import TaskRecurringLink
from cadence.services.recurrence_calculator import (
    RecurrenceCalculator,
    add_months_overflowing,
    add_years,
)

logger = setup_logger(__name__)


class RecurringTaskGenerator:
    """Generates task instances from templates and recurring task definitions."""

    def __init__(
        self,
        max_advance: Optional[timedelta] = None,
        calculator: Optional[RecurrenceCalculator] = None,
    ):
        self.max_advance = max_advance if max_advance is not None else get_settings().max_advance
        self.calculator = calculator or RecurrenceCalculator()

    # ------------------------------------------------------------------
    # Single instance
    # ------------------------------------------------------------------

    def next_instance(
        self,
        task: Task,
        template: RecurrenceTemplateBase,
        now: Optional[datetime] = None,
    ) -> Task:
        """
        Generate the successor of a task from its recurrence template.

        The next due date is computed from the task's due date (or ``now``
        when it has none). Closed statuses reset to TODO; an open status is
        kept. Nothing is persisted.

        Raises:
            InvalidIntervalError: If the template has a non-positive interval
        """
        now = now or datetime.now()
        next_due = self.calculator.next_occurrence(template, task.due_date or now)

        return Task(
            id=uuid4(),
            title=task.title,
            description=task.description,
            status=TaskStatus.TODO if task.status.is_closed else task.status,
            priority=task.priority,
            due_date=next_due,
            tags=list(task.tags),
            recurrence_template_id=task.recurrence_template_id,
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def can_generate_next_instance(task: Task) -> bool:
        """A task regenerates on completion only if it references a template."""
        return bool(task.recurrence_template_id)

    # ------------------------------------------------------------------
    # Bounded series
    # ------------------------------------------------------------------

    def effective_end(self, recurring_task: RecurringTask, now: datetime) -> datetime:
        """The earlier of the definition's end date and the advance horizon."""
        horizon = now + self.max_advance
        if recurring_task.end_date is not None and recurring_task.end_date < horizon:
            return recurring_task.end_date
        return horizon

    def calculate_occurrences(
        self, recurring_task: RecurringTask, now: Optional[datetime] = None
    ) -> list[datetime]:
        """
        All occurrence dates from the effective start to the effective end.

        Finite by construction: every step moves strictly forward and the
        loop stops at ``effective_end``.
        """
        now = now or datetime.now()
        end = self.effective_end(recurring_task, now)

        # Stay on the start date's grid
        cursor = recurring_task.start_date
        while cursor < now:
            cursor = self.advance_from(cursor, recurring_task.intervals)

        occurrences: list[datetime] = []
        while cursor <= end:
            occurrences.append(cursor)
            cursor = self.advance_from(cursor, recurring_task.intervals)
        return occurrences

    def generate(
        self, recurring_task: RecurringTask, now: Optional[datetime] = None
    ) -> list[Task]:
        """Generate task instances for a recurring task up to the horizon."""
        now = now or datetime.now()
        tasks = [
            self.create_instance(recurring_task, due_date, now)
            for due_date in self.calculate_occurrences(recurring_task, now)
        ]
        logger.debug(
            f"Generated {len(tasks)} instance(s) for recurring task {recurring_task.id}"
        )
        return tasks

    def generate_linked(
        self, recurring_task: RecurringTask, now: Optional[datetime] = None
    ) -> list[GeneratedInstance]:
        """Generate instances paired with their links."""
        now = now or datetime.now()
        return [
            self.link_instance(recurring_task, task, now)
            for task in self.generate(recurring_task, now)
        ]

    @staticmethod
    def create_instance(
        recurring_task: RecurringTask, due_date: datetime, now: Optional[datetime] = None
    ) -> Task:
        """Build one open task instance due at ``due_date``."""
        now = now or datetime.now()
        return Task(
            id=uuid4(),
            title=recurring_task.title,
            description=recurring_task.description,
            status=TaskStatus.TODO,
            priority=recurring_task.priority,
            due_date=due_date,
            tags=list(recurring_task.tags),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def link_instance(
        recurring_task: RecurringTask, task: Task, now: Optional[datetime] = None
    ) -> GeneratedInstance:
        link = TaskRecurringLink.for_instance(
            recurring_task_id=recurring_task.id,
            task_id=task.id,
            generated_date=task.due_date,
            now=now,
        )
        return GeneratedInstance(task=task, link=link)

    # ------------------------------------------------------------------
    # Step function
    # ------------------------------------------------------------------

    def advance_from(self, from_date: datetime, intervals: Sequence[Interval]) -> datetime:
        """
        Next occurrence after ``from_date`` using the first interval only.

        Never raises. Any condition that could stall a generation loop
        (no interval, non-positive value, unknown unit, no forward progress)
        returns ``from_date + max_advance`` so that the caller's bounds check
        ends the loop.
        """
        fail_open = from_date + self.max_advance

        if not intervals:
            logger.debug("No intervals; jumping to horizon")
            return fail_open

        interval = intervals[0]
        if interval.value <= 0:
            logger.debug(f"Non-positive interval {interval}; jumping to horizon")
            return fail_open

        if interval.unit == IntervalUnit.DAYS:
            next_date = from_date + timedelta(days=interval.value)
        elif interval.unit == IntervalUnit.WEEKS:
            next_date = from_date + timedelta(weeks=interval.value)
        elif interval.unit == IntervalUnit.MONTHS:
            next_date = add_months_overflowing(from_date, interval.value)
        elif interval.unit == IntervalUnit.YEARS:
            next_date = add_years(from_date, interval.value)
        else:
            logger.debug(f"Unknown interval unit {interval.unit!r}; jumping to horizon")
            return fail_open

        if next_date <= from_date:
            return fail_open
        return next_date
