"""
Unit tests for RecurringTaskGenerator.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import pytest

from cadence.core.exceptions import InvalidIntervalError
from cadence.models.enums import IntervalUnit, Priority, TaskStatus
from cadence.models.interval import Interval
from cadence.models.recurrence_template import RecurrenceTemplate
from cadence.models.recurring_task import RecurringTask
from cadence.models.task import Task
from cadence.services.recurring_task_generator import RecurringTaskGenerator

YEAR = timedelta(days=365)


def _recurring(
    start: datetime,
    end: Optional[datetime] = None,
    intervals: Optional[list[Interval]] = None,
    **kwargs,
) -> RecurringTask:
    return RecurringTask(
        id=uuid4(),
        title="Water the plants",
        start_date=start,
        end_date=end,
        intervals=intervals if intervals is not None else [Interval(value=1, unit=IntervalUnit.WEEKS)],
        created_at=start,
        updated_at=start,
        **kwargs,
    )


def _task(**kwargs) -> Task:
    defaults = dict(
        id=uuid4(),
        title="Pay rent",
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 1, 1),
    )
    defaults.update(kwargs)
    return Task(**defaults)


@pytest.fixture
def generator():
    return RecurringTaskGenerator(max_advance=YEAR)


class TestCalculateOccurrences:
    """Bounded series of occurrence dates."""

    def test_weekly_until_end_date_inclusive(self, generator, now):
        recurring = _recurring(datetime(2024, 2, 1, 9), end=datetime(2024, 2, 29, 9))

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences == [
            datetime(2024, 2, 1, 9),
            datetime(2024, 2, 8, 9),
            datetime(2024, 2, 15, 9),
            datetime(2024, 2, 22, 9),
            datetime(2024, 2, 29, 9),
        ]

    def test_indefinite_series_stops_at_horizon(self, generator, now):
        recurring = _recurring(now, intervals=[Interval(value=1, unit=IntervalUnit.DAYS)])

        occurrences = generator.calculate_occurrences(recurring, now)

        assert len(occurrences) == 366
        assert occurrences[0] == now
        assert occurrences[-1] == now + YEAR
        assert all(o <= now + YEAR for o in occurrences)

    def test_end_date_beyond_horizon_is_capped(self, generator, now):
        recurring = _recurring(now, end=now + timedelta(days=800))

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences[-1] <= now + YEAR

    def test_past_start_resumes_at_first_occurrence_not_before_now(self, generator, now):
        recurring = _recurring(datetime(2024, 1, 1, 9))

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences[:2] == [datetime(2024, 1, 15, 9), datetime(2024, 1, 22, 9)]

    def test_past_start_keeps_start_time_of_day(self, generator):
        recurring = _recurring(datetime(2024, 1, 1, 9))

        occurrences = generator.calculate_occurrences(recurring, datetime(2024, 1, 10, 14, 30))

        assert occurrences[0] == datetime(2024, 1, 15, 9)
        assert all(o.time() == datetime(2024, 1, 1, 9).time() for o in occurrences)

    def test_past_start_with_stalled_interval_still_terminates(self, generator, now):
        recurring = _recurring(
            datetime(2023, 1, 1, 9), intervals=[Interval(value=0, unit=IntervalUnit.DAYS)]
        )

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences == [datetime(2024, 12, 31, 9)]

    def test_aware_start_is_compared_as_local_time(self, generator):
        start = datetime(2024, 2, 1, 9, tzinfo=timezone.utc)
        recurring = _recurring(start, end=start + timedelta(weeks=1))

        occurrences = generator.calculate_occurrences(recurring, datetime(2024, 1, 15))

        local = start.astimezone().replace(tzinfo=None)
        assert occurrences == [local, local + timedelta(weeks=1)]

    def test_only_first_interval_is_used(self, generator, now):
        recurring = _recurring(
            datetime(2024, 2, 1, 9),
            end=datetime(2024, 2, 15, 9),
            intervals=[
                Interval(value=1, unit=IntervalUnit.WEEKS),
                Interval(value=3, unit=IntervalUnit.DAYS),
            ],
        )

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences == [
            datetime(2024, 2, 1, 9),
            datetime(2024, 2, 8, 9),
            datetime(2024, 2, 15, 9),
        ]

    def test_month_steps_overflow_past_short_months(self, generator, now):
        recurring = _recurring(
            datetime(2024, 1, 31, 9),
            end=datetime(2024, 5, 1, 9),
            intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)],
        )

        occurrences = generator.calculate_occurrences(recurring, now)

        assert occurrences == [
            datetime(2024, 1, 31, 9),
            datetime(2024, 3, 2, 9),
            datetime(2024, 4, 2, 9),
        ]

    def test_end_before_start_yields_nothing(self, generator, now):
        recurring = _recurring(datetime(2024, 2, 1, 9), end=datetime(2024, 1, 20, 9))

        assert generator.calculate_occurrences(recurring, now) == []

    def test_without_intervals_yields_single_occurrence(self, generator, now):
        recurring = _recurring(datetime(2024, 2, 1, 9), intervals=[])

        assert generator.calculate_occurrences(recurring, now) == [datetime(2024, 2, 1, 9)]

    def test_non_positive_interval_does_not_loop(self, generator, now):
        recurring = _recurring(
            datetime(2024, 2, 1, 9), intervals=[Interval(value=0, unit=IntervalUnit.DAYS)]
        )

        assert generator.calculate_occurrences(recurring, now) == [datetime(2024, 2, 1, 9)]

    def test_occurrences_strictly_increase(self, generator, now):
        recurring = _recurring(now, intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)])

        occurrences = generator.calculate_occurrences(recurring, now)

        assert all(a < b for a, b in zip(occurrences, occurrences[1:]))


class TestGenerate:
    """Task instances built from a recurring task."""

    def test_instances_copy_definition_fields(self, generator, now):
        recurring = _recurring(
            datetime(2024, 2, 1, 9),
            end=datetime(2024, 2, 8, 9),
            description="Kitchen and balcony",
            priority=Priority.HIGH,
            tags=["home"],
        )

        tasks = generator.generate(recurring, now)

        assert [t.due_date for t in tasks] == [datetime(2024, 2, 1, 9), datetime(2024, 2, 8, 9)]
        for task in tasks:
            assert task.title == "Water the plants"
            assert task.description == "Kitchen and balcony"
            assert task.priority == Priority.HIGH
            assert task.status == TaskStatus.TODO
            assert task.tags == ["home"]
            assert task.tags is not recurring.tags
            assert task.created_at == now
        assert len({t.id for t in tasks}) == 2

    def test_generate_linked_pairs_task_and_link(self, generator, now):
        recurring = _recurring(datetime(2024, 2, 1, 9), end=datetime(2024, 2, 8, 9))

        instances = generator.generate_linked(recurring, now)

        assert len(instances) == 2
        for instance in instances:
            assert instance.link.task_id == instance.task.id
            assert instance.link.recurring_task_id == recurring.id
            assert instance.link.original_generated_date == instance.task.due_date
            assert instance.link.last_regenerated_date == now

    def test_effective_end(self, generator, now):
        assert generator.effective_end(_recurring(now), now) == now + YEAR
        end = now + timedelta(days=10)
        assert generator.effective_end(_recurring(now, end=end), now) == end


class TestAdvanceFrom:
    """Step function guards."""

    def test_days(self, generator):
        intervals = [Interval(value=2, unit=IntervalUnit.DAYS)]
        assert generator.advance_from(datetime(2024, 1, 1), intervals) == datetime(2024, 1, 3)

    def test_years(self, generator):
        intervals = [Interval(value=1, unit=IntervalUnit.YEARS)]
        assert generator.advance_from(datetime(2024, 2, 29), intervals) == datetime(2025, 3, 1)

    def test_empty_intervals_jump_to_horizon(self, generator):
        start = datetime(2024, 1, 1)
        assert generator.advance_from(start, []) == start + YEAR

    def test_non_positive_value_jumps_to_horizon(self, generator):
        start = datetime(2024, 1, 1)
        intervals = [Interval(value=-3, unit=IntervalUnit.WEEKS)]
        assert generator.advance_from(start, intervals) == start + YEAR

    def test_unknown_unit_jumps_to_horizon(self, generator):
        start = datetime(2024, 1, 1)
        intervals = [Interval.model_construct(value=1, unit="fortnights")]
        assert generator.advance_from(start, intervals) == start + YEAR


class TestNextInstance:
    """Single successor generation from a template."""

    @pytest.fixture
    def monthly(self):
        return RecurrenceTemplate(
            id="default-monthly",
            name="Monthly",
            intervals=[Interval(value=1, unit=IntervalUnit.MONTHS)],
        )

    def test_done_task_resets_to_todo(self, generator, monthly, now):
        source = _task(
            status=TaskStatus.DONE,
            due_date=datetime(2024, 1, 31, 9),
            tags=["bills"],
            priority=Priority.URGENT,
            recurrence_template_id="default-monthly",
        )

        successor = generator.next_instance(source, monthly, now)

        assert successor.id != source.id
        assert successor.status == TaskStatus.TODO
        assert successor.due_date == datetime(2024, 2, 29, 9)
        assert successor.tags == ["bills"]
        assert successor.tags is not source.tags
        assert successor.priority == Priority.URGENT
        assert successor.recurrence_template_id == "default-monthly"
        assert successor.created_at == now

    def test_open_status_is_preserved(self, generator, monthly, now):
        source = _task(status=TaskStatus.IN_PROGRESS, due_date=datetime(2024, 1, 10))

        assert generator.next_instance(source, monthly, now).status == TaskStatus.IN_PROGRESS

    def test_missing_due_date_uses_now(self, generator, monthly, now):
        source = _task(status=TaskStatus.DONE)

        assert generator.next_instance(source, monthly, now).due_date == datetime(2024, 2, 15, 9)

    def test_invalid_template_raises(self, generator, now):
        template = RecurrenceTemplate(
            id="broken",
            name="Broken",
            intervals=[Interval(value=0, unit=IntervalUnit.DAYS)],
        )
        with pytest.raises(InvalidIntervalError):
            generator.next_instance(_task(due_date=now), template, now)

    def test_can_generate_next_instance(self, generator):
        assert generator.can_generate_next_instance(_task(recurrence_template_id="default-daily"))
        assert not generator.can_generate_next_instance(_task())
