"""
End-to-end batch generation over SQLite.
"""

from datetime import datetime, time, timedelta

import pytest

from cadence.infrastructure.local.recurring_task_repository import SqliteRecurringTaskRepository
from cadence.infrastructure.local.task_recurring_link_repository import (
    SqliteTaskRecurringLinkRepository,
)
from cadence.infrastructure.local.task_repository import SqliteTaskRepository
from cadence.infrastructure.local.unit_of_work import SqliteUnitOfWork
from cadence.models.enums import IntervalUnit, TaskStatus
from cadence.models.interval import Interval
from cadence.models.recurring_task import RecurringTaskCreate
from cadence.models.task import TaskUpdate
from cadence.services.batch_generation import BatchReconciler
from cadence.services.recurring_task_generator import RecurringTaskGenerator
from cadence.services.recurring_task_service import RecurringTaskService

YEAR = timedelta(days=365)


@pytest.fixture
def repos(session_factory):
    return (
        SqliteRecurringTaskRepository(session_factory=session_factory),
        SqliteTaskRepository(session_factory=session_factory),
        SqliteTaskRecurringLinkRepository(session_factory=session_factory),
    )


@pytest.fixture
def recurring_service(session_factory, repos):
    recurring_repo, task_repo, link_repo = repos
    return RecurringTaskService(
        recurring_repo=recurring_repo,
        task_repo=task_repo,
        link_repo=link_repo,
        unit_of_work=SqliteUnitOfWork(session_factory=session_factory),
        generator=RecurringTaskGenerator(max_advance=YEAR),
    )


@pytest.fixture
def reconciler(session_factory, repos):
    _, task_repo, link_repo = repos
    return BatchReconciler(
        task_repo=task_repo,
        link_repo=link_repo,
        unit_of_work=SqliteUnitOfWork(session_factory=session_factory),
        generator=RecurringTaskGenerator(max_advance=YEAR),
        tolerance=timedelta(seconds=1),
    )


def _daily(start) -> RecurringTaskCreate:
    return RecurringTaskCreate(
        title="Journal",
        start_date=start,
        intervals=[Interval(value=1, unit=IntervalUnit.DAYS)],
    )


@pytest.mark.asyncio
async def test_rolling_horizon_is_topped_up_once(repos, recurring_service, reconciler, now):
    recurring_repo, _, _ = repos
    recurring = await recurring_service.create(_daily(now), now=now)
    later = now + timedelta(days=10)

    first = await reconciler.generate_all_pending(recurring_repo, now=later)
    second = await reconciler.generate_all_pending(recurring_repo, now=later)

    assert first.processed_count == 1
    assert first.generated_count == 10
    assert first.error_count == 0
    assert second.generated_count == 0
    tasks = await recurring_service.get_linked_tasks(recurring.id)
    assert len(tasks) == 376
    assert max(t.due_date for t in tasks) == later + YEAR


@pytest.mark.asyncio
async def test_stopped_recurring_tasks_are_ignored(repos, recurring_service, reconciler, now):
    recurring_repo, _, _ = repos
    recurring = await recurring_service.create(_daily(now), now=now)
    await recurring_service.stop(recurring.id)

    result = await reconciler.generate_all_pending(recurring_repo, now=now + timedelta(days=10))

    assert result.processed_count == 0
    assert result.generated_count == 0
    assert len(await recurring_service.get_linked_tasks(recurring.id)) == 366


@pytest.mark.asyncio
async def test_closed_series_is_not_duplicated_on_reconcile(session_factory, repos):
    recurring_repo, task_repo, link_repo = repos
    horizon = timedelta(days=5)
    service = RecurringTaskService(
        recurring_repo=recurring_repo,
        task_repo=task_repo,
        link_repo=link_repo,
        unit_of_work=SqliteUnitOfWork(session_factory=session_factory),
        generator=RecurringTaskGenerator(max_advance=horizon),
    )
    reconciler = BatchReconciler(
        task_repo=task_repo,
        link_repo=link_repo,
        unit_of_work=SqliteUnitOfWork(session_factory=session_factory),
        generator=RecurringTaskGenerator(max_advance=horizon),
        tolerance=timedelta(seconds=1),
    )
    now = datetime(2024, 1, 10, 14, 30)
    recurring = await service.create(_daily(datetime(2024, 1, 10, 9)), now=now)
    for task in await service.get_linked_tasks(recurring.id):
        await task_repo.update(task.id, TaskUpdate(status=TaskStatus.CANCELLED))

    result = await reconciler.generate_all_pending(recurring_repo, now=now)

    tasks = await service.get_linked_tasks(recurring.id)
    days = [t.due_date.date() for t in tasks]
    assert result.generated_count == 1
    assert len(days) == len(set(days)) == 6
    assert all(t.due_date.time() == time(9) for t in tasks)
