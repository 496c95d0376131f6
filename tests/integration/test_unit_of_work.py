"""
Integration tests for SqliteUnitOfWork.
"""

from datetime import datetime
from uuid import uuid4

import pytest

from cadence.core.exceptions import InfrastructureError
from cadence.infrastructure.local.task_recurring_link_repository import (
    SqliteTaskRecurringLinkRepository,
)
from cadence.infrastructure.local.task_repository import SqliteTaskRepository
from cadence.infrastructure.local.unit_of_work import SqliteUnitOfWork
from cadence.interfaces.unit_of_work import ChangeType, EntityType
from cadence.models.enums import TaskStatus
from cadence.models.generation import GeneratedInstance
from cadence.models.task import Task, TaskCreate
from cadence.models.task_recurring_link import TaskRecurringLink


def _task(title: str = "Stretch") -> Task:
    now = datetime(2024, 1, 15, 9)
    return Task(id=uuid4(), title=title, due_date=now, created_at=now, updated_at=now)


@pytest.fixture
def task_repo(session_factory):
    return SqliteTaskRepository(session_factory=session_factory)


@pytest.fixture
def link_repo(session_factory):
    return SqliteTaskRecurringLinkRepository(session_factory=session_factory)


@pytest.fixture
def uow(session_factory):
    return SqliteUnitOfWork(session_factory=session_factory)


class TestCommit:
    @pytest.mark.asyncio
    async def test_generated_instance_persists_task_and_link(self, uow, task_repo, link_repo):
        task = _task()
        link = TaskRecurringLink.for_instance(uuid4(), task.id, task.due_date)

        uow.register_generated(GeneratedInstance(task=task, link=link))
        assert [c.change_type for c in uow.pending] == [ChangeType.NEW, ChangeType.NEW]
        await uow.commit()

        assert not uow.has_changes
        assert (await task_repo.get(task.id)).title == "Stretch"
        assert [l.id for l in await link_repo.get_by_task_id(task.id)] == [link.id]

    @pytest.mark.asyncio
    async def test_modified_and_deleted(self, uow, task_repo):
        keep = await task_repo.create(TaskCreate(title="Keep"))
        drop = await task_repo.create(TaskCreate(title="Drop"))

        uow.register_modified(
            keep.model_copy(update={"status": TaskStatus.IN_PROGRESS}), EntityType.TASK
        )
        uow.register_deleted(drop, EntityType.TASK)
        await uow.commit()

        assert (await task_repo.get(keep.id)).status == TaskStatus.IN_PROGRESS
        assert await task_repo.get(drop.id) is None

    @pytest.mark.asyncio
    async def test_deleting_missing_entity_is_a_no_op(self, uow):
        uow.register_deleted(_task(), EntityType.TASK)
        await uow.commit()

    @pytest.mark.asyncio
    async def test_empty_commit(self, uow):
        await uow.commit()
        assert not uow.has_changes

    @pytest.mark.asyncio
    async def test_failure_rolls_back_everything(self, uow, task_repo):
        existing = await task_repo.create(TaskCreate(title="Existing"))
        fresh = _task("Fresh")

        uow.register_new(fresh, EntityType.TASK)
        uow.register_new(existing, EntityType.TASK)  # duplicate primary key

        with pytest.raises(InfrastructureError):
            await uow.commit()

        assert not uow.has_changes
        assert await task_repo.get(fresh.id) is None

    @pytest.mark.asyncio
    async def test_reusable_after_failure(self, uow, task_repo):
        existing = await task_repo.create(TaskCreate(title="Existing"))
        uow.register_new(existing, EntityType.TASK)
        with pytest.raises(InfrastructureError):
            await uow.commit()

        retry = _task("Retry")
        uow.register_new(retry, EntityType.TASK)
        await uow.commit()

        assert await task_repo.get(retry.id) is not None


class TestRollback:
    @pytest.mark.asyncio
    async def test_rollback_discards_queue(self, uow, task_repo):
        task = _task()
        uow.register_new(task, EntityType.TASK)

        uow.rollback()
        await uow.commit()

        assert await task_repo.get(task.id) is None
