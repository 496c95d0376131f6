"""
Recurrence service.

Template management and template-driven regeneration of completed tasks.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from cadence.core.exceptions import TemplateInUseError
from cadence.core.logger import setup_logger
from cadence.interfaces.recurrence_template_repository import IRecurrenceTemplateRepository
from cadence.interfaces.task_repository import ITaskRepository
from cadence.models.recurrence_template import (
    RecurrenceTemplate,
    RecurrenceTemplateBase,
    RecurrenceTemplateCreate,
    RecurrenceTemplateUpdate,
)
from cadence.models.task import Task
from cadence.services.recurrence_calculator import RecurrenceCalculator
from cadence.services.recurring_task_generator import RecurringTaskGenerator

logger = setup_logger(__name__)


class RecurrenceService:
    """Service for recurrence templates and next-occurrence generation."""

    def __init__(
        self,
        template_repo: IRecurrenceTemplateRepository,
        task_repo: ITaskRepository,
        calculator: Optional[RecurrenceCalculator] = None,
        generator: Optional[RecurringTaskGenerator] = None,
    ):
        self.template_repo = template_repo
        self.task_repo = task_repo
        self.calculator = calculator or RecurrenceCalculator()
        self.generator = generator or RecurringTaskGenerator(calculator=self.calculator)

    async def initialize(self) -> None:
        """Seed the preset templates into an empty store."""
        await self.template_repo.initialize()

    async def get_all_templates(self) -> list[RecurrenceTemplate]:
        return await self.template_repo.get_all()

    async def get_template(self, template_id: str) -> Optional[RecurrenceTemplate]:
        return await self.template_repo.get(template_id)

    async def create_template(self, data: RecurrenceTemplateCreate) -> RecurrenceTemplate:
        """
        Create a template.

        Raises:
            InvalidIntervalError: If any interval value is not positive
        """
        self.calculator.validate_intervals(data.intervals)
        template = await self.template_repo.create(data)
        logger.info(f"Created recurrence template {template.id} ({template.name})")
        return template

    async def update_template(
        self, template_id: str, update: RecurrenceTemplateUpdate
    ) -> Optional[RecurrenceTemplate]:
        if update.intervals is not None:
            self.calculator.validate_intervals(update.intervals)
        return await self.template_repo.update(template_id, update)

    async def delete_template(self, template_id: str) -> bool:
        """
        Delete a template.

        Raises:
            TemplateInUseError: If any task still references the template
        """
        if await self.task_repo.exists_with_template(template_id):
            raise TemplateInUseError(template_id)
        return await self.template_repo.delete(template_id)

    def calculate_next_occurrence(
        self, template: RecurrenceTemplateBase, current_date: datetime
    ) -> datetime:
        return self.calculator.next_occurrence(template, current_date)

    def can_generate_next_instance(self, task: Task) -> bool:
        return self.generator.can_generate_next_instance(task)

    async def build_next_task(
        self, completed_task: Task, now: Optional[datetime] = None
    ) -> Optional[Task]:
        """
        Build, without persisting, the successor of a completed task.

        Returns None when the task has no template reference or the template
        no longer exists.
        """
        if not completed_task.recurrence_template_id:
            return None

        template = await self.template_repo.get(completed_task.recurrence_template_id)
        if template is None:
            logger.warning(
                f"Recurrence template {completed_task.recurrence_template_id} "
                f"not found for task {completed_task.id}"
            )
            return None

        return self.generator.next_instance(completed_task, template, now=now)

    async def generate_next_task(
        self, completed_task: Task, now: Optional[datetime] = None
    ) -> Optional[Task]:
        """Create and persist the successor of a completed task, if it has one."""
        next_task = await self.build_next_task(completed_task, now=now)
        if next_task is None:
            return None

        created = await self.task_repo.create(next_task)
        logger.info(f"Generated next task {created.id} from task {completed_task.id}")
        return created
