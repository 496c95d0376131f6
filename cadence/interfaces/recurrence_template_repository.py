"""
Recurrence template repository interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from cadence.models.recurrence_template import (
    RecurrenceTemplate,
    RecurrenceTemplateCreate,
    RecurrenceTemplateUpdate,
)


class IRecurrenceTemplateRepository(ABC):
    """Abstract interface for recurrence template persistence."""

    @abstractmethod
    async def initialize(self) -> None:
        """Seed the default templates if none exist."""
        pass

    @abstractmethod
    async def get(self, template_id: str) -> Optional[RecurrenceTemplate]:
        """Get a template by ID."""
        pass

    @abstractmethod
    async def get_all(self) -> list[RecurrenceTemplate]:
        """Get all templates."""
        pass

    @abstractmethod
    async def create(self, data: RecurrenceTemplateCreate) -> RecurrenceTemplate:
        """Create a template (a missing ID is generated)."""
        pass

    @abstractmethod
    async def update(
        self, template_id: str, update: RecurrenceTemplateUpdate
    ) -> Optional[RecurrenceTemplate]:
        """Update a template. Returns None if not found."""
        pass

    @abstractmethod
    async def delete(self, template_id: str) -> bool:
        """
        Delete a template.

        Raises:
            TemplateInUseError: If any task references the template
        """
        pass
