"""
Custom exceptions for the application.
"""

from typing import Any, Optional
from uuid import UUID


class CadenceError(Exception):
    """Base exception for cadence."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(CadenceError):
    """Resource not found."""

    pass


class ValidationError(CadenceError):
    """Validation error."""

    pass


class InvalidIntervalError(ValidationError):
    """An interval value is not strictly positive."""

    def __init__(self, value: int, unit: Optional[str] = None):
        super().__init__(
            "Interval value must be greater than 0",
            details={"value": value, "unit": unit},
        )
        self.value = value
        self.unit = unit


class BusinessLogicError(CadenceError):
    """Business logic constraint violation."""

    pass


class TemplateInUseError(BusinessLogicError):
    """Recurrence template is still referenced by tasks."""

    def __init__(self, template_id: str):
        super().__init__(
            "Cannot delete recurrence template: it is referenced by existing tasks",
            details={"template_id": template_id},
        )
        self.template_id = template_id


class InfrastructureError(CadenceError):
    """Infrastructure-related error (DB, scheduler, etc.)."""

    pass


class ReconciliationItemError(CadenceError):
    """Failure while reconciling a single recurring task."""

    def __init__(self, recurring_task_id: UUID, cause: BaseException):
        super().__init__(
            f"Error processing recurring task {recurring_task_id}: {cause}",
            details={"recurring_task_id": str(recurring_task_id)},
        )
        self.recurring_task_id = recurring_task_id
        self.cause = cause
