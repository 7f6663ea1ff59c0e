"""
Structured exceptions and error responses for the schedule builder.

Provides consistent error handling across the engine and the API with:
- Custom exception classes
- Structured error response format
- FastAPI exception handlers
"""

from typing import Any, Dict, Optional, List
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from schedule_builder.logging_config import get_logger

logger = get_logger("error")


# =============================================================================
# Error Response Schema
# =============================================================================

class ErrorDetail(BaseModel):
    """Detail of a single error."""
    loc: Optional[List[str]] = None  # Location of error (e.g., ["body", "duration"])
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error response format."""
    error: str  # Error code (e.g., "not_found", "cycle_detected")
    message: str
    details: Optional[List[ErrorDetail]] = None


# =============================================================================
# Custom Exceptions
# =============================================================================

class ScheduleBuilderException(Exception):
    """Base exception for all schedule builder errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class NotFoundError(ScheduleBuilderException):
    """Resource not found."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            message=f"{resource} with ID {resource_id} not found",
            error_code="not_found",
            status_code=status.HTTP_404_NOT_FOUND,
        )
        self.resource = resource
        self.resource_id = resource_id


class CycleDetectedError(ScheduleBuilderException):
    """Setting this predecessor would create a cycle."""

    def __init__(self, predecessor_id: str, successor_id: str):
        super().__init__(
            message="Setting this predecessor would create a cycle in the schedule",
            error_code="cycle_detected",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=[{
                "loc": ["body", "predecessor_id"],
                "msg": f"Dependency {predecessor_id} -> {successor_id} would create a cycle",
                "type": "cycle_error",
            }],
        )
        self.predecessor_id = predecessor_id
        self.successor_id = successor_id


class SelfDependencyError(ScheduleBuilderException):
    """Item cannot depend on itself."""

    def __init__(self, item_id: str):
        super().__init__(
            message="A schedule item cannot depend on itself",
            error_code="self_dependency",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
        self.item_id = item_id


class CyclicDependencyError(ScheduleBuilderException):
    """A cycle was reached while cascading date changes."""

    def __init__(self, item_id: str):
        super().__init__(
            message=f"Schedule item {item_id} was reached twice while cascading dates",
            error_code="cyclic_dependency",
            status_code=status.HTTP_409_CONFLICT,
        )
        self.item_id = item_id


class ValidationError(ScheduleBuilderException):
    """Request validation error."""

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="validation_error",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class PersistenceError(ScheduleBuilderException):
    """The schedule store rejected a write."""

    def __init__(self, project_id: str, message: str):
        super().__init__(
            message=f"Could not save schedule for project {project_id}: {message}",
            error_code="persistence_error",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
        self.project_id = project_id


# =============================================================================
# Exception Handlers
# =============================================================================

async def schedule_exception_handler(request: Request, exc: ScheduleBuilderException) -> JSONResponse:
    """Handle ScheduleBuilderException and return structured response."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.error_code,
            "message": exc.message,
            "details": exc.details,
        },
    )


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ScheduleBuilderException, schedule_exception_handler)
