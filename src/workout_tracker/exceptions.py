"""
Custom exceptions for the workout tracker core.

This module defines the error taxonomy used by the repositories and engines.
Each exception includes:
- A descriptive message
- An error code callers can branch on
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error reporting."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Entity lookups
    EXERCISE_NOT_FOUND = "EXERCISE_NOT_FOUND"
    WORKOUT_NOT_FOUND = "WORKOUT_NOT_FOUND"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"

    # Integrity errors
    REFERENTIAL_ERROR = "REFERENTIAL_ERROR"
    MALFORMED_DATA = "MALFORMED_DATA"

    # Storage errors
    STORAGE_ERROR = "STORAGE_ERROR"

    # Session errors
    SESSION_STATE_ERROR = "SESSION_STATE_ERROR"


class WorkoutTrackerError(Exception):
    """
    Base exception for all workout tracker errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(WorkoutTrackerError):
    """Raised when user input fails validation, before anything is written."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        if reason:
            error_details["reason"] = reason
        self.field = field
        self.reason = reason
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            details=error_details,
        )


# ============================================================================
# Not Found Errors
# ============================================================================

class NotFoundError(WorkoutTrackerError):
    """Raised when a requested entity is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with ID '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            details=error_details,
        )


class ExerciseNotFoundError(NotFoundError):
    """Raised when an exercise is not found."""

    def __init__(self, exercise_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(resource_type="Exercise", resource_id=exercise_id, details=details)
        self.code = ErrorCode.EXERCISE_NOT_FOUND


class WorkoutNotFoundError(NotFoundError):
    """Raised when a workout is not found."""

    def __init__(self, workout_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(resource_type="Workout", resource_id=workout_id, details=details)
        self.code = ErrorCode.WORKOUT_NOT_FOUND


class TemplateNotFoundError(NotFoundError):
    """Raised when a workout template is not found."""

    def __init__(self, template_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(resource_type="Workout Template", resource_id=template_id, details=details)
        self.code = ErrorCode.TEMPLATE_NOT_FOUND


# ============================================================================
# Integrity Errors
# ============================================================================

class ReferentialError(WorkoutTrackerError):
    """Raised when a delete would leave dangling references behind."""

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        reference_count: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if resource_id:
            error_details["resource_id"] = resource_id
        error_details["reference_count"] = reference_count
        super().__init__(
            message=message,
            code=ErrorCode.REFERENTIAL_ERROR,
            details=error_details,
        )


class MalformedDataError(WorkoutTrackerError):
    """Raised when stored template set configuration cannot be read.

    Template materialization recovers from this locally with defaults; it is
    only raised out of the strict decoding helpers.
    """

    def __init__(
        self,
        message: str,
        raw_value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if raw_value:
            error_details["raw_value_preview"] = raw_value[:200]
        super().__init__(
            message=message,
            code=ErrorCode.MALFORMED_DATA,
            details=error_details,
        )


# ============================================================================
# Storage Errors
# ============================================================================

class StorageError(WorkoutTrackerError):
    """Raised when the underlying persistence layer fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        super().__init__(
            message=message,
            code=ErrorCode.STORAGE_ERROR,
            details=error_details,
        )


# ============================================================================
# Session Errors
# ============================================================================

class SessionStateError(WorkoutTrackerError):
    """Raised on an illegal workout session transition."""

    def __init__(
        self,
        current_state: str,
        action: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        error_details["current_state"] = current_state
        error_details["action"] = action
        super().__init__(
            message=f"Cannot {action} a workout session that is {current_state}",
            code=ErrorCode.SESSION_STATE_ERROR,
            details=error_details,
        )
