"""Input validation and sanitization.

Validators return a ``ValidationResult``; the ``require_*`` helpers raise
``ValidationError`` so repositories can refuse a write before touching
storage.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import ValidationError

EXERCISE_NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
MAX_WEIGHT = 1000
MAX_REPS = 1000
MAX_REST_TIME = 3600
DIGITS = "0123456789"


class ValidationReason(str, Enum):
    """Reason codes for failed validation."""
    EMPTY = "empty"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    OUT_OF_RANGE = "out_of_range"
    NOT_A_NUMBER = "not_a_number"
    NOT_AN_INTEGER = "not_an_integer"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field."""
    is_valid: bool
    field: str
    reason: Optional[ValidationReason] = None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def ok(cls, field: str) -> "ValidationResult":
        return cls(True, field)

    @classmethod
    def fail(cls, field: str, reason: ValidationReason) -> "ValidationResult":
        return cls(False, field, reason)


def validate_exercise_name(name: str) -> ValidationResult:
    trimmed = (name or "").strip()
    if not trimmed:
        return ValidationResult.fail("name", ValidationReason.EMPTY)
    if len(trimmed) < EXERCISE_NAME_MIN_LENGTH:
        return ValidationResult.fail("name", ValidationReason.TOO_SHORT)
    if len(trimmed) > NAME_MAX_LENGTH:
        return ValidationResult.fail("name", ValidationReason.TOO_LONG)
    return ValidationResult.ok("name")


def validate_workout_name(name: str, field: str = "name") -> ValidationResult:
    trimmed = (name or "").strip()
    if not trimmed:
        return ValidationResult.fail(field, ValidationReason.EMPTY)
    if len(trimmed) > NAME_MAX_LENGTH:
        return ValidationResult.fail(field, ValidationReason.TOO_LONG)
    return ValidationResult.ok(field)


def validate_template_name(name: str) -> ValidationResult:
    # Templates share the workout naming rule
    return validate_workout_name(name)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_weight(weight: Any) -> ValidationResult:
    if not _is_number(weight) or weight != weight:
        return ValidationResult.fail("weight", ValidationReason.NOT_A_NUMBER)
    if weight < 0 or weight > MAX_WEIGHT:
        return ValidationResult.fail("weight", ValidationReason.OUT_OF_RANGE)
    return ValidationResult.ok("weight")


def validate_reps(reps: Any) -> ValidationResult:
    if not isinstance(reps, int) or isinstance(reps, bool):
        return ValidationResult.fail("reps", ValidationReason.NOT_AN_INTEGER)
    if reps < 0 or reps > MAX_REPS:
        return ValidationResult.fail("reps", ValidationReason.OUT_OF_RANGE)
    return ValidationResult.ok("reps")


def validate_rest_time(rest_time: Any) -> ValidationResult:
    if not isinstance(rest_time, int) or isinstance(rest_time, bool):
        return ValidationResult.fail("rest_time", ValidationReason.NOT_AN_INTEGER)
    if rest_time < 0 or rest_time > MAX_REST_TIME:
        return ValidationResult.fail("rest_time", ValidationReason.OUT_OF_RANGE)
    return ValidationResult.ok("rest_time")


def require(result: ValidationResult, value: Any = None) -> None:
    """Raise ValidationError if ``result`` is a failure."""
    if result.is_valid:
        return
    details = {"value": value} if value is not None else None
    raise ValidationError(
        f"Invalid {result.field}: {result.reason.value}",
        field=result.field,
        reason=result.reason.value,
        details=details,
    )


def require_exercise_name(name: str) -> str:
    """Validate an exercise name and return it trimmed."""
    require(validate_exercise_name(name), name)
    return name.strip()


def require_workout_name(name: str) -> str:
    """Validate a workout name and return it trimmed."""
    require(validate_workout_name(name), name)
    return name.strip()


def require_template_name(name: str) -> str:
    """Validate a template name and return it trimmed."""
    require(validate_template_name(name), name)
    return name.strip()


# =============================================================================
# Raw text input
# =============================================================================

def sanitize_reps_input(text: str) -> str:
    """Keep only the digits of a reps input."""
    return "".join(ch for ch in (text or "") if ch in DIGITS)


def sanitize_weight_input(text: str) -> str:
    """Keep digits and the first decimal separator, normalized to ".".

    Both "." and "," are accepted as the separator; any separator after the
    first is dropped.
    """
    result = []
    found_separator = False
    for ch in text or "":
        if ch in DIGITS:
            result.append(ch)
        elif ch in ".,":
            if not found_separator:
                found_separator = True
                result.append(".")
    return "".join(result)


def is_valid_weight_input(text: str) -> bool:
    """Whether ``text`` is digits with at most one "." or "," separator.

    Empty text is accepted so a field can be cleared.
    """
    if not text:
        return True
    parts = text.replace(",", ".").split(".")
    if len(parts) > 2:
        return False
    return all(ch in DIGITS for part in parts for ch in part)
