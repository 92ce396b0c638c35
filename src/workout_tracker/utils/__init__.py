"""Utility functions for unit conversion and input validation."""

from .units import (
    KG_TO_LB,
    convert,
    format_for_input,
    format_weight,
    from_storage,
    parse_weight,
    to_storage,
)
from .validation import (
    ValidationReason,
    ValidationResult,
    is_valid_weight_input,
    sanitize_reps_input,
    sanitize_weight_input,
    validate_exercise_name,
    validate_reps,
    validate_rest_time,
    validate_template_name,
    validate_weight,
    validate_workout_name,
)

__all__ = [
    "KG_TO_LB",
    "convert",
    "format_for_input",
    "format_weight",
    "from_storage",
    "parse_weight",
    "to_storage",
    "ValidationReason",
    "ValidationResult",
    "is_valid_weight_input",
    "sanitize_reps_input",
    "sanitize_weight_input",
    "validate_exercise_name",
    "validate_reps",
    "validate_rest_time",
    "validate_template_name",
    "validate_weight",
    "validate_workout_name",
]
