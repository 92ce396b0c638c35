"""Tests for input validation and sanitization."""

import pytest

from workout_tracker.exceptions import ValidationError
from workout_tracker.utils.validation import (
    ValidationReason,
    is_valid_weight_input,
    require_exercise_name,
    require_workout_name,
    sanitize_reps_input,
    sanitize_weight_input,
    validate_exercise_name,
    validate_reps,
    validate_rest_time,
    validate_template_name,
    validate_weight,
    validate_workout_name,
)


class TestNames:
    """Tests for exercise, workout and template names."""

    def test_exercise_name_length_bounds(self):
        assert not validate_exercise_name("A")
        assert validate_exercise_name("Ab")
        assert validate_exercise_name("x" * 50)
        assert not validate_exercise_name("x" * 51)

    def test_exercise_name_is_trimmed(self):
        assert not validate_exercise_name("  A  ")
        assert validate_exercise_name("  Ab  ")

    def test_exercise_name_reasons(self):
        assert validate_exercise_name("").reason == ValidationReason.EMPTY
        assert validate_exercise_name("A").reason == ValidationReason.TOO_SHORT
        assert validate_exercise_name("x" * 51).reason == ValidationReason.TOO_LONG

    def test_workout_name(self):
        assert validate_workout_name("A")
        assert not validate_workout_name("   ")
        assert not validate_workout_name("x" * 51)

    def test_template_name_follows_workout_rule(self):
        assert validate_template_name("A")
        assert not validate_template_name("")

    def test_require_returns_trimmed_name(self):
        assert require_exercise_name("  Squat ") == "Squat"
        assert require_workout_name(" Leg Day ") == "Leg Day"

    def test_require_raises_with_field_and_reason(self):
        with pytest.raises(ValidationError) as exc_info:
            require_exercise_name("A")
        assert exc_info.value.field == "name"
        assert exc_info.value.reason == "too_short"


class TestNumbers:
    """Tests for weight, reps and rest time ranges."""

    @pytest.mark.parametrize("weight", [0, 0.0, 82.5, 1000])
    def test_valid_weights(self, weight):
        assert validate_weight(weight)

    @pytest.mark.parametrize("weight", [-0.5, 1000.5, float("nan"), "10", True, None])
    def test_invalid_weights(self, weight):
        assert not validate_weight(weight)

    def test_reps_must_be_integers_in_range(self):
        assert validate_reps(0)
        assert validate_reps(1000)
        assert not validate_reps(1001)
        assert not validate_reps(-1)
        assert validate_reps(5.0).reason == ValidationReason.NOT_AN_INTEGER

    def test_rest_time(self):
        assert validate_rest_time(90)
        assert not validate_rest_time(3601)


class TestSanitization:
    """Tests for raw text input handling."""

    def test_reps_input_keeps_digits_only(self):
        assert sanitize_reps_input("1a2-b") == "12"
        assert sanitize_reps_input("") == ""

    def test_weight_input_keeps_first_separator(self):
        assert sanitize_weight_input("82,5") == "82.5"
        assert sanitize_weight_input("8.2.5") == "8.25"
        assert sanitize_weight_input("1,2.3kg") == "1.23"

    def test_weight_input_validity(self):
        assert is_valid_weight_input("")
        assert is_valid_weight_input("82.5")
        assert is_valid_weight_input("82,5")
        assert not is_valid_weight_input("8.2.5")
        assert not is_valid_weight_input("8,2.5")
        assert not is_valid_weight_input("8a")
