"""Enumerations shared across the workout data model."""

from enum import Enum


class WeightUnit(str, Enum):
    """Weight units. Storage is always kilograms."""
    KILOGRAMS = "kg"
    POUNDS = "lb"


class ExerciseCategory(str, Enum):
    """Exercise categories."""
    CHEST = "Chest"
    BACK = "Back"
    SHOULDERS = "Shoulders"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    LEGS = "Legs"
    CORE = "Core"
    CARDIO = "Cardio"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: "str | ExerciseCategory") -> "ExerciseCategory":
        """Parse a category name case-insensitively, falling back to OTHER."""
        if isinstance(value, ExerciseCategory):
            return value
        for category in cls:
            if category.value.lower() == str(value).strip().lower():
                return category
        return cls.OTHER


class MuscleGroup(str, Enum):
    """Muscle groups, each tagged with exactly one category."""

    # Chest
    PECTORAL_MAJOR = "Pectoral Major"
    PECTORAL_MINOR = "Pectoral Minor"

    # Back
    LATISSIMUS_DORSI = "Latissimus Dorsi"
    TRAPEZIUS = "Trapezius"
    RHOMBOIDS = "Rhomboids"
    ERECTOR_SPINAE = "Erector Spinae"

    # Shoulders
    ANTERIOR_DELTOID = "Anterior Deltoid"
    MEDIAL_DELTOID = "Medial Deltoid"
    POSTERIOR_DELTOID = "Posterior Deltoid"

    # Arms
    BICEPS_BRACHII = "Biceps Brachii"
    TRICEPS_BRACHII = "Triceps Brachii"
    FOREARMS = "Forearms"

    # Legs
    QUADRICEPS = "Quadriceps"
    HAMSTRINGS = "Hamstrings"
    GLUTES = "Glutes"
    CALVES = "Calves"
    HIP_FLEXORS = "Hip Flexors"
    ADDUCTORS = "Adductors"
    ABDUCTORS = "Abductors"

    # Core
    RECTUS_ABDOMINIS = "Rectus Abdominis"
    OBLIQUES = "Obliques"
    TRANSVERSE_ABDOMINIS = "Transverse Abdominis"

    @property
    def category(self) -> ExerciseCategory:
        return _MUSCLE_GROUP_CATEGORIES[self]

    @classmethod
    def for_category(cls, category: ExerciseCategory) -> list["MuscleGroup"]:
        """All muscle groups tagged with the given category, in declaration order."""
        return [group for group in cls if group.category == category]


_MUSCLE_GROUP_CATEGORIES = {
    MuscleGroup.PECTORAL_MAJOR: ExerciseCategory.CHEST,
    MuscleGroup.PECTORAL_MINOR: ExerciseCategory.CHEST,
    MuscleGroup.LATISSIMUS_DORSI: ExerciseCategory.BACK,
    MuscleGroup.TRAPEZIUS: ExerciseCategory.BACK,
    MuscleGroup.RHOMBOIDS: ExerciseCategory.BACK,
    MuscleGroup.ERECTOR_SPINAE: ExerciseCategory.BACK,
    MuscleGroup.ANTERIOR_DELTOID: ExerciseCategory.SHOULDERS,
    MuscleGroup.MEDIAL_DELTOID: ExerciseCategory.SHOULDERS,
    MuscleGroup.POSTERIOR_DELTOID: ExerciseCategory.SHOULDERS,
    MuscleGroup.BICEPS_BRACHII: ExerciseCategory.BICEPS,
    MuscleGroup.TRICEPS_BRACHII: ExerciseCategory.TRICEPS,
    MuscleGroup.FOREARMS: ExerciseCategory.OTHER,
    MuscleGroup.QUADRICEPS: ExerciseCategory.LEGS,
    MuscleGroup.HAMSTRINGS: ExerciseCategory.LEGS,
    MuscleGroup.GLUTES: ExerciseCategory.LEGS,
    MuscleGroup.CALVES: ExerciseCategory.LEGS,
    MuscleGroup.HIP_FLEXORS: ExerciseCategory.LEGS,
    MuscleGroup.ADDUCTORS: ExerciseCategory.LEGS,
    MuscleGroup.ABDUCTORS: ExerciseCategory.LEGS,
    MuscleGroup.RECTUS_ABDOMINIS: ExerciseCategory.CORE,
    MuscleGroup.OBLIQUES: ExerciseCategory.CORE,
    MuscleGroup.TRANSVERSE_ABDOMINIS: ExerciseCategory.CORE,
}
