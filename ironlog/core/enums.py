"""Shared enums for models and API."""

from enum import Enum


class ExerciseCategory(str, Enum):
    """Broad movement family of a catalog exercise."""

    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    CORE = "core"
    CARDIO = "cardio"
    OTHER = "other"


class MovementType(str, Enum):
    COMPOUND = "compound"  # Multi-joint
    ISOLATION = "isolation"  # Single-joint


class RecoveryStatus(str, Enum):
    """Recovery band for a muscle group."""

    READY = "ready"  # >= 70%
    RECOVERING = "recovering"  # 40-69%
    FATIGUED = "fatigued"  # < 40%


class WorkoutSuggestion(str, Enum):
    UPPER = "upper"
    LOWER = "lower"
    FULL = "full"
    REST = "rest"


class BalanceStatus(str, Enum):
    """Outcome of comparing two sides of a volume ratio."""

    BALANCED = "balanced"
    NUMERATOR_DOMINANT = "numerator_dominant"
    DENOMINATOR_DOMINANT = "denominator_dominant"
    INSUFFICIENT_DATA = "insufficient_data"


class LoadLevel(str, Enum):
    """Current week's volume against the average week in the window."""

    LIGHT = "light"  # < 0.8x average
    MODERATE = "moderate"
    HEAVY = "heavy"  # > 1.2x average


class EffortLevel(str, Enum):
    """Band for average working-set RPE."""

    UNKNOWN = "unknown"  # No RPE logged
    LIGHT = "light"  # < 7
    MODERATE = "moderate"  # 7-7.9
    HARD = "hard"  # 8-8.9
    MAX = "max"  # >= 9
