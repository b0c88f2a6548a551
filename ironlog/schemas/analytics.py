"""Analytics response schemas. Every field here is derived at read time."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ironlog.core.enums import BalanceStatus, EffortLevel, LoadLevel, RecoveryStatus, WorkoutSuggestion


class WeeklyVolumePoint(BaseModel):
    week_start: date  # Monday
    volume_kg: float = 0
    workout_count: int = 0
    working_sets: int = 0


class WeeklyStats(BaseModel):
    """This week vs last week (Monday start)."""

    week_start: date
    volume_kg: float = 0
    previous_volume_kg: float = 0
    volume_trend: int = 0
    workout_count: int = 0
    previous_workout_count: int = 0
    workout_count_trend: int = 0  # difference, not percent
    total_minutes: int = 0
    previous_total_minutes: int = 0
    time_trend: int = 0
    days_worked_out: list[bool] = Field(default_factory=lambda: [False] * 7)  # Mon..Sun


class TrainingStreaks(BaseModel):
    current_streak: int = 0
    longest_streak: int = 0
    worked_out_today: bool = False
    is_active: bool = False
    last_workout_date: date | None = None
    total_workouts: int = 0
    workouts_this_week: int = 0


class MuscleRecoveryRead(BaseModel):
    muscle: str
    recovery_percent: float
    status: RecoveryStatus
    last_trained_at: datetime | None = None
    hours_since: float | None = None
    last_session_volume_kg: float = 0


class RecoverySuggestionRead(BaseModel):
    type: WorkoutSuggestion
    message: str
    reason: str
    fresh_muscles: list[str] = Field(default_factory=list)


class MuscleRecoveryReport(BaseModel):
    muscles: list[MuscleRecoveryRead]
    overall_recovery: int
    suggestion: RecoverySuggestionRead


class MovementBalance(BaseModel):
    weeks: int
    push_volume_kg: float = 0
    pull_volume_kg: float = 0
    upper_volume_kg: float = 0
    lower_volume_kg: float = 0
    squat_volume_kg: float = 0
    hinge_volume_kg: float = 0
    push_pull_ratio: float | None = None  # >1 more push
    upper_lower_ratio: float | None = None  # >1 more upper
    push_pull_status: BalanceStatus
    upper_lower_status: BalanceStatus


class PersonalRecordRead(BaseModel):
    exercise_id: UUID
    exercise_name: str
    workout_id: UUID
    achieved_at: datetime
    weight_kg: float
    previous_best_kg: float | None = None
    is_new: bool


class GhostSet(BaseModel):
    """A working set from the previous session, shown as a target."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    set_number: int
    weight_kg: float
    reps: int
    rpe: float | None = None


class PreviousSession(BaseModel):
    exercise_id: UUID
    workout_id: UUID | None = None  # None when the exercise was never completed
    workout_started_at: datetime | None = None
    sets: list[GhostSet] = Field(default_factory=list)


class WeeklyLoad(BaseModel):
    week_start: date  # Monday
    volume_kg: float = 0
    working_sets: int = 0
    workout_count: int = 0


class TrainingLoad(BaseModel):
    """Volume-based load over the window.

    RPE-derived fields stay None unless enough working sets carry an RPE.
    """

    weeks: int
    total_sets: int = 0
    total_volume_kg: float = 0
    avg_intensity_percent: float = 0  # weight vs the exercise's heaviest set
    session_density: float = 0  # kg/min
    failure_sets: int = 0
    load_level: LoadLevel = LoadLevel.LIGHT
    load_percent: float = 0  # 0-100 gauge
    weekly_loads: list[WeeklyLoad] = Field(default_factory=list)
    current_week_sets: int = 0
    current_week_volume_kg: float = 0
    avg_weekly_sets: float = 0
    avg_weekly_volume_kg: float = 0
    sets_change_percent: float = 0
    volume_change_percent: float = 0
    intensity_change_percent: float = 0  # points above/below a typical 70%
    has_rpe_data: bool = False
    avg_rpe: float | None = None
    hard_sets: int | None = None
    fatigue_index: float | None = None


class WeeklyFatigue(BaseModel):
    week_start: date
    fatigue: float


class EffortAnalytics(BaseModel):
    weeks: int
    avg_rpe: float | None = None
    hard_set_count: int = 0
    total_sets: int = 0
    effort_density: float = 0  # kg/min
    fatigue_index: float = 0
    effort_level: EffortLevel = EffortLevel.UNKNOWN
    weekly_fatigue: list[WeeklyFatigue] = Field(default_factory=list)


class MuscleGroupVolume(BaseModel):
    muscle_group: str
    volume_kg: float = 0
    working_sets: int = 0
    percent_of_total: float = 0
