"""Workout, WorkoutExercise and Set schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ironlog.schemas.exercise import ExerciseRef


class SetBase(BaseModel):
    set_number: int = Field(1, ge=1)
    weight_kg: float | None = Field(None, ge=0)
    reps: int | None = Field(None, ge=0)
    rpe: float | None = Field(None, ge=6, le=10)
    rir: int | None = Field(None, ge=0)
    rest_seconds: int | None = Field(None, ge=0)
    tempo: str | None = Field(None, max_length=20)
    is_warmup: bool = False
    is_failure: bool = False
    is_dropset: bool = False
    completed_at: datetime | None = None


class SetCreate(SetBase):
    pass


class SetInput(SetBase):
    """Set as logged during a live session; only completed ones are saved on finish."""

    completed: bool = True


class SetUpdate(BaseModel):
    set_number: int | None = Field(None, ge=1)
    weight_kg: float | None = Field(None, ge=0)
    reps: int | None = Field(None, ge=0)
    rpe: float | None = Field(None, ge=6, le=10)
    rir: int | None = Field(None, ge=0)
    rest_seconds: int | None = Field(None, ge=0)
    tempo: str | None = Field(None, max_length=20)
    is_warmup: bool | None = None
    is_failure: bool | None = None
    is_dropset: bool | None = None
    completed_at: datetime | None = None


class SetRead(BaseModel):
    """Stored set as-is (input bounds are not re-applied to imported rows)."""

    model_config = ConfigDict(from_attributes=True)
    id: UUID
    workout_exercise_id: UUID
    set_number: int
    weight_kg: float | None = None
    reps: int | None = None
    rpe: float | None = None
    rir: int | None = None
    rest_seconds: int | None = None
    tempo: str | None = None
    is_warmup: bool = False
    is_failure: bool = False
    is_dropset: bool = False
    completed_at: datetime | None = None


class WorkoutExerciseInput(BaseModel):
    exercise_id: UUID
    order: int | None = None
    superset_id: str | None = Field(None, max_length=64)
    notes: str | None = None
    sets: list[SetInput] = Field(default_factory=list)


class WorkoutExerciseRead(BaseModel):
    id: UUID
    exercise_id: UUID
    exercise: ExerciseRef
    order: int
    superset_id: str | None = None
    notes: str | None = None
    volume_kg: float = 0
    sets: list[SetRead] = Field(default_factory=list)


class WorkoutStart(BaseModel):
    name: str | None = Field(None, max_length=255)
    started_at: datetime | None = None
    template_id: UUID | None = None
    timezone: str | None = Field(None, max_length=64)
    bodyweight_kg: float | None = Field(None, gt=0)
    notes: str | None = None


class WorkoutFinish(BaseModel):
    """Batch of exercises/sets completed during the session."""

    completed_at: datetime | None = None
    notes: str | None = None
    exercises: list[WorkoutExerciseInput] = Field(default_factory=list)


class WorkoutUpdate(BaseModel):
    name: str | None = Field(None, max_length=255)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    timezone: str | None = Field(None, max_length=64)
    bodyweight_kg: float | None = Field(None, gt=0)
    notes: str | None = None


class WorkoutRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    template_id: UUID | None = None
    timezone: str | None = None
    bodyweight_kg: float | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class WorkoutSummary(WorkoutRead):
    """Workout with counts and volume computed at query time."""

    duration_seconds: int | None = None
    exercise_count: int = 0
    set_count: int = 0
    working_set_count: int = 0
    total_volume_kg: float = 0


class WorkoutDetail(WorkoutSummary):
    exercises: list[WorkoutExerciseRead] = Field(default_factory=list)
