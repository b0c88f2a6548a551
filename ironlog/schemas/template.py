"""Workout template schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ironlog.schemas.exercise import ExerciseRef
from ironlog.schemas.workout import WorkoutRead


class SetTarget(BaseModel):
    """Prescription for one set: reps may be a range such as "8-10"."""

    reps: str | None = Field(None, max_length=20)
    weight_kg: float | None = Field(None, ge=0)


class TemplateExerciseInput(BaseModel):
    exercise_id: UUID
    order: int | None = None
    target_sets: int | None = Field(None, ge=1)
    target_reps: str | None = Field(None, max_length=20)
    target_weight_kg: float | None = Field(None, ge=0)
    rest_seconds: int | None = Field(None, ge=0)
    notes: str | None = None
    set_targets: list[SetTarget] | None = None


class TemplateExerciseRead(BaseModel):
    id: UUID
    exercise_id: UUID
    exercise: ExerciseRef
    order: int
    target_sets: int | None = None
    target_reps: str | None = None
    target_weight_kg: float | None = None
    rest_seconds: int | None = None
    notes: str | None = None
    set_targets: list[SetTarget] = Field(default_factory=list)


class WorkoutTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    notes: str | None = None
    exercises: list[TemplateExerciseInput] = Field(default_factory=list)


class WorkoutTemplateUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    notes: str | None = None


class WorkoutTemplateCreateFromWorkout(BaseModel):
    """Create a template from a completed workout (workout_id + name)."""

    name: str = Field(..., min_length=1, max_length=255)
    workout_id: UUID


class WorkoutTemplateRead(BaseModel):
    id: UUID
    name: str
    notes: str | None = None
    created_at: datetime
    last_used_at: datetime | None = None
    exercises: list[TemplateExerciseRead] = Field(default_factory=list)


class TemplateInstantiated(BaseModel):
    workout: WorkoutRead
    template: WorkoutTemplateRead
