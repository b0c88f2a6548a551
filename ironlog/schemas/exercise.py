"""Exercise catalog schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ironlog.core.enums import ExerciseCategory, MovementType


class ExerciseRef(BaseModel):
    """Minimal exercise info for embedding in workout/template responses."""

    id: UUID
    name: str
    muscle_group: str | None = None
    equipment: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ExerciseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: ExerciseCategory = ExerciseCategory.OTHER
    movement_type: MovementType = MovementType.COMPOUND
    movement_pattern: str | None = Field(None, max_length=50)
    primary_muscle_groups: list[str] = Field(default_factory=list)
    secondary_muscle_groups: list[str] = Field(default_factory=list)
    equipment: str | None = Field(None, max_length=50)
    notes: str | None = None


class ExerciseCreate(ExerciseBase):
    pass


class ExerciseRead(ExerciseBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    slug: str | None = None
    is_custom: bool
    muscle_group: str | None = None
    created_at: datetime


class CatalogResyncResult(BaseModel):
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0


class ExerciseStats(BaseModel):
    """All-time derived stats for one exercise (working sets only)."""

    exercise_id: UUID
    name: str
    muscle_group: str | None = None
    max_weight_kg: float | None = None
    max_reps: int | None = None
    best_e1rm_kg: float | None = None
    total_volume_kg: float = 0
    working_sets: int = 0
    session_count: int = 0
    last_performed: datetime | None = None


class ExerciseProgressPoint(BaseModel):
    workout_id: UUID
    performed_at: datetime
    max_weight_kg: float | None = None
    best_e1rm_kg: float | None = None
    volume_kg: float = 0
    working_sets: int = 0
