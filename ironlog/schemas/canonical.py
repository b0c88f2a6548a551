"""Canonical workout document: the versioned, full-fidelity wire format.

Field names are the on-disk/export names. Unknown keys are kept (``extra="allow"``)
so a document written by a newer release survives a read/export round trip.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ironlog.core.constants import EXPORT_VERSION, SCHEMA_VERSION
from ironlog.core.enums import ExerciseCategory, MovementType


class CanonicalModel(BaseModel):
    model_config = ConfigDict(extra="allow", from_attributes=True)


class CanonicalSet(CanonicalModel):
    set_id: uuid.UUID
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
    is_deleted: bool = False
    completed_at: datetime | None = None


class CanonicalExerciseDefinition(CanonicalModel):
    """Point-in-time copy of the catalog entry."""

    id: uuid.UUID
    name: str
    category: ExerciseCategory = ExerciseCategory.OTHER
    movement_type: MovementType | None = None
    movement_pattern: str | None = None
    primary_muscle_groups: list[str] = Field(default_factory=list)
    secondary_muscle_groups: list[str] = Field(default_factory=list)
    equipment: str | None = None
    is_custom: bool = False

    @property
    def muscle_group(self) -> str | None:
        return self.primary_muscle_groups[0] if self.primary_muscle_groups else None


class CanonicalExercise(CanonicalModel):
    exercise_ref_id: uuid.UUID
    workout_exercise_id: uuid.UUID | None = None
    order: int = 0
    superset_id: str | None = None
    notes: str | None = None
    is_deleted: bool = False
    exercise_definition: CanonicalExerciseDefinition
    sets: list[CanonicalSet] = Field(default_factory=list)


class CanonicalMetadata(CanonicalModel):
    name: str | None = None
    started_at: datetime
    completed_at: datetime | None = None
    notes: str | None = None
    template_id: uuid.UUID | None = None
    timezone: str | None = None
    bodyweight_kg: float | None = None


class CanonicalWorkout(CanonicalModel):
    schema_version: str = SCHEMA_VERSION
    workout_id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    metadata: CanonicalMetadata
    exercises: list[CanonicalExercise] = Field(default_factory=list)


class CanonicalExport(BaseModel):
    """Top-level canonical export file."""

    export_version: str = EXPORT_VERSION
    exported_at: datetime
    workouts: list[CanonicalWorkout]


class ImportRecordError(BaseModel):
    index: int
    workout_id: str | None = None
    error: str
    details: list[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    """Per-record outcome of a canonical import; bad records never abort the batch."""

    imported: int = 0
    skipped: int = 0
    imported_ids: list[uuid.UUID] = Field(default_factory=list)
    errors: list[ImportRecordError] = Field(default_factory=list)
