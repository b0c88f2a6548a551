"""Snapshot reconciler: normalized rows <-> canonical workout documents.

The normalized tables are the mutable projection; ``workout_snapshots`` is an
append-only log of canonical serializations. Readers take the newest snapshot
and only rebuild from rows when a workout predates snapshotting.
"""

from __future__ import annotations

import json
import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ironlog.core.constants import SCHEMA_VERSION
from ironlog.core.exceptions import CanonicalValidationError, NotFoundError
from ironlog.db.base import ensure_utc, utcnow
from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.snapshot import WorkoutSnapshot
from ironlog.models.workout import Workout, WorkoutExercise, WorkoutSet
from ironlog.schemas.canonical import (
    CanonicalExercise,
    CanonicalExerciseDefinition,
    CanonicalMetadata,
    CanonicalSet,
    CanonicalWorkout,
)
from ironlog.services.migration import migrate_workout

logger = structlog.get_logger(__name__)


def canonical_definition(exercise: ExerciseDefinition) -> CanonicalExerciseDefinition:
    return CanonicalExerciseDefinition(
        id=exercise.id,
        name=exercise.name,
        category=exercise.category,
        movement_type=exercise.movement_type,
        movement_pattern=exercise.movement_pattern,
        primary_muscle_groups=list(exercise.primary_muscle_groups or []),
        secondary_muscle_groups=list(exercise.secondary_muscle_groups or []),
        equipment=exercise.equipment,
        is_custom=exercise.is_custom,
    )


def canonical_set(s: WorkoutSet) -> CanonicalSet:
    return CanonicalSet(
        set_id=s.id,
        set_number=s.set_number,
        weight_kg=s.weight_kg,
        reps=s.reps,
        rpe=s.rpe,
        rir=s.rir,
        rest_seconds=s.rest_seconds,
        tempo=s.tempo,
        is_warmup=s.is_warmup,
        is_failure=s.is_failure,
        is_dropset=s.is_dropset,
        is_deleted=s.is_deleted,
        completed_at=ensure_utc(s.completed_at),
    )


def live_exercises_query(workout_ids: list[uuid.UUID]):
    """Non-deleted workout exercises with their non-deleted sets and catalog entry."""
    return (
        select(WorkoutExercise)
        .where(WorkoutExercise.workout_id.in_(workout_ids), WorkoutExercise.live())
        .options(
            selectinload(WorkoutExercise.sets.and_(WorkoutSet.live())),
            selectinload(WorkoutExercise.exercise),
        )
        .order_by(WorkoutExercise.workout_id, WorkoutExercise.order)
        .execution_options(populate_existing=True)
    )


class SnapshotReconciler:
    """Builds, stores and retrieves canonical documents for workouts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load_workout(self, workout_id: uuid.UUID) -> Workout | None:
        result = await self.db.execute(
            select(Workout).where(Workout.id == workout_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def _to_canonical(self, workout: Workout, exercises: list[WorkoutExercise]) -> CanonicalWorkout:
        canonical_exercises: list[CanonicalExercise] = []
        for we in exercises:
            definition = we.exercise
            if definition is None or definition.is_deleted:
                logger.warning(
                    "exercise_definition_missing",
                    workout_id=str(workout.id),
                    workout_exercise_id=str(we.id),
                    exercise_id=str(we.exercise_id),
                )
                continue
            canonical_exercises.append(
                CanonicalExercise(
                    exercise_ref_id=definition.id,
                    workout_exercise_id=we.id,
                    order=we.order,
                    superset_id=we.superset_id,
                    notes=we.notes,
                    is_deleted=we.is_deleted,
                    exercise_definition=canonical_definition(definition),
                    sets=[canonical_set(s) for s in sorted(we.sets, key=lambda s: s.set_number)],
                )
            )
        return CanonicalWorkout(
            schema_version=SCHEMA_VERSION,
            workout_id=workout.id,
            created_at=ensure_utc(workout.created_at),
            updated_at=ensure_utc(workout.updated_at),
            metadata=CanonicalMetadata(
                name=workout.name,
                started_at=ensure_utc(workout.started_at),
                completed_at=ensure_utc(workout.completed_at),
                notes=workout.notes,
                template_id=workout.template_id,
                timezone=workout.timezone,
                bodyweight_kg=workout.bodyweight_kg,
            ),
            exercises=canonical_exercises,
        )

    async def build_canonical_workout(self, workout_id: uuid.UUID) -> CanonicalWorkout:
        """Serialize the workout's live rows, embedding current exercise definitions."""
        workout = await self._load_workout(workout_id)
        if workout is None:
            raise NotFoundError("Workout not found", workout_id=str(workout_id))
        result = await self.db.execute(live_exercises_query([workout_id]))
        return self._to_canonical(workout, list(result.scalars().all()))

    async def record_snapshot(self, workout_id: uuid.UUID) -> WorkoutSnapshot:
        """Append a fresh snapshot of the workout's current rows."""
        canonical = await self.build_canonical_workout(workout_id)
        snapshot = WorkoutSnapshot(
            workout_id=workout_id,
            schema_version=canonical.schema_version,
            json_data=canonical.model_dump_json(),
            created_at=utcnow(),
        )
        self.db.add(snapshot)
        await self.db.flush()
        logger.info("workout_snapshot_recorded", workout_id=str(workout_id), snapshot_id=snapshot.id)
        return snapshot

    async def latest_snapshot(self, workout_id: uuid.UUID) -> WorkoutSnapshot | None:
        result = await self.db.execute(
            select(WorkoutSnapshot)
            .where(WorkoutSnapshot.workout_id == workout_id)
            .order_by(WorkoutSnapshot.created_at.desc(), WorkoutSnapshot.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_canonical_workout(self, workout_id: uuid.UUID) -> CanonicalWorkout | None:
        """Newest snapshot (migrated), or a rebuild when none exists.

        None when the workout is absent or soft-deleted.
        """
        workout = await self._load_workout(workout_id)
        if workout is None or workout.is_deleted:
            return None
        snapshot = await self.latest_snapshot(workout_id)
        if snapshot is None:
            logger.debug("workout_snapshot_absent_rebuilding", workout_id=str(workout_id))
            return await self.build_canonical_workout(workout_id)
        return migrate_workout(decode_snapshot(snapshot))


def decode_snapshot(snapshot: WorkoutSnapshot) -> dict:
    try:
        raw = json.loads(snapshot.json_data)
    except json.JSONDecodeError as e:
        raise CanonicalValidationError(
            "Stored snapshot is not valid JSON",
            workout_id=str(snapshot.workout_id),
            snapshot_id=snapshot.id,
        ) from e
    if isinstance(raw, dict) and "schema_version" not in raw:
        raw["schema_version"] = snapshot.schema_version
    return raw
