"""Export pipeline (canonical JSON, simplified JSON, CSV) and canonical import.

Exports read canonical documents through the reconciler and never mutate the
source. Derived values are labelled: ``_calc`` suffix in the simplified JSON,
``[calc]`` in CSV headers.
"""

from __future__ import annotations

import csv
import io
import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.core.constants import APP_NAME, EXPORT_VERSION
from ironlog.core.enums import MovementType
from ironlog.core.exceptions import CanonicalValidationError, ExportError
from ironlog.db.base import ensure_utc, utcnow
from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.snapshot import WorkoutSnapshot
from ironlog.models.template import WorkoutTemplate
from ironlog.models.workout import Workout, WorkoutExercise, WorkoutSet
from ironlog.schemas.canonical import (
    CanonicalExercise,
    CanonicalExport,
    CanonicalSet,
    CanonicalWorkout,
    ImportRecordError,
    ImportResult,
)
from ironlog.services import analytics
from ironlog.services.migration import migrate_workout
from ironlog.services.reconciler import SnapshotReconciler

logger = structlog.get_logger(__name__)

CSV_COLUMNS = [
    "Workout Date",
    "Workout Name",
    "Duration",
    "Duration (sec)",
    "Exercise",
    "Muscle Group",
    "Equipment",
    "Set Number",
    "Weight (kg)",
    "Reps",
    "RPE",
    "Is Warmup",
    "Volume (kg) [calc]",
    "Est 1RM (kg) [calc]",
]


def format_number(value: float | int | None) -> str:
    """Empty for null (never "0"); integral values without a decimal part."""
    if value is None:
        return ""
    rounded = round(float(value), 2)
    if rounded.is_integer():
        return str(int(rounded))
    return str(rounded)


def _live_exercises(workout: CanonicalWorkout) -> list[CanonicalExercise]:
    return sorted((e for e in workout.exercises if not e.is_deleted), key=lambda e: e.order)


def _live_sets(exercise: CanonicalExercise) -> list[CanonicalSet]:
    return sorted((s for s in exercise.sets if not s.is_deleted), key=lambda s: s.set_number)


def _duration(workout: CanonicalWorkout) -> int | None:
    return analytics.calculate_duration_seconds(
        ensure_utc(workout.metadata.started_at), ensure_utc(workout.metadata.completed_at)
    )


# ── Collection ──────────────────────────────────────────────────────────────


async def collect_canonical_workouts(db: AsyncSession) -> list[CanonicalWorkout]:
    """Completed, non-deleted workouts as canonical documents, oldest first.

    A record whose snapshot fails validation is logged and left out.
    """
    try:
        result = await db.execute(
            select(Workout.id)
            .where(Workout.live(), Workout.completed_at.is_not(None))
            .order_by(Workout.started_at)
        )
        reconciler = SnapshotReconciler(db)
        documents = []
        for workout_id in result.scalars().all():
            try:
                doc = await reconciler.get_canonical_workout(workout_id)
            except CanonicalValidationError as e:
                logger.warning("export_record_skipped", workout_id=str(workout_id), error=e.message, errors=e.errors)
                continue
            if doc is not None:
                documents.append(doc)
        return documents
    except SQLAlchemyError as e:
        raise ExportError("Could not read workouts for export") from e


async def export_canonical(db: AsyncSession) -> CanonicalExport:
    workouts = await collect_canonical_workouts(db)
    logger.info("canonical_export_built", workouts=len(workouts))
    return CanonicalExport(export_version=EXPORT_VERSION, exported_at=utcnow(), workouts=workouts)


# ── Simplified JSON ─────────────────────────────────────────────────────────


def simplify_workout(workout: CanonicalWorkout) -> dict[str, Any]:
    duration = _duration(workout)
    exercises = []
    total_volume = 0.0
    total_sets = 0
    for exercise in _live_exercises(workout):
        sets = _live_sets(exercise)
        volume = analytics.calculate_exercise_volume(sets)
        total_volume += volume
        total_sets += analytics.count_working_sets(sets)
        definition = exercise.exercise_definition
        exercises.append(
            {
                "name": definition.name,
                "muscle_group": definition.muscle_group,
                "equipment": definition.equipment,
                "sets": [
                    {
                        "set_number": s.set_number,
                        "weight_kg": s.weight_kg,
                        "reps": s.reps,
                        "rpe": s.rpe,
                        "is_warmup": s.is_warmup,
                        "volume_kg_calc": analytics.calculate_set_volume(s.weight_kg, s.reps) if analytics.has_load(s) else None,
                        "e1rm_kg_calc": None if s.is_warmup else analytics.calculate_1rm(s.weight_kg, s.reps),
                    }
                    for s in sets
                ],
                "volume_kg_calc": volume,
            }
        )
    return {
        "id": str(workout.workout_id),
        "name": workout.metadata.name,
        "date": workout.metadata.started_at.date().isoformat(),
        "duration_calc": analytics.format_duration(duration),
        "duration_seconds_calc": duration,
        "exercises": exercises,
        "total_volume_kg_calc": total_volume,
        "total_sets_calc": total_sets,
    }


async def export_simplified(db: AsyncSession) -> dict[str, Any]:
    workouts = await collect_canonical_workouts(db)
    return {
        "export_date": utcnow().isoformat(),
        "app_name": APP_NAME,
        "version": EXPORT_VERSION,
        "workout_count": len(workouts),
        "workouts": [simplify_workout(w) for w in workouts],
    }


# ── CSV ─────────────────────────────────────────────────────────────────────


def csv_rows(workout: CanonicalWorkout) -> list[list[str]]:
    """One row per live set, with workout/exercise context repeated on each."""
    duration = _duration(workout)
    context = [
        workout.metadata.started_at.date().isoformat(),
        workout.metadata.name or "",
        analytics.format_duration(duration),
        format_number(duration),
    ]
    rows = []
    for exercise in _live_exercises(workout):
        definition = exercise.exercise_definition
        for s in _live_sets(exercise):
            volume = analytics.calculate_set_volume(s.weight_kg, s.reps) if analytics.has_load(s) else None
            e1rm = None if s.is_warmup else analytics.calculate_1rm(s.weight_kg, s.reps)
            rows.append(
                context
                + [
                    definition.name,
                    definition.muscle_group or "",
                    definition.equipment or "",
                    str(s.set_number),
                    format_number(s.weight_kg),
                    format_number(s.reps),
                    format_number(s.rpe),
                    "Yes" if s.is_warmup else "No",
                    format_number(volume),
                    format_number(e1rm),
                ]
            )
    return rows


def render_csv(workouts: list[CanonicalWorkout]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for workout in workouts:
        writer.writerows(csv_rows(workout))
    return buffer.getvalue()


async def export_csv(db: AsyncSession) -> str:
    return render_csv(await collect_canonical_workouts(db))


# ── Import ──────────────────────────────────────────────────────────────────


def _records(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and isinstance(payload.get("workouts"), list):
        return payload["workouts"]
    raise CanonicalValidationError("Import file must contain a workouts array")


async def _ensure_definition(db: AsyncSession, exercise: CanonicalExercise) -> None:
    """Recreate a missing catalog row from the embedded definition (as custom)."""
    if await db.get(ExerciseDefinition, exercise.exercise_ref_id) is not None:
        return
    d = exercise.exercise_definition
    db.add(
        ExerciseDefinition(
            id=exercise.exercise_ref_id,
            name=d.name,
            category=d.category,
            movement_type=d.movement_type or MovementType.COMPOUND,
            movement_pattern=d.movement_pattern,
            primary_muscle_groups=list(d.primary_muscle_groups),
            secondary_muscle_groups=list(d.secondary_muscle_groups),
            equipment=d.equipment,
            is_custom=True,
        )
    )
    # Visible to db.get for later exercises in the same record
    await db.flush()
    logger.info("exercise_definition_restored_from_import", exercise_id=str(exercise.exercise_ref_id), name=d.name)


async def _write_workout(db: AsyncSession, doc: CanonicalWorkout) -> None:
    meta = doc.metadata
    if meta.template_id is not None and await db.get(WorkoutTemplate, meta.template_id) is None:
        meta.template_id = None
    db.add(
        Workout(
            id=doc.workout_id,
            name=meta.name,
            started_at=ensure_utc(meta.started_at),
            completed_at=ensure_utc(meta.completed_at),
            notes=meta.notes,
            template_id=meta.template_id,
            timezone=meta.timezone,
            bodyweight_kg=meta.bodyweight_kg,
            created_at=ensure_utc(doc.created_at),
            updated_at=ensure_utc(doc.updated_at),
        )
    )
    deleted_at = ensure_utc(doc.updated_at)
    for exercise in doc.exercises:
        await _ensure_definition(db, exercise)
        we_id = exercise.workout_exercise_id or uuid.uuid4()
        db.add(
            WorkoutExercise(
                id=we_id,
                workout_id=doc.workout_id,
                exercise_id=exercise.exercise_ref_id,
                order=exercise.order,
                superset_id=exercise.superset_id,
                notes=exercise.notes,
                is_deleted=exercise.is_deleted,
                deleted_at=deleted_at if exercise.is_deleted else None,
            )
        )
        for s in exercise.sets:
            db.add(
                WorkoutSet(
                    id=s.set_id,
                    workout_exercise_id=we_id,
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
                    deleted_at=deleted_at if s.is_deleted else None,
                    completed_at=ensure_utc(s.completed_at),
                )
            )
    # The imported document itself is the first snapshot
    db.add(
        WorkoutSnapshot(
            workout_id=doc.workout_id,
            schema_version=doc.schema_version,
            json_data=doc.model_dump_json(),
            created_at=utcnow(),
        )
    )
    await db.flush()


async def import_canonical_workouts(db: AsyncSession, payload: Any) -> ImportResult:
    """Migrate, validate and store each record independently.

    Invalid records are reported and skipped; workouts whose id already exists
    are skipped untouched.
    """
    report = ImportResult()
    for index, raw in enumerate(_records(payload)):
        raw_id = raw.get("workout_id") if isinstance(raw, dict) else None
        try:
            doc = migrate_workout(raw)
        except CanonicalValidationError as e:
            report.errors.append(
                ImportRecordError(index=index, workout_id=str(raw_id) if raw_id else None, error=e.message, details=e.errors)
            )
            continue
        if await db.get(Workout, doc.workout_id) is not None:
            report.skipped += 1
            continue
        try:
            async with db.begin_nested():
                await _write_workout(db, doc)
        except SQLAlchemyError as e:
            logger.error("import_record_failed", index=index, workout_id=str(doc.workout_id), error=str(e))
            report.errors.append(
                ImportRecordError(index=index, workout_id=str(doc.workout_id), error="Could not store workout")
            )
            continue
        report.imported += 1
        report.imported_ids.append(doc.workout_id)
    logger.info("canonical_import_finished", imported=report.imported, skipped=report.skipped, errors=len(report.errors))
    return report
