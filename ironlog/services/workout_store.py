"""Workout lifecycle writes: start, finish (batch save), edits and soft deletes.

Every write that touches a completed workout appends a fresh canonical
snapshot inside the same transaction, so the normalized rows and the newest
snapshot never disagree after a commit.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.core.exceptions import ConflictError, NotFoundError, WorkoutSaveError
from ironlog.db.base import ensure_utc, utcnow
from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.template import WorkoutTemplate
from ironlog.models.workout import Workout, WorkoutExercise, WorkoutSet
from ironlog.schemas.workout import (
    SetCreate,
    SetUpdate,
    WorkoutExerciseInput,
    WorkoutFinish,
    WorkoutStart,
    WorkoutUpdate,
)
from ironlog.services.reconciler import SnapshotReconciler

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def save_unit(db: AsyncSession, workout: Workout, operation: str) -> AsyncIterator[None]:
    """Flush the block's changes and re-snapshot a completed workout, all or nothing.

    Any database failure rolls the session back and surfaces as WorkoutSaveError.
    """
    try:
        yield
        await db.flush()
        if workout.completed_at is not None and not workout.is_deleted:
            await SnapshotReconciler(db).record_snapshot(workout.id)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("workout_save_failed", workout_id=str(workout.id), operation=operation, error=str(e))
        raise WorkoutSaveError("Workout save failed", workout_id=str(workout.id), operation=operation) from e


async def get_live_workout(db: AsyncSession, workout_id: uuid.UUID) -> Workout:
    result = await db.execute(select(Workout).where(Workout.id == workout_id, Workout.live()))
    workout = result.scalar_one_or_none()
    if workout is None:
        raise NotFoundError("Workout not found", workout_id=str(workout_id))
    return workout


async def _get_live_workout_exercise(db: AsyncSession, workout_exercise_id: uuid.UUID) -> tuple[WorkoutExercise, Workout]:
    result = await db.execute(
        select(WorkoutExercise, Workout)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(WorkoutExercise.id == workout_exercise_id, WorkoutExercise.live(), Workout.live())
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Workout exercise not found", workout_exercise_id=str(workout_exercise_id))
    return row[0], row[1]


async def _ensure_exercises_exist(db: AsyncSession, exercise_ids: set[uuid.UUID]) -> None:
    if not exercise_ids:
        return
    result = await db.execute(
        select(ExerciseDefinition.id).where(ExerciseDefinition.id.in_(exercise_ids), ExerciseDefinition.live())
    )
    missing = exercise_ids - set(result.scalars().all())
    if missing:
        raise NotFoundError("Exercise not found", exercise_ids=sorted(str(m) for m in missing))


async def _next_exercise_order(db: AsyncSession, workout_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.max(WorkoutExercise.order)).where(WorkoutExercise.workout_id == workout_id, WorkoutExercise.live())
    )
    current = result.scalar()
    return 0 if current is None else current + 1


def _new_set(workout_exercise_id: uuid.UUID, set_number: int, payload: SetCreate) -> WorkoutSet:
    data = payload.model_dump(exclude={"completed", "set_number", "completed_at"})
    return WorkoutSet(
        id=uuid.uuid4(),
        workout_exercise_id=workout_exercise_id,
        set_number=set_number,
        completed_at=ensure_utc(payload.completed_at) or utcnow(),
        **data,
    )


def _add_exercise_rows(db: AsyncSession, workout_id: uuid.UUID, payload: WorkoutExerciseInput, order: int) -> WorkoutExercise | None:
    """Stage one exercise and its completed sets. None if nothing was completed."""
    completed = [s for s in payload.sets if s.completed]
    if not completed:
        return None
    we = WorkoutExercise(
        id=uuid.uuid4(),
        workout_id=workout_id,
        exercise_id=payload.exercise_id,
        order=payload.order if payload.order is not None else order,
        superset_id=payload.superset_id,
        notes=payload.notes,
    )
    db.add(we)
    for number, s in enumerate(completed, start=1):
        db.add(_new_set(we.id, number, s))
    return we


async def start_workout(db: AsyncSession, payload: WorkoutStart) -> Workout:
    """Create an in-progress workout; marks the originating template as used."""
    template = None
    if payload.template_id is not None:
        result = await db.execute(
            select(WorkoutTemplate).where(WorkoutTemplate.id == payload.template_id, WorkoutTemplate.live())
        )
        template = result.scalar_one_or_none()
        if template is None:
            raise NotFoundError("Template not found", template_id=str(payload.template_id))
        template.last_used_at = utcnow()

    workout = Workout(
        id=uuid.uuid4(),
        name=payload.name or (template.name if template else None),
        started_at=ensure_utc(payload.started_at) or utcnow(),
        template_id=payload.template_id,
        timezone=payload.timezone,
        bodyweight_kg=payload.bodyweight_kg,
        notes=payload.notes,
    )
    async with save_unit(db, workout, "start"):
        db.add(workout)
    logger.info("workout_started", workout_id=str(workout.id), template_id=str(payload.template_id) if template else None)
    return workout


async def finish_workout(db: AsyncSession, workout_id: uuid.UUID, payload: WorkoutFinish) -> Workout:
    """Persist the session's completed sets in one batch, stamp completion and snapshot."""
    workout = await get_live_workout(db, workout_id)
    if workout.completed_at is not None:
        raise ConflictError("Workout is already finished", workout_id=str(workout_id))
    await _ensure_exercises_exist(db, {e.exercise_id for e in payload.exercises})

    completed_at = ensure_utc(payload.completed_at) or utcnow()
    if completed_at < ensure_utc(workout.started_at):
        raise ConflictError("completed_at is before started_at", workout_id=str(workout_id))

    async with save_unit(db, workout, "finish"):
        order = await _next_exercise_order(db, workout_id)
        saved = 0
        for ex in payload.exercises:
            if _add_exercise_rows(db, workout_id, ex, order) is not None:
                order += 1
                saved += 1
        workout.completed_at = completed_at
        if payload.notes is not None:
            workout.notes = payload.notes
    logger.info("workout_finished", workout_id=str(workout_id), exercises=saved)
    return workout


async def update_workout(db: AsyncSession, workout_id: uuid.UUID, payload: WorkoutUpdate) -> Workout:
    workout = await get_live_workout(db, workout_id)
    changes = payload.model_dump(exclude_unset=True)
    for key in ("started_at", "completed_at"):
        if key in changes:
            changes[key] = ensure_utc(changes[key])
    started = changes.get("started_at", ensure_utc(workout.started_at))
    completed = changes.get("completed_at", ensure_utc(workout.completed_at))
    if started is None:
        raise ConflictError("started_at cannot be cleared", workout_id=str(workout_id))
    if completed is not None and completed < started:
        raise ConflictError("completed_at is before started_at", workout_id=str(workout_id))
    async with save_unit(db, workout, "update_workout"):
        for k, v in changes.items():
            setattr(workout, k, v)
        workout.updated_at = utcnow()
    return workout


async def add_exercise(db: AsyncSession, workout_id: uuid.UUID, payload: WorkoutExerciseInput) -> WorkoutExercise:
    """Append an exercise (with its completed sets) to a workout."""
    workout = await get_live_workout(db, workout_id)
    await _ensure_exercises_exist(db, {payload.exercise_id})
    async with save_unit(db, workout, "add_exercise"):
        order = await _next_exercise_order(db, workout_id)
        we = _add_exercise_rows(db, workout_id, payload, order)
        if we is None:
            we = WorkoutExercise(
                id=uuid.uuid4(),
                workout_id=workout_id,
                exercise_id=payload.exercise_id,
                order=payload.order if payload.order is not None else order,
                superset_id=payload.superset_id,
                notes=payload.notes,
            )
            db.add(we)
        workout.updated_at = utcnow()
    return we


async def add_set(db: AsyncSession, workout_exercise_id: uuid.UUID, payload: SetCreate) -> WorkoutSet:
    we, workout = await _get_live_workout_exercise(db, workout_exercise_id)
    if "set_number" in payload.model_fields_set:
        set_number = payload.set_number
    else:
        result = await db.execute(
            select(func.max(WorkoutSet.set_number)).where(
                WorkoutSet.workout_exercise_id == workout_exercise_id, WorkoutSet.live()
            )
        )
        set_number = (result.scalar() or 0) + 1
    s = _new_set(we.id, set_number, payload)
    async with save_unit(db, workout, "add_set"):
        db.add(s)
        workout.updated_at = utcnow()
    return s


async def _get_set_with_workout(db: AsyncSession, set_id: uuid.UUID, live_only: bool) -> tuple[WorkoutSet, Workout]:
    stmt = (
        select(WorkoutSet, Workout)
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(WorkoutSet.id == set_id)
    )
    if live_only:
        stmt = stmt.where(WorkoutSet.live(), WorkoutExercise.live(), Workout.live())
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        raise NotFoundError("Set not found", set_id=str(set_id))
    return row[0], row[1]


async def update_set(db: AsyncSession, set_id: uuid.UUID, payload: SetUpdate) -> WorkoutSet:
    s, workout = await _get_set_with_workout(db, set_id, live_only=True)
    changes = payload.model_dump(exclude_unset=True)
    if "completed_at" in changes:
        changes["completed_at"] = ensure_utc(changes["completed_at"])
    async with save_unit(db, workout, "update_set"):
        for k, v in changes.items():
            setattr(s, k, v)
        workout.updated_at = utcnow()
    return s


async def soft_delete_set(db: AsyncSession, set_id: uuid.UUID) -> bool:
    """Returns False when the set was already deleted (no-op)."""
    s, workout = await _get_set_with_workout(db, set_id, live_only=False)
    if s.is_deleted:
        return False
    async with save_unit(db, workout, "delete_set"):
        s.mark_deleted()
        workout.updated_at = utcnow()
    return True


async def soft_delete_exercise(db: AsyncSession, workout_exercise_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(WorkoutExercise, Workout)
        .join(Workout, Workout.id == WorkoutExercise.workout_id)
        .where(WorkoutExercise.id == workout_exercise_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Workout exercise not found", workout_exercise_id=str(workout_exercise_id))
    we, workout = row[0], row[1]
    if we.is_deleted:
        return False
    async with save_unit(db, workout, "delete_exercise"):
        we.mark_deleted()
        workout.updated_at = utcnow()
    return True


async def soft_delete_workout(db: AsyncSession, workout_id: uuid.UUID) -> bool:
    """Flip is_deleted/deleted_at. Children and snapshots are left untouched."""
    result = await db.execute(select(Workout).where(Workout.id == workout_id))
    workout = result.scalar_one_or_none()
    if workout is None:
        raise NotFoundError("Workout not found", workout_id=str(workout_id))
    if workout.is_deleted:
        return False
    async with save_unit(db, workout, "delete_workout"):
        workout.mark_deleted()
    logger.info("workout_deleted", workout_id=str(workout_id))
    return True
