"""Workouts: lifecycle, history, edits and canonical documents."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.db.session import get_db
from ironlog.schemas.canonical import CanonicalWorkout
from ironlog.schemas.workout import (
    SetCreate,
    SetRead,
    SetUpdate,
    WorkoutDetail,
    WorkoutExerciseInput,
    WorkoutFinish,
    WorkoutRead,
    WorkoutStart,
    WorkoutSummary,
    WorkoutUpdate,
)
from ironlog.services import insights, workout_store
from ironlog.services.reconciler import SnapshotReconciler

router = APIRouter()


async def _detail_or_404(db: AsyncSession, workout_id: uuid.UUID) -> WorkoutDetail:
    detail = await insights.get_workout_details(db, workout_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return detail


@router.get("", response_model=list[WorkoutSummary])
async def list_workouts(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 50,
    from_date: date | None = None,
    to_date: date | None = None,
    completed_only: bool = False,
):
    """List workouts newest first with computed counts, duration and volume."""
    return await insights.list_workouts(
        db, skip=skip, limit=limit, from_date=from_date, to_date=to_date, completed_only=completed_only
    )


@router.post("", response_model=WorkoutRead, status_code=201)
async def start_workout(payload: WorkoutStart, db: AsyncSession = Depends(get_db)):
    """Start a workout (in progress until finished)."""
    return await workout_store.start_workout(db, payload)


@router.get("/{workout_id}", response_model=WorkoutDetail)
async def get_workout(workout_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await _detail_or_404(db, workout_id)


@router.patch("/{workout_id}", response_model=WorkoutDetail)
async def update_workout(workout_id: uuid.UUID, payload: WorkoutUpdate, db: AsyncSession = Depends(get_db)):
    """Update workout metadata; a finished workout gets a fresh snapshot."""
    await workout_store.update_workout(db, workout_id, payload)
    return await _detail_or_404(db, workout_id)


@router.delete("/{workout_id}", status_code=204)
async def delete_workout(workout_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Soft-delete a workout. Deleting twice is a no-op."""
    await workout_store.soft_delete_workout(db, workout_id)
    return None


@router.post("/{workout_id}/finish", response_model=WorkoutDetail)
async def finish_workout(workout_id: uuid.UUID, payload: WorkoutFinish, db: AsyncSession = Depends(get_db)):
    """Save the session's completed sets in one batch and mark the workout finished."""
    await workout_store.finish_workout(db, workout_id, payload)
    return await _detail_or_404(db, workout_id)


@router.get("/{workout_id}/canonical", response_model=CanonicalWorkout)
async def get_canonical_workout(workout_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Canonical document: newest snapshot, or rebuilt from rows when none exists."""
    doc = await SnapshotReconciler(db).get_canonical_workout(workout_id)
    if doc is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return doc


@router.post("/{workout_id}/exercises", response_model=WorkoutDetail, status_code=201)
async def add_exercise(workout_id: uuid.UUID, payload: WorkoutExerciseInput, db: AsyncSession = Depends(get_db)):
    await workout_store.add_exercise(db, workout_id, payload)
    return await _detail_or_404(db, workout_id)


@router.delete("/exercises/{workout_exercise_id}", status_code=204)
async def delete_workout_exercise(workout_exercise_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await workout_store.soft_delete_exercise(db, workout_exercise_id)
    return None


@router.post("/exercises/{workout_exercise_id}/sets", response_model=SetRead, status_code=201)
async def add_set(workout_exercise_id: uuid.UUID, payload: SetCreate, db: AsyncSession = Depends(get_db)):
    """Log a set; set_number defaults to the next free number."""
    return await workout_store.add_set(db, workout_exercise_id, payload)


@router.patch("/sets/{set_id}", response_model=SetRead)
async def update_set(set_id: uuid.UUID, payload: SetUpdate, db: AsyncSession = Depends(get_db)):
    return await workout_store.update_set(db, set_id, payload)


@router.delete("/sets/{set_id}", status_code=204)
async def delete_set(set_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    await workout_store.soft_delete_set(db, set_id)
    return None
