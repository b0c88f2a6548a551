"""Exercise catalog endpoints: list, custom exercises, resync, stats, progress."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.db.session import get_db
from ironlog.schemas.exercise import (
    CatalogResyncResult,
    ExerciseCreate,
    ExerciseProgressPoint,
    ExerciseRead,
    ExerciseStats,
)
from ironlog.services import catalog, insights

router = APIRouter()


@router.get("", response_model=list[ExerciseRead])
async def list_exercises(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 200,
    custom_only: bool = False,
    search: str | None = None,
):
    """List non-deleted exercises by name; optional name search."""
    return await catalog.list_exercises(db, skip=skip, limit=limit, custom_only=custom_only, search=search)


@router.post("", response_model=ExerciseRead, status_code=201)
async def create_exercise(payload: ExerciseCreate, db: AsyncSession = Depends(get_db)):
    """Create a user-defined exercise."""
    return await catalog.create_custom_exercise(db, payload)


@router.post("/resync", response_model=CatalogResyncResult)
async def resync_builtin_exercises(db: AsyncSession = Depends(get_db)):
    """Re-apply the built-in reference dataset; custom exercises are untouched."""
    return await catalog.resync_builtin_exercises(db)


@router.get("/stats", response_model=list[ExerciseStats])
async def get_exercise_stats(db: AsyncSession = Depends(get_db)):
    """Per-exercise max weight, max reps, best e1RM, volume and last performed."""
    return await insights.get_exercise_stats(db)


@router.get("/{exercise_id}", response_model=ExerciseRead)
async def get_exercise(exercise_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await catalog.get_exercise(db, exercise_id)


@router.delete("/{exercise_id}", status_code=204)
async def delete_exercise(exercise_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Soft-delete a custom exercise (idempotent)."""
    await catalog.soft_delete_custom_exercise(db, exercise_id)
    return None


@router.get("/{exercise_id}/progress", response_model=list[ExerciseProgressPoint])
async def get_exercise_progress(exercise_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Session-by-session max weight, best e1RM and volume, oldest first."""
    return await insights.get_exercise_progress(db, exercise_id)
