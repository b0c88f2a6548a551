"""Exercise catalog: built-in resync and custom exercise management."""

from __future__ import annotations

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.core.exceptions import ConflictError, NotFoundError
from ironlog.core.exercise_catalog import BUILTIN_EXERCISES, CatalogEntry, builtin_exercise_id
from ironlog.models.exercise import ExerciseDefinition
from ironlog.schemas.exercise import CatalogResyncResult, ExerciseCreate

logger = structlog.get_logger(__name__)


def _entry_values(entry: CatalogEntry) -> dict:
    return {
        "slug": entry.slug,
        "name": entry.name,
        "category": entry.category,
        "movement_type": entry.movement_type,
        "movement_pattern": entry.movement_pattern,
        "primary_muscle_groups": list(entry.primary),
        "secondary_muscle_groups": list(entry.secondary),
        "equipment": entry.equipment,
    }


async def resync_builtin_exercises(
    db: AsyncSession, entries: list[CatalogEntry] | None = None
) -> CatalogResyncResult:
    """Insert missing built-ins and update changed ones. Custom rows are never touched.

    Historical workouts are unaffected: their snapshots embed the definition
    as it was when they were saved.
    """
    entries = BUILTIN_EXERCISES if entries is None else entries
    result = await db.execute(select(ExerciseDefinition).where(ExerciseDefinition.is_custom.is_(False)))
    existing = {e.id: e for e in result.scalars().all()}

    summary = CatalogResyncResult()
    for entry in entries:
        values = _entry_values(entry)
        row = existing.get(builtin_exercise_id(entry.slug))
        if row is None:
            db.add(ExerciseDefinition(id=builtin_exercise_id(entry.slug), is_custom=False, **values))
            summary.inserted += 1
            continue
        changed = {k: v for k, v in values.items() if getattr(row, k) != v}
        if row.is_deleted:
            row.is_deleted = False
            row.deleted_at = None
            changed["is_deleted"] = False
        if changed:
            for k, v in changed.items():
                setattr(row, k, v)
            summary.updated += 1
        else:
            summary.unchanged += 1
    await db.flush()
    logger.info("exercise_catalog_resynced", **summary.model_dump())
    return summary


async def list_exercises(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 200,
    custom_only: bool = False,
    search: str | None = None,
) -> list[ExerciseDefinition]:
    conditions = [ExerciseDefinition.live()]
    if custom_only:
        conditions.append(ExerciseDefinition.is_custom.is_(True))
    if search:
        conditions.append(ExerciseDefinition.name.ilike(f"%{search}%"))
    result = await db.execute(
        select(ExerciseDefinition).where(*conditions).order_by(ExerciseDefinition.name).offset(skip).limit(limit)
    )
    return list(result.scalars().all())


async def get_exercise(db: AsyncSession, exercise_id: uuid.UUID) -> ExerciseDefinition:
    result = await db.execute(
        select(ExerciseDefinition).where(ExerciseDefinition.id == exercise_id, ExerciseDefinition.live())
    )
    exercise = result.scalar_one_or_none()
    if exercise is None:
        raise NotFoundError("Exercise not found", exercise_id=str(exercise_id))
    return exercise


async def create_custom_exercise(db: AsyncSession, payload: ExerciseCreate) -> ExerciseDefinition:
    exercise = ExerciseDefinition(id=uuid.uuid4(), is_custom=True, **payload.model_dump())
    db.add(exercise)
    await db.flush()
    logger.info("custom_exercise_created", exercise_id=str(exercise.id), name=exercise.name)
    return exercise


async def soft_delete_custom_exercise(db: AsyncSession, exercise_id: uuid.UUID) -> bool:
    """Built-ins belong to the resync job and cannot be deleted here."""
    result = await db.execute(select(ExerciseDefinition).where(ExerciseDefinition.id == exercise_id))
    exercise = result.scalar_one_or_none()
    if exercise is None:
        raise NotFoundError("Exercise not found", exercise_id=str(exercise_id))
    if not exercise.is_custom:
        raise ConflictError("Built-in exercises cannot be deleted", exercise_id=str(exercise_id))
    changed = exercise.mark_deleted()
    await db.flush()
    return changed
