"""Workout templates: reusable prescriptions with per-set targets."""

from __future__ import annotations

import json
import uuid

import structlog
from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ironlog.core.constants import DEFAULT_TEMPLATE_SETS, MAX_EXERCISES_PER_SESSION
from ironlog.core.exceptions import ConflictError, NotFoundError
from ironlog.db.base import ensure_utc
from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.template import TemplateExercise, WorkoutTemplate
from ironlog.schemas.exercise import ExerciseRef
from ironlog.schemas.template import (
    SetTarget,
    TemplateExerciseInput,
    TemplateExerciseRead,
    TemplateInstantiated,
    WorkoutTemplateCreate,
    WorkoutTemplateCreateFromWorkout,
    WorkoutTemplateRead,
)
from ironlog.schemas.workout import WorkoutRead, WorkoutStart
from ironlog.services import analytics, workout_store
from ironlog.services.reconciler import live_exercises_query

logger = structlog.get_logger(__name__)

_set_targets_adapter = TypeAdapter(list[SetTarget])


def default_set_target(te: TemplateExercise) -> SetTarget:
    return SetTarget(reps=te.target_reps, weight_kg=te.target_weight_kg)


def parse_set_targets(te: TemplateExercise) -> list[SetTarget]:
    """Decode the stored per-set targets.

    Without stored targets, the scalar target is repeated once per target set.
    Unreadable targets degrade to a single default target.
    """
    if not te.set_targets:
        return [default_set_target(te) for _ in range(te.target_sets or 1)]
    try:
        return _set_targets_adapter.validate_python(json.loads(te.set_targets))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(
            "template_set_targets_unreadable",
            template_id=str(te.template_id),
            template_exercise_id=str(te.id),
            error=str(e),
        )
        return [default_set_target(te)]


def encode_set_targets(targets: list[SetTarget] | None) -> str | None:
    if targets is None:
        return None
    return json.dumps([t.model_dump() for t in targets])


def _template_query():
    return select(WorkoutTemplate).options(
        selectinload(WorkoutTemplate.exercises.and_(TemplateExercise.live())).selectinload(TemplateExercise.exercise)
    ).execution_options(populate_existing=True)


def to_read(template: WorkoutTemplate) -> WorkoutTemplateRead:
    exercises = []
    for te in sorted(template.exercises, key=lambda e: e.order):
        if te.exercise is None or te.exercise.is_deleted:
            logger.warning(
                "exercise_definition_missing",
                template_id=str(template.id),
                template_exercise_id=str(te.id),
                exercise_id=str(te.exercise_id),
            )
            continue
        exercises.append(
            TemplateExerciseRead(
                id=te.id,
                exercise_id=te.exercise_id,
                exercise=ExerciseRef.model_validate(te.exercise),
                order=te.order,
                target_sets=te.target_sets,
                target_reps=te.target_reps,
                target_weight_kg=te.target_weight_kg,
                rest_seconds=te.rest_seconds,
                notes=te.notes,
                set_targets=parse_set_targets(te),
            )
        )
    return WorkoutTemplateRead(
        id=template.id,
        name=template.name,
        notes=template.notes,
        created_at=ensure_utc(template.created_at),
        last_used_at=ensure_utc(template.last_used_at),
        exercises=exercises,
    )


async def _get_live_template(db: AsyncSession, template_id: uuid.UUID) -> WorkoutTemplate:
    result = await db.execute(_template_query().where(WorkoutTemplate.id == template_id, WorkoutTemplate.live()))
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Template not found", template_id=str(template_id))
    return template


async def list_templates(db: AsyncSession, skip: int = 0, limit: int = 50) -> list[WorkoutTemplateRead]:
    """Live templates, most recently used first (never-used last)."""
    result = await db.execute(
        _template_query()
        .where(WorkoutTemplate.live())
        .order_by(WorkoutTemplate.last_used_at.desc().nulls_last(), WorkoutTemplate.created_at.desc())
        .offset(skip)
        .limit(limit)
    )
    return [to_read(t) for t in result.scalars().all()]


async def get_template(db: AsyncSession, template_id: uuid.UUID) -> WorkoutTemplateRead:
    return to_read(await _get_live_template(db, template_id))


def _template_exercise(template_id: uuid.UUID, order: int, payload: TemplateExerciseInput) -> TemplateExercise:
    target_sets = payload.target_sets
    if target_sets is None and payload.set_targets:
        target_sets = len(payload.set_targets)
    return TemplateExercise(
        template_id=template_id,
        exercise_id=payload.exercise_id,
        order=payload.order if payload.order is not None else order,
        target_sets=target_sets,
        target_reps=payload.target_reps,
        target_weight_kg=payload.target_weight_kg,
        rest_seconds=payload.rest_seconds,
        notes=payload.notes,
        set_targets=encode_set_targets(payload.set_targets),
    )


async def create_template(db: AsyncSession, payload: WorkoutTemplateCreate) -> WorkoutTemplateRead:
    exercise_ids = {e.exercise_id for e in payload.exercises}
    if exercise_ids:
        result = await db.execute(
            select(ExerciseDefinition.id).where(ExerciseDefinition.id.in_(exercise_ids), ExerciseDefinition.live())
        )
        missing = exercise_ids - set(result.scalars().all())
        if missing:
            raise NotFoundError("Exercise not found", exercise_ids=sorted(str(m) for m in missing))

    template = WorkoutTemplate(id=uuid.uuid4(), name=payload.name, notes=payload.notes)
    db.add(template)
    for i, ex in enumerate(payload.exercises[:MAX_EXERCISES_PER_SESSION]):
        db.add(_template_exercise(template.id, i, ex))
    await db.flush()
    logger.info("template_created", template_id=str(template.id), exercises=len(payload.exercises))
    return await get_template(db, template.id)


async def create_template_from_workout(
    db: AsyncSession, payload: WorkoutTemplateCreateFromWorkout
) -> WorkoutTemplateRead:
    """Save a completed workout's structure as a template.

    Target sets is the working-set count (or the default when none were
    logged); reps and weight come from the last working set.
    """
    workout = await workout_store.get_live_workout(db, payload.workout_id)
    if workout.completed_at is None:
        raise ConflictError("Workout is not finished", workout_id=str(payload.workout_id))

    template = WorkoutTemplate(id=uuid.uuid4(), name=payload.name, notes=workout.notes)
    db.add(template)
    result = await db.execute(live_exercises_query([workout.id]))
    order = 0
    for we in result.scalars().all():
        if we.exercise is None or we.exercise.is_deleted:
            continue
        if order >= MAX_EXERCISES_PER_SESSION:
            break
        working = sorted(analytics.active_sets(we.sets), key=lambda s: s.set_number)
        last = working[-1] if working else None
        targets = [
            SetTarget(reps=str(s.reps) if s.reps is not None else None, weight_kg=s.weight_kg)
            for s in working
        ]
        db.add(
            TemplateExercise(
                template_id=template.id,
                exercise_id=we.exercise_id,
                order=order,
                target_sets=len(working) or DEFAULT_TEMPLATE_SETS,
                target_reps=str(last.reps) if last is not None and last.reps is not None else None,
                target_weight_kg=last.weight_kg if last is not None else None,
                notes=we.notes,
                set_targets=encode_set_targets(targets) if targets else None,
            )
        )
        order += 1
    await db.flush()
    logger.info("template_created_from_workout", template_id=str(template.id), workout_id=str(workout.id))
    return await get_template(db, template.id)


async def rename_template(db: AsyncSession, template_id: uuid.UUID, name: str | None, notes: str | None) -> WorkoutTemplateRead:
    template = await _get_live_template(db, template_id)
    if name is not None:
        template.name = name
    if notes is not None:
        template.notes = notes
    await db.flush()
    return await get_template(db, template_id)


async def soft_delete_template(db: AsyncSession, template_id: uuid.UUID) -> bool:
    """Returns False when already deleted. Template exercises keep their own flags."""
    result = await db.execute(select(WorkoutTemplate).where(WorkoutTemplate.id == template_id))
    template = result.scalar_one_or_none()
    if template is None:
        raise NotFoundError("Template not found", template_id=str(template_id))
    changed = template.mark_deleted()
    await db.flush()
    return changed


async def instantiate_template(db: AsyncSession, template_id: uuid.UUID) -> TemplateInstantiated:
    """Start an in-progress workout from a template; stamps last_used_at."""
    await _get_live_template(db, template_id)
    workout = await workout_store.start_workout(db, WorkoutStart(template_id=template_id))
    template = await get_template(db, template_id)
    return TemplateInstantiated(workout=WorkoutRead.model_validate(workout), template=template)
