"""Workout templates - save, reuse and instantiate workout prescriptions."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.db.session import get_db
from ironlog.schemas.template import (
    TemplateInstantiated,
    WorkoutTemplateCreate,
    WorkoutTemplateCreateFromWorkout,
    WorkoutTemplateRead,
    WorkoutTemplateUpdate,
)
from ironlog.services import templates

router = APIRouter()


@router.get("", response_model=list[WorkoutTemplateRead])
async def list_templates(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 50,
):
    """List templates, most recently used first."""
    return await templates.list_templates(db, skip=skip, limit=limit)


@router.post("", response_model=WorkoutTemplateRead, status_code=201)
async def create_template(payload: WorkoutTemplateCreate, db: AsyncSession = Depends(get_db)):
    return await templates.create_template(db, payload)


@router.post("/from-workout", response_model=WorkoutTemplateRead, status_code=201)
async def create_template_from_workout(
    payload: WorkoutTemplateCreateFromWorkout,
    db: AsyncSession = Depends(get_db),
):
    """Save a finished workout as a template (order, set counts and last-set targets)."""
    return await templates.create_template_from_workout(db, payload)


@router.get("/{template_id}", response_model=WorkoutTemplateRead)
async def get_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await templates.get_template(db, template_id)


@router.patch("/{template_id}", response_model=WorkoutTemplateRead)
async def update_template(
    template_id: uuid.UUID,
    payload: WorkoutTemplateUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update template name/notes."""
    return await templates.rename_template(db, template_id, payload.name, payload.notes)


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Soft-delete a template."""
    await templates.soft_delete_template(db, template_id)
    return None


@router.post("/{template_id}/instantiate", response_model=TemplateInstantiated, status_code=201)
async def instantiate_template(template_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Start a new workout from a template; the prescription comes back with it."""
    return await templates.instantiate_template(db, template_id)
