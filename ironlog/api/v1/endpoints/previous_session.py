"""Previous session context - what you did last time for an exercise (progressive overload)."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.db.session import get_db
from ironlog.schemas.analytics import PreviousSession
from ironlog.services import insights

router = APIRouter()


@router.get("/{exercise_id}", response_model=PreviousSession)
async def get_previous_session_sets(
    exercise_id: uuid.UUID,
    exclude_workout_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Working sets for this exercise from the most recent completed workout that
    included it. Pass exclude_workout_id (e.g. the current workout) to get the
    session before it. An exercise never completed returns no sets.
    """
    return await insights.get_previous_session(db, exercise_id, exclude_workout_id=exclude_workout_id)
