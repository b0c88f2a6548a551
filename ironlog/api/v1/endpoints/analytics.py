"""Analytics: weekly volume/stats, streaks, recovery, balance, load, effort and PRs."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.core.constants import (
    BALANCE_WINDOW_WEEKS,
    MUSCLE_GROUP_STATS_LIMIT,
    RECENT_PR_DAYS,
    RECENT_PR_LIMIT,
    TRAINING_LOAD_WEEKS,
    WEEKLY_VOLUME_WEEKS,
)
from ironlog.db.session import get_db
from ironlog.schemas.analytics import (
    EffortAnalytics,
    MovementBalance,
    MuscleGroupVolume,
    MuscleRecoveryReport,
    PersonalRecordRead,
    TrainingLoad,
    TrainingStreaks,
    WeeklyStats,
    WeeklyVolumePoint,
)
from ironlog.services import insights

router = APIRouter()


@router.get("/weekly-volume", response_model=list[WeeklyVolumePoint])
async def get_weekly_volume(
    db: AsyncSession = Depends(get_db),
    weeks: int = Query(WEEKLY_VOLUME_WEEKS, ge=1, le=104),
):
    """Working volume per week (Monday start), oldest first."""
    return await insights.get_weekly_volume(db, weeks=weeks)


@router.get("/weekly-stats", response_model=WeeklyStats)
async def get_weekly_stats(db: AsyncSession = Depends(get_db)):
    """This week vs last week with percentage trends."""
    return await insights.get_weekly_stats(db)


@router.get("/streaks", response_model=TrainingStreaks)
async def get_training_streaks(db: AsyncSession = Depends(get_db)):
    """
    Current streak (consecutive days, counting from today or yesterday),
    longest streak and whether the streak is still active.
    """
    return await insights.get_training_streaks(db)


@router.get("/recovery", response_model=MuscleRecoveryReport)
async def get_muscle_recovery(db: AsyncSession = Depends(get_db)):
    """Per-muscle recovery with a suggested workout type."""
    return await insights.get_muscle_recovery(db)


@router.get("/balance", response_model=MovementBalance)
async def get_movement_balance(
    db: AsyncSession = Depends(get_db),
    weeks: int = Query(BALANCE_WINDOW_WEEKS, ge=1, le=52),
):
    return await insights.get_movement_balance(db, weeks=weeks)


@router.get("/training-load", response_model=TrainingLoad)
async def get_training_load(
    db: AsyncSession = Depends(get_db),
    weeks: int = Query(TRAINING_LOAD_WEEKS, ge=1, le=52),
):
    """
    Current week vs the average week: sets, volume, intensity and load level.
    RPE metrics (avg RPE, hard sets, fatigue index) only when RPE is logged on
    at least 30% of working sets.
    """
    return await insights.get_training_load(db, weeks=weeks)


@router.get("/effort", response_model=EffortAnalytics)
async def get_effort_analytics(
    db: AsyncSession = Depends(get_db),
    weeks: int = Query(TRAINING_LOAD_WEEKS, ge=1, le=52),
):
    return await insights.get_effort_analytics(db, weeks=weeks)


@router.get("/muscle-groups", response_model=list[MuscleGroupVolume])
async def get_muscle_group_stats(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(MUSCLE_GROUP_STATS_LIMIT, ge=1, le=20),
):
    """All-time working volume per muscle group, largest first."""
    return await insights.get_muscle_group_stats(db, limit=limit)


@router.get("/prs/recent", response_model=list[PersonalRecordRead])
async def get_recent_prs(
    db: AsyncSession = Depends(get_db),
    days: int = Query(RECENT_PR_DAYS, ge=1),
    limit: int = Query(RECENT_PR_LIMIT, ge=1, le=100),
):
    """Weight PRs set within the last `days` days, most recent first."""
    return await insights.get_recent_prs(db, days=days, limit=limit)


@router.get("/prs/{exercise_id}", response_model=list[PersonalRecordRead])
async def get_exercise_prs(exercise_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Full PR history for one exercise; the first entry is the baseline."""
    return await insights.get_exercise_prs(db, exercise_id)
