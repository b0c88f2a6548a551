"""Read-time query surface: workout history and training analytics.

Rows are loaded with the soft-delete filter applied on every joined table and
reduced with the pure functions in ``analytics``. Nothing computed here is
written back.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import and_, case, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.core.constants import (
    ALL_MUSCLE_GROUPS,
    BALANCE_WINDOW_WEEKS,
    DEFAULT_WEEK_RPE,
    LOWER_BALANCE_MUSCLES,
    MUSCLE_GROUP_STATS_LIMIT,
    MUSCLE_RECOVERY_HOURS,
    PRIMARY_MUSCLE_WEIGHT,
    RECENT_PR_DAYS,
    RECENT_PR_LIMIT,
    SECONDARY_MUSCLE_WEIGHT,
    TRAINING_LOAD_WEEKS,
    TYPICAL_INTENSITY_PERCENT,
    UPPER_BALANCE_MUSCLES,
    WEEKLY_VOLUME_WEEKS,
)
from ironlog.core.exceptions import NotFoundError
from ironlog.db.base import ensure_utc, live_filter, utcnow
from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.workout import Workout, WorkoutExercise, WorkoutSet
from ironlog.schemas.analytics import (
    EffortAnalytics,
    GhostSet,
    MovementBalance,
    MuscleGroupVolume,
    MuscleRecoveryRead,
    MuscleRecoveryReport,
    PersonalRecordRead,
    PreviousSession,
    RecoverySuggestionRead,
    TrainingLoad,
    TrainingStreaks,
    WeeklyFatigue,
    WeeklyLoad,
    WeeklyStats,
    WeeklyVolumePoint,
)
from ironlog.schemas.exercise import ExerciseProgressPoint, ExerciseRef, ExerciseStats
from ironlog.schemas.workout import SetRead, WorkoutDetail, WorkoutExerciseRead, WorkoutSummary
from ironlog.services import analytics
from ironlog.services.reconciler import live_exercises_query

_MUSCLE_LOOKUP = {m.lower(): m for m in ALL_MUSCLE_GROUPS}


@dataclass
class Session:
    """A completed workout with its live exercises (catalog entry present)."""

    workout: Workout
    exercises: list[WorkoutExercise]

    @property
    def performed_at(self) -> datetime:
        return ensure_utc(self.workout.completed_at or self.workout.started_at)


async def load_sessions(
    db: AsyncSession,
    since: datetime | None = None,
    exercise_id: uuid.UUID | None = None,
) -> list[Session]:
    """Completed, non-deleted workouts (oldest first) with live exercises and sets."""
    stmt = select(Workout).where(Workout.live(), Workout.completed_at.is_not(None))
    if since is not None:
        stmt = stmt.where(Workout.started_at >= since)
    workouts = list((await db.execute(stmt.order_by(Workout.completed_at))).scalars().all())
    if not workouts:
        return []

    ex_stmt = live_exercises_query([w.id for w in workouts])
    if exercise_id is not None:
        ex_stmt = ex_stmt.where(WorkoutExercise.exercise_id == exercise_id)
    by_workout: dict[uuid.UUID, list[WorkoutExercise]] = defaultdict(list)
    for we in (await db.execute(ex_stmt)).scalars().all():
        if we.exercise is None or we.exercise.is_deleted:
            continue
        by_workout[we.workout_id].append(we)
    return [Session(workout=w, exercises=by_workout.get(w.id, [])) for w in workouts]


def _canonical_muscle(name: str) -> str | None:
    return _MUSCLE_LOOKUP.get(name.strip().lower())


def muscle_volumes(we: WorkoutExercise) -> dict[str, float]:
    """Working volume credited per muscle group (primary full, secondary half)."""
    volume = analytics.calculate_exercise_volume(we.sets)
    credited: dict[str, float] = {}
    if volume <= 0:
        return credited
    for names, weight in (
        (we.exercise.secondary_muscle_groups or [], SECONDARY_MUSCLE_WEIGHT),
        (we.exercise.primary_muscle_groups or [], PRIMARY_MUSCLE_WEIGHT),
    ):
        for name in names:
            muscle = _canonical_muscle(name)
            if muscle is not None:
                credited[muscle] = max(credited.get(muscle, 0.0), volume * weight)
    return credited


# ── Workout history ─────────────────────────────────────────────────────────


def _aggregate_query(workout_ids: list[uuid.UUID]):
    working = WorkoutSet.is_warmup.is_(False)
    return (
        select(
            WorkoutExercise.workout_id,
            func.count(func.distinct(WorkoutExercise.id)).label("exercise_count"),
            func.count(WorkoutSet.id).label("set_count"),
            func.coalesce(func.sum(case((working, 1), else_=0)), 0).label("working_set_count"),
            func.coalesce(
                func.sum(case((working, WorkoutSet.weight_kg * WorkoutSet.reps), else_=0)), 0
            ).label("volume"),
        )
        .select_from(WorkoutExercise)
        .join(ExerciseDefinition, ExerciseDefinition.id == WorkoutExercise.exercise_id)
        .outerjoin(
            WorkoutSet,
            and_(WorkoutSet.workout_exercise_id == WorkoutExercise.id, WorkoutSet.live()),
        )
        .where(WorkoutExercise.workout_id.in_(workout_ids), *live_filter(WorkoutExercise, ExerciseDefinition))
        .group_by(WorkoutExercise.workout_id)
    )


def _summary(workout: Workout, **aggregates) -> dict:
    base = WorkoutSummary.model_validate(workout, from_attributes=True).model_dump()
    base.update(
        started_at=ensure_utc(workout.started_at),
        completed_at=ensure_utc(workout.completed_at),
        duration_seconds=analytics.calculate_duration_seconds(
            ensure_utc(workout.started_at), ensure_utc(workout.completed_at)
        ),
    )
    base.update(aggregates)
    return base


async def list_workouts(
    db: AsyncSession,
    skip: int = 0,
    limit: int = 50,
    from_date: date | None = None,
    to_date: date | None = None,
    completed_only: bool = False,
) -> list[WorkoutSummary]:
    """Newest first, with counts and volume computed at query time."""
    conditions = [Workout.live()]
    if from_date is not None:
        conditions.append(func.date(Workout.started_at) >= from_date)
    if to_date is not None:
        conditions.append(func.date(Workout.started_at) <= to_date)
    if completed_only:
        conditions.append(Workout.completed_at.is_not(None))
    result = await db.execute(
        select(Workout).where(*conditions).order_by(Workout.started_at.desc()).offset(skip).limit(limit)
    )
    workouts = list(result.scalars().all())
    if not workouts:
        return []
    stats = {
        row.workout_id: row
        for row in (await db.execute(_aggregate_query([w.id for w in workouts]))).all()
    }
    summaries = []
    for w in workouts:
        row = stats.get(w.id)
        aggregates = {}
        if row is not None:
            aggregates = dict(
                exercise_count=row.exercise_count,
                set_count=row.set_count,
                working_set_count=int(row.working_set_count or 0),
                total_volume_kg=float(row.volume or 0),
            )
        summaries.append(WorkoutSummary(**_summary(w, **aggregates)))
    return summaries


async def get_workout_details(db: AsyncSession, workout_id: uuid.UUID) -> WorkoutDetail | None:
    """Workout with live exercises and sets; None when absent or deleted."""
    result = await db.execute(select(Workout).where(Workout.id == workout_id, Workout.live()))
    workout = result.scalar_one_or_none()
    if workout is None:
        return None
    exercises = []
    all_sets = []
    for we in (await db.execute(live_exercises_query([workout_id]))).scalars().all():
        if we.exercise is None or we.exercise.is_deleted:
            continue
        sets = sorted(we.sets, key=lambda s: s.set_number)
        all_sets.extend(sets)
        exercises.append(
            WorkoutExerciseRead(
                id=we.id,
                exercise_id=we.exercise_id,
                exercise=ExerciseRef.model_validate(we.exercise),
                order=we.order,
                superset_id=we.superset_id,
                notes=we.notes,
                volume_kg=analytics.calculate_exercise_volume(sets),
                sets=[SetRead.model_validate(s) for s in sets],
            )
        )
    return WorkoutDetail(
        **_summary(
            workout,
            exercise_count=len(exercises),
            set_count=analytics.count_sets(all_sets),
            working_set_count=analytics.count_working_sets(all_sets),
            total_volume_kg=analytics.calculate_exercise_volume(all_sets),
        ),
        exercises=exercises,
    )


# ── Exercise stats / progress / PRs ─────────────────────────────────────────


async def get_exercise_stats(db: AsyncSession) -> list[ExerciseStats]:
    """Per-exercise all-time stats, most recently performed first."""
    stats: dict[uuid.UUID, ExerciseStats] = {}
    for session in await load_sessions(db):
        for we in session.exercises:
            working = analytics.active_sets(we.sets)
            if not working:
                continue
            entry = stats.get(we.exercise_id)
            if entry is None:
                entry = stats[we.exercise_id] = ExerciseStats(
                    exercise_id=we.exercise_id,
                    name=we.exercise.name,
                    muscle_group=we.exercise.muscle_group,
                )
            loaded = [s for s in working if analytics.has_load(s)]
            weights = [float(s.weight_kg) for s in loaded]
            reps = [s.reps for s in working if s.reps is not None]
            best = analytics.best_e1rm(working)
            if weights:
                entry.max_weight_kg = max(weights + [entry.max_weight_kg or 0])
            if reps:
                entry.max_reps = max(reps + [entry.max_reps or 0])
            if best is not None:
                entry.best_e1rm_kg = max(best, entry.best_e1rm_kg or 0)
            entry.total_volume_kg += analytics.calculate_exercise_volume(working)
            entry.working_sets += len(working)
            entry.session_count += 1
            if entry.last_performed is None or session.performed_at > entry.last_performed:
                entry.last_performed = session.performed_at
    return sorted(stats.values(), key=lambda e: e.last_performed, reverse=True)


async def _get_live_exercise(db: AsyncSession, exercise_id: uuid.UUID) -> ExerciseDefinition:
    result = await db.execute(
        select(ExerciseDefinition).where(ExerciseDefinition.id == exercise_id, ExerciseDefinition.live())
    )
    exercise = result.scalar_one_or_none()
    if exercise is None:
        raise NotFoundError("Exercise not found", exercise_id=str(exercise_id))
    return exercise


async def get_exercise_progress(db: AsyncSession, exercise_id: uuid.UUID) -> list[ExerciseProgressPoint]:
    """One point per completed session of the exercise, oldest first."""
    await _get_live_exercise(db, exercise_id)
    points = []
    for session in await load_sessions(db, exercise_id=exercise_id):
        sets = [s for we in session.exercises for s in we.sets]
        working = analytics.active_sets(sets)
        if not working:
            continue
        points.append(
            ExerciseProgressPoint(
                workout_id=session.workout.id,
                performed_at=session.performed_at,
                max_weight_kg=analytics.session_max_weight(working),
                best_e1rm_kg=analytics.best_e1rm(working),
                volume_kg=analytics.calculate_exercise_volume(working),
                working_sets=len(working),
            )
        )
    return points


def _session_maxima(sessions: list[Session]) -> dict[uuid.UUID, list[analytics.SessionMax]]:
    maxima: dict[uuid.UUID, list[analytics.SessionMax]] = defaultdict(list)
    for session in sessions:
        per_exercise: dict[uuid.UUID, list[WorkoutSet]] = defaultdict(list)
        for we in session.exercises:
            per_exercise[we.exercise_id].extend(we.sets)
        for exercise_id, sets in per_exercise.items():
            top = analytics.session_max_weight(sets)
            if top is not None:
                maxima[exercise_id].append(
                    analytics.SessionMax(session.workout.id, session.performed_at, top)
                )
    return maxima


def _pr_reads(events: list[analytics.PREvent], exercise_id: uuid.UUID, name: str) -> list[PersonalRecordRead]:
    return [
        PersonalRecordRead(
            exercise_id=exercise_id,
            exercise_name=name,
            workout_id=e.workout_id,
            achieved_at=e.achieved_at,
            weight_kg=e.weight_kg,
            previous_best_kg=e.previous_best_kg,
            is_new=e.is_new,
        )
        for e in events
    ]


async def get_exercise_prs(db: AsyncSession, exercise_id: uuid.UUID) -> list[PersonalRecordRead]:
    """Full weight-PR history for one exercise, most recent first."""
    exercise = await _get_live_exercise(db, exercise_id)
    sessions = await load_sessions(db, exercise_id=exercise_id)
    events = analytics.detect_pr_events(_session_maxima(sessions).get(exercise_id, []))
    events = analytics.filter_recent_prs(events, now=utcnow())
    return _pr_reads(events, exercise_id, exercise.name)


async def get_recent_prs(
    db: AsyncSession,
    days: int = RECENT_PR_DAYS,
    limit: int = RECENT_PR_LIMIT,
    now: datetime | None = None,
) -> list[PersonalRecordRead]:
    """PR events across all exercises inside the recency window, most recent first.

    The running maximum always walks full history; the window only limits
    which events are reported.
    """
    now = now or utcnow()
    sessions = await load_sessions(db)
    names = {we.exercise_id: we.exercise.name for s in sessions for we in s.exercises}
    reads: list[PersonalRecordRead] = []
    for exercise_id, maxima in _session_maxima(sessions).items():
        events = analytics.filter_recent_prs(analytics.detect_pr_events(maxima), now=now, days=days)
        reads.extend(_pr_reads(events, exercise_id, names[exercise_id]))
    reads.sort(key=lambda r: r.achieved_at, reverse=True)
    return reads[:limit]


# ── Weekly volume / stats / streaks ─────────────────────────────────────────


def _session_day(session: Session) -> date:
    return ensure_utc(session.workout.started_at).date()


def _day_start(d: date) -> datetime:
    return datetime.combine(d, datetime.min.time(), tzinfo=timezone.utc)


async def get_weekly_volume(
    db: AsyncSession,
    weeks: int = WEEKLY_VOLUME_WEEKS,
    today: date | None = None,
) -> list[WeeklyVolumePoint]:
    """Working volume per Monday-start week, oldest first, empty weeks included."""
    today = today or utcnow().date()
    first_week = analytics.week_start(today) - timedelta(weeks=weeks - 1)
    since = _day_start(first_week)
    buckets = {first_week + timedelta(weeks=i): WeeklyVolumePoint(week_start=first_week + timedelta(weeks=i)) for i in range(weeks)}
    for session in await load_sessions(db, since=since):
        point = buckets.get(analytics.week_start(_session_day(session)))
        if point is None:
            continue
        point.workout_count += 1
        for we in session.exercises:
            point.volume_kg += analytics.calculate_exercise_volume(we.sets)
            point.working_sets += analytics.count_working_sets(we.sets)
    return [buckets[k] for k in sorted(buckets)]


async def get_weekly_stats(db: AsyncSession, today: date | None = None) -> WeeklyStats:
    """This week vs last week: volume, workouts, minutes and training days."""
    today = today or utcnow().date()
    this_week = analytics.week_start(today)
    last_week = this_week - timedelta(weeks=1)
    since = _day_start(last_week)

    totals = {this_week: [0.0, 0, 0], last_week: [0.0, 0, 0]}  # volume, workouts, seconds
    days = [False] * 7
    for session in await load_sessions(db, since=since):
        day = _session_day(session)
        bucket = totals.get(analytics.week_start(day))
        if bucket is None:
            continue
        bucket[0] += sum(analytics.calculate_exercise_volume(we.sets) for we in session.exercises)
        bucket[1] += 1
        bucket[2] += analytics.calculate_duration_seconds(
            ensure_utc(session.workout.started_at), ensure_utc(session.workout.completed_at)
        ) or 0
        if analytics.week_start(day) == this_week:
            days[day.weekday()] = True

    volume, count, seconds = totals[this_week]
    prev_volume, prev_count, prev_seconds = totals[last_week]
    minutes, prev_minutes = round(seconds / 60), round(prev_seconds / 60)
    return WeeklyStats(
        week_start=this_week,
        volume_kg=volume,
        previous_volume_kg=prev_volume,
        volume_trend=analytics.calculate_trend(volume, prev_volume),
        workout_count=count,
        previous_workout_count=prev_count,
        workout_count_trend=count - prev_count,
        total_minutes=minutes,
        previous_total_minutes=prev_minutes,
        time_trend=analytics.calculate_trend(minutes, prev_minutes),
        days_worked_out=days,
    )


def _has_live_sets():
    """Workout has at least one live set under a live exercise."""
    return exists(
        select(WorkoutSet.id)
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .where(WorkoutExercise.workout_id == Workout.id, *live_filter(WorkoutExercise, WorkoutSet))
    )


async def get_training_streaks(db: AsyncSession, today: date | None = None) -> TrainingStreaks:
    """Current/longest streak over calendar days (UTC) with a completed workout."""
    today = today or utcnow().date()
    conditions = [Workout.live(), Workout.completed_at.is_not(None), _has_live_sets()]
    result = await db.execute(select(Workout.started_at).where(*conditions))
    days = [ensure_utc(started).date() for started in result.scalars().all()]
    summary = analytics.calculate_streaks(days, today)

    total = (await db.execute(select(func.count(Workout.id)).where(*conditions))).scalar() or 0
    monday = analytics.week_start(today)
    return TrainingStreaks(
        current_streak=summary.current_streak,
        longest_streak=summary.longest_streak,
        worked_out_today=summary.worked_out_today,
        is_active=summary.is_active,
        last_workout_date=summary.last_workout_date,
        total_workouts=total,
        workouts_this_week=sum(1 for d in days if monday <= d <= today),
    )


# ── Recovery / balance ──────────────────────────────────────────────────────


async def get_muscle_recovery(db: AsyncSession, now: datetime | None = None) -> MuscleRecoveryReport:
    """Recovery per muscle group from the most recent session that trained it."""
    now = now or utcnow()
    window = timedelta(hours=max(MUSCLE_RECOVERY_HOURS.values()))
    last_trained: dict[str, tuple[datetime, float]] = {}
    # Sessions are oldest first, so later sessions overwrite earlier ones
    for session in await load_sessions(db, since=now - window):
        per_session: dict[str, float] = defaultdict(float)
        for we in session.exercises:
            for muscle, volume in muscle_volumes(we).items():
                per_session[muscle] += volume
        for muscle, volume in per_session.items():
            last_trained[muscle] = (session.performed_at, volume)

    reads = []
    for muscle in ALL_MUSCLE_GROUPS:
        if muscle in last_trained:
            trained_at, volume = last_trained[muscle]
            hours = max(0.0, (now - trained_at).total_seconds() / 3600)
            recovery = analytics.calculate_recovery(muscle, volume, hours)
        else:
            trained_at, volume, hours, recovery = None, 0.0, None, 100.0
        reads.append(
            MuscleRecoveryRead(
                muscle=muscle,
                recovery_percent=round(recovery, 1),
                status=analytics.recovery_status(recovery),
                last_trained_at=trained_at,
                hours_since=round(hours, 1) if hours is not None else None,
                last_session_volume_kg=volume,
            )
        )
    levels = {r.muscle: r.recovery_percent for r in reads}
    suggestion = analytics.suggest_workout(levels)
    return MuscleRecoveryReport(
        muscles=reads,
        overall_recovery=int(sum(levels.values()) / len(levels) + 0.5),
        suggestion=RecoverySuggestionRead(
            type=suggestion.type,
            message=suggestion.message,
            reason=suggestion.reason,
            fresh_muscles=suggestion.fresh_muscles,
        ),
    )


async def get_movement_balance(
    db: AsyncSession,
    weeks: int = BALANCE_WINDOW_WEEKS,
    now: datetime | None = None,
) -> MovementBalance:
    """Push vs pull and upper vs lower working volume over the last ``weeks`` weeks."""
    now = now or utcnow()
    volumes = defaultdict(float)
    for session in await load_sessions(db, since=now - timedelta(weeks=weeks)):
        for we in session.exercises:
            volume = analytics.calculate_exercise_volume(we.sets)
            pattern = (we.exercise.movement_pattern or "").lower()
            muscles = " ".join(we.exercise.primary_muscle_groups or []).lower()

            if "push" in pattern or "press" in pattern:
                volumes["push"] += volume
            elif "pull" in pattern or "row" in pattern:
                volumes["pull"] += volume

            if "squat" in pattern:
                volumes["squat"] += volume
            elif "hinge" in pattern or "deadlift" in pattern:
                volumes["hinge"] += volume

            if any(m in muscles or m in pattern for m in UPPER_BALANCE_MUSCLES):
                volumes["upper"] += volume
            if any(m in muscles or m in pattern for m in LOWER_BALANCE_MUSCLES):
                volumes["lower"] += volume

    return MovementBalance(
        weeks=weeks,
        push_volume_kg=volumes["push"],
        pull_volume_kg=volumes["pull"],
        upper_volume_kg=volumes["upper"],
        lower_volume_kg=volumes["lower"],
        squat_volume_kg=volumes["squat"],
        hinge_volume_kg=volumes["hinge"],
        push_pull_ratio=analytics.balance_ratio(volumes["push"], volumes["pull"]),
        upper_lower_ratio=analytics.balance_ratio(volumes["upper"], volumes["lower"]),
        push_pull_status=analytics.balance_status(volumes["push"], volumes["pull"]),
        upper_lower_status=analytics.balance_status(volumes["upper"], volumes["lower"]),
    )


# ── Previous session / muscle groups ────────────────────────────────────────


async def get_previous_session(
    db: AsyncSession,
    exercise_id: uuid.UUID,
    exclude_workout_id: uuid.UUID | None = None,
) -> PreviousSession:
    """Working sets from the most recent completed workout that included the exercise.

    Pass ``exclude_workout_id`` (e.g. the workout in progress) to look past it.
    """
    await _get_live_exercise(db, exercise_id)
    conditions = [
        WorkoutExercise.exercise_id == exercise_id,
        Workout.completed_at.is_not(None),
        *live_filter(Workout, WorkoutExercise),
    ]
    if exclude_workout_id is not None:
        conditions.append(Workout.id != exclude_workout_id)
    result = await db.execute(
        select(Workout)
        .join(WorkoutExercise, WorkoutExercise.workout_id == Workout.id)
        .where(*conditions)
        .order_by(Workout.started_at.desc())
        .limit(1)
    )
    workout = result.scalars().first()
    if workout is None:
        return PreviousSession(exercise_id=exercise_id)

    ex_stmt = live_exercises_query([workout.id]).where(WorkoutExercise.exercise_id == exercise_id)
    sets = [s for we in (await db.execute(ex_stmt)).scalars().all() for s in analytics.ghost_sets(we.sets)]
    return PreviousSession(
        exercise_id=exercise_id,
        workout_id=workout.id,
        workout_started_at=ensure_utc(workout.started_at),
        sets=[GhostSet.model_validate(s) for s in sets],
    )


async def get_muscle_group_stats(
    db: AsyncSession, limit: int = MUSCLE_GROUP_STATS_LIMIT
) -> list[MuscleGroupVolume]:
    """All-time working volume per primary muscle group, largest first."""
    groups: dict[str, MuscleGroupVolume] = {}
    for session in await load_sessions(db):
        for we in session.exercises:
            name = we.exercise.muscle_group or "Other"
            entry = groups.setdefault(name, MuscleGroupVolume(muscle_group=name))
            entry.volume_kg += analytics.calculate_exercise_volume(we.sets)
            entry.working_sets += analytics.count_working_sets(we.sets)
    total = sum(g.volume_kg for g in groups.values())
    for g in groups.values():
        g.percent_of_total = round(g.volume_kg / total * 100, 1) if total > 0 else 0.0
    ranked = sorted(groups.values(), key=lambda g: (-g.volume_kg, g.muscle_group))
    return ranked[:limit]


# ── Training load / effort ──────────────────────────────────────────────────


def _session_seconds(session: Session) -> int:
    return analytics.calculate_duration_seconds(
        ensure_utc(session.workout.started_at), ensure_utc(session.workout.completed_at)
    ) or 0


async def get_training_load(
    db: AsyncSession,
    weeks: int = TRAINING_LOAD_WEEKS,
    today: date | None = None,
) -> TrainingLoad:
    """Volume, intensity and density over the last ``weeks`` weeks, current week vs average."""
    today = today or utcnow().date()
    sessions = await load_sessions(db, since=_day_start(today - timedelta(weeks=weeks)))
    if not sessions:
        return TrainingLoad(weeks=weeks)

    working: list[WorkoutSet] = []
    by_exercise: dict[uuid.UUID, list[WorkoutSet]] = defaultdict(list)
    loads: dict[date, WeeklyLoad] = {}
    seconds = 0
    for session in sessions:
        key = analytics.week_start(_session_day(session))
        load = loads.setdefault(key, WeeklyLoad(week_start=key))
        load.workout_count += 1
        seconds += _session_seconds(session)
        for we in session.exercises:
            sets = analytics.active_sets(we.sets)
            working.extend(sets)
            by_exercise[we.exercise_id].extend(sets)
            load.working_sets += len(sets)
            load.volume_kg += analytics.calculate_exercise_volume(sets)

    weekly = [loads[k] for k in sorted(loads)]
    avg_volume = sum(w.volume_kg for w in weekly) / len(weekly)
    avg_sets = sum(w.working_sets for w in weekly) / len(weekly)
    this_week = analytics.week_start(today)
    current = loads.get(this_week, WeeklyLoad(week_start=this_week))
    total_volume = analytics.calculate_exercise_volume(working)
    intensity = analytics.average_intensity_percent(by_exercise)
    level, gauge = analytics.calculate_load_level(current.volume_kg, avg_volume)

    rpe_logged = analytics.has_rpe_data(working)
    avg_rpe = analytics.average_rpe(working) if rpe_logged else None
    return TrainingLoad(
        weeks=weeks,
        total_sets=len(working),
        total_volume_kg=total_volume,
        avg_intensity_percent=round(intensity, 1),
        session_density=round(analytics.calculate_effort_density(total_volume, seconds), 1),
        failure_sets=sum(1 for s in working if s.is_failure),
        load_level=level,
        load_percent=round(gauge, 1),
        weekly_loads=weekly,
        current_week_sets=current.working_sets,
        current_week_volume_kg=current.volume_kg,
        avg_weekly_sets=round(avg_sets, 1),
        avg_weekly_volume_kg=round(avg_volume, 1),
        sets_change_percent=round(analytics.percent_change(current.working_sets, avg_sets), 1),
        volume_change_percent=round(analytics.percent_change(current.volume_kg, avg_volume), 1),
        intensity_change_percent=round(intensity - TYPICAL_INTENSITY_PERCENT, 1) if intensity > 0 else 0.0,
        has_rpe_data=rpe_logged,
        avg_rpe=round(avg_rpe, 1) if avg_rpe is not None else None,
        hard_sets=analytics.count_hard_sets(working) if rpe_logged else None,
        fatigue_index=round(analytics.calculate_fatigue_index(avg_rpe, len(working)), 1) if rpe_logged else None,
    )


async def get_effort_analytics(
    db: AsyncSession,
    weeks: int = TRAINING_LOAD_WEEKS,
    today: date | None = None,
) -> EffortAnalytics:
    """RPE, hard sets and fatigue over the last ``weeks`` weeks.

    Weeks without any RPE assume an average of 7 for their fatigue score.
    """
    today = today or utcnow().date()
    sessions = await load_sessions(db, since=_day_start(today - timedelta(weeks=weeks)))
    working: list[WorkoutSet] = []
    per_week: dict[date, list[WorkoutSet]] = defaultdict(list)
    seconds = 0
    for session in sessions:
        seconds += _session_seconds(session)
        key = analytics.week_start(_session_day(session))
        for we in session.exercises:
            sets = analytics.active_sets(we.sets)
            working.extend(sets)
            per_week[key].extend(sets)

    avg_rpe = analytics.average_rpe(working)
    weekly_fatigue = []
    for key in sorted(per_week):
        week_rpe = analytics.average_rpe(per_week[key])
        rpe = week_rpe if week_rpe is not None else DEFAULT_WEEK_RPE
        weekly_fatigue.append(WeeklyFatigue(week_start=key, fatigue=round(rpe * len(per_week[key]), 1)))
    density = analytics.calculate_effort_density(analytics.calculate_exercise_volume(working), seconds)
    return EffortAnalytics(
        weeks=weeks,
        avg_rpe=round(avg_rpe, 1) if avg_rpe is not None else None,
        hard_set_count=analytics.count_hard_sets(working),
        total_sets=len(working),
        effort_density=round(density, 1),
        fatigue_index=round(analytics.calculate_fatigue_index(avg_rpe, len(working)), 1),
        effort_level=analytics.categorize_effort_level(avg_rpe),
        weekly_fatigue=weekly_fatigue,
    )
