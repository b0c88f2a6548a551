"""Training math: volume, e1RM, PRs, streaks, trends, recovery, balance and effort.

Everything here is pure (no I/O, no clock reads unless a time is passed in) and
works on any set-like object exposing ``weight_kg``, ``reps``, ``is_warmup`` and
``is_deleted`` - ORM rows and canonical document sets alike.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, NamedTuple

from ironlog.core.constants import (
    BALANCE_RATIO_THRESHOLD,
    DEFAULT_MAX_FATIGUE_VOLUME,
    DEFAULT_RECOVERY_HOURS,
    E1RM_MAX_REPS,
    E1RM_MIN_REPS,
    EFFORT_HARD_BELOW,
    EFFORT_LIGHT_BELOW,
    EFFORT_MODERATE_BELOW,
    HARD_SET_MAX_RIR,
    HARD_SET_MIN_RPE,
    LOAD_HEAVY_RATIO,
    LOAD_LIGHT_RATIO,
    LOWER_BODY_GROUPS,
    MAX_FATIGUE_VOLUMES,
    MUSCLE_RECOVERY_HOURS,
    RECOVERY_READY_THRESHOLD,
    RECOVERY_RECOVERING_THRESHOLD,
    RPE_DATA_MIN_SHARE,
    SUGGESTION_FATIGUED_THRESHOLD,
    UPPER_BODY_GROUPS,
)
from ironlog.core.enums import BalanceStatus, EffortLevel, LoadLevel, RecoveryStatus, WorkoutSuggestion


# ── Volume / counts ─────────────────────────────────────────────────────────


def calculate_set_volume(weight_kg: float | None, reps: int | None) -> float:
    """weight x reps; 0 when either is missing."""
    if weight_kg is None or reps is None:
        return 0.0
    return float(weight_kg) * int(reps)


def has_load(s: Any) -> bool:
    """Set carries both weight and reps (eligible for volume/e1RM)."""
    return s.weight_kg is not None and s.reps is not None


def active_sets(sets: Iterable[Any], include_warmups: bool = False) -> list[Any]:
    return [
        s for s in sets
        if not getattr(s, "is_deleted", False) and (include_warmups or not s.is_warmup)
    ]


def calculate_exercise_volume(sets: Iterable[Any], include_warmups: bool = False) -> float:
    """Sum of set volumes, skipping deleted sets and (by default) warmups."""
    return sum(calculate_set_volume(s.weight_kg, s.reps) for s in active_sets(sets, include_warmups))


def count_sets(sets: Iterable[Any], include_warmups: bool = True) -> int:
    """Count-based stat: sets with missing weight/reps still count."""
    return len(active_sets(sets, include_warmups))


def count_working_sets(sets: Iterable[Any]) -> int:
    return count_sets(sets, include_warmups=False)


def calculate_duration_seconds(started_at: datetime | None, completed_at: datetime | None) -> int | None:
    if started_at is None or completed_at is None:
        return None
    return max(0, int((completed_at - started_at).total_seconds()))


def format_duration(seconds: int | None) -> str:
    """H:MM:SS, or M:SS under an hour; empty string when unknown."""
    if seconds is None:
        return ""
    hours, rem = divmod(int(seconds), 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


# ── e1RM / PRs ──────────────────────────────────────────────────────────────


def calculate_1rm(weight_kg: float | None, reps: int | None) -> float | None:
    """Brzycki estimate, weight * 36 / (37 - reps); None outside 1..36 reps."""
    if weight_kg is None or reps is None:
        return None
    if reps < E1RM_MIN_REPS or reps > E1RM_MAX_REPS:
        return None
    return float(weight_kg) * (36 / (37 - reps))


def best_e1rm(sets: Iterable[Any]) -> float | None:
    estimates = [calculate_1rm(s.weight_kg, s.reps) for s in active_sets(sets) if has_load(s)]
    estimates = [e for e in estimates if e is not None]
    return max(estimates) if estimates else None


def session_max_weight(sets: Iterable[Any]) -> float | None:
    """Heaviest working set with both weight and reps logged."""
    weights = [float(s.weight_kg) for s in active_sets(sets) if has_load(s)]
    return max(weights) if weights else None


def ghost_sets(sets: Iterable[Any]) -> list[Any]:
    """Working sets with weight and reps, in set order; shown as targets next session."""
    return sorted((s for s in active_sets(sets) if has_load(s)), key=lambda s: s.set_number)


class SessionMax(NamedTuple):
    workout_id: uuid.UUID
    completed_at: datetime
    max_weight_kg: float


@dataclass
class PREvent:
    workout_id: uuid.UUID
    achieved_at: datetime
    weight_kg: float
    previous_best_kg: float | None
    is_new: bool  # False for the baseline session


def detect_pr_events(sessions: Iterable[SessionMax]) -> list[PREvent]:
    """Walk sessions chronologically; a session max strictly above the running max is a PR.

    Returned oldest first. The first session is a baseline (``is_new=False``).
    """
    events: list[PREvent] = []
    running_max = 0.0
    for session in sorted(sessions, key=lambda s: s.completed_at):
        if session.max_weight_kg > running_max:
            events.append(
                PREvent(
                    workout_id=session.workout_id,
                    achieved_at=session.completed_at,
                    weight_kg=session.max_weight_kg,
                    previous_best_kg=running_max if running_max > 0 else None,
                    is_new=running_max > 0,
                )
            )
            running_max = session.max_weight_kg
    return events


def filter_recent_prs(
    events: Iterable[PREvent],
    now: datetime,
    days: int | None = None,
    limit: int | None = None,
) -> list[PREvent]:
    """Most recent first, optionally limited to the last ``days`` days."""
    selected = list(events)
    if days is not None:
        cutoff = now - timedelta(days=days)
        selected = [e for e in selected if e.achieved_at >= cutoff]
    selected.sort(key=lambda e: e.achieved_at, reverse=True)
    return selected[:limit] if limit is not None else selected


# ── Streaks / trends ────────────────────────────────────────────────────────


@dataclass
class StreakSummary:
    current_streak: int = 0
    longest_streak: int = 0
    worked_out_today: bool = False
    is_active: bool = False
    last_workout_date: date | None = None
    total_days: int = 0


def calculate_streaks(days: Iterable[date], today: date) -> StreakSummary:
    """Consecutive-day streaks over unique calendar days.

    The current streak counts back from today, or from yesterday when there is
    no workout today (one-day grace).
    """
    unique_days = sorted(set(days), reverse=True)
    if not unique_days:
        return StreakSummary()

    yesterday = today - timedelta(days=1)
    last_day = unique_days[0]
    worked_out_today = last_day == today

    current = 0
    expected = today if worked_out_today else yesterday
    for d in unique_days:
        if d > expected:
            continue  # future-dated rows
        if d != expected:
            break
        current += 1
        expected -= timedelta(days=1)

    longest = run = 1
    for prev, d in zip(unique_days, unique_days[1:]):
        if d == prev - timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1

    return StreakSummary(
        current_streak=current,
        longest_streak=longest,
        worked_out_today=worked_out_today,
        is_active=last_day >= yesterday,
        last_workout_date=last_day,
        total_days=len(unique_days),
    )


def calculate_trend(current: float, previous: float) -> int:
    """Percent change vs previous, rounded half up. previous == 0 -> 100 or 0."""
    if previous == 0:
        return 100 if current > 0 else 0
    return math.floor(((current - previous) / previous) * 100 + 0.5)


def week_start(d: date) -> date:
    """Monday of the week containing ``d``."""
    return d - timedelta(days=d.weekday())


# ── Recovery ────────────────────────────────────────────────────────────────


def calculate_recovery(muscle: str, volume_kg: float, hours_since: float) -> float:
    """Recovery percent (0-100) after linear decay of one session's fatigue."""
    window = MUSCLE_RECOVERY_HOURS.get(muscle, DEFAULT_RECOVERY_HOURS)
    max_volume = MAX_FATIGUE_VOLUMES.get(muscle, DEFAULT_MAX_FATIGUE_VOLUME)
    decay = 1 - (hours_since / window)
    fatigue = volume_kg * decay if decay > 0 else 0.0
    fatigue_percent = min(100.0, (fatigue / max_volume) * 100)
    return max(0.0, 100.0 - fatigue_percent)


def recovery_status(recovery: float) -> RecoveryStatus:
    if recovery >= RECOVERY_READY_THRESHOLD:
        return RecoveryStatus.READY
    if recovery >= RECOVERY_RECOVERING_THRESHOLD:
        return RecoveryStatus.RECOVERING
    return RecoveryStatus.FATIGUED


@dataclass
class Suggestion:
    type: WorkoutSuggestion
    message: str
    reason: str
    fresh_muscles: list[str] = field(default_factory=list)


def suggest_workout(recovery_by_muscle: dict[str, float]) -> Suggestion:
    """Pick upper/lower/full/rest from average upper vs lower recovery.

    Muscles missing from the mapping count as fully recovered.
    """
    def level(m: str) -> float:
        return recovery_by_muscle.get(m, 100.0)

    upper = sum(level(m) for m in UPPER_BODY_GROUPS) / len(UPPER_BODY_GROUPS)
    lower = sum(level(m) for m in LOWER_BODY_GROUPS) / len(LOWER_BODY_GROUPS)

    def fresh(groups: Sequence[str]) -> list[str]:
        return [m for m in groups if level(m) >= RECOVERY_READY_THRESHOLD]

    if upper >= RECOVERY_READY_THRESHOLD and lower < SUGGESTION_FATIGUED_THRESHOLD:
        return Suggestion(WorkoutSuggestion.UPPER, "Train Upper Body", "Your legs are still recovering", fresh(UPPER_BODY_GROUPS))
    if lower >= RECOVERY_READY_THRESHOLD and upper < SUGGESTION_FATIGUED_THRESHOLD:
        return Suggestion(WorkoutSuggestion.LOWER, "Train Lower Body", "Your upper body is still recovering", fresh(LOWER_BODY_GROUPS))
    if upper >= RECOVERY_READY_THRESHOLD and lower >= RECOVERY_READY_THRESHOLD:
        return Suggestion(
            WorkoutSuggestion.FULL,
            "Full Body Day",
            "All muscle groups are ready",
            fresh([*UPPER_BODY_GROUPS, *LOWER_BODY_GROUPS]),
        )
    return Suggestion(WorkoutSuggestion.REST, "Rest Day", "Most muscles are still recovering")


# ── Balance ─────────────────────────────────────────────────────────────────


def balance_ratio(numerator: float, denominator: float) -> float | None:
    """numerator / denominator rounded to 2 places; None when undefined."""
    if denominator <= 0:
        return None
    return round(numerator / denominator, 2)


def balance_status(numerator: float, denominator: float) -> BalanceStatus:
    if numerator <= 0 and denominator <= 0:
        return BalanceStatus.INSUFFICIENT_DATA
    if denominator <= 0:
        return BalanceStatus.NUMERATOR_DOMINANT
    ratio = numerator / denominator
    if ratio > BALANCE_RATIO_THRESHOLD:
        return BalanceStatus.NUMERATOR_DOMINANT
    if ratio < 1 / BALANCE_RATIO_THRESHOLD:
        return BalanceStatus.DENOMINATOR_DOMINANT
    return BalanceStatus.BALANCED


# ── Training load / effort ──────────────────────────────────────────────────


def is_hard_set(s: Any) -> bool:
    """RPE >= 8 or RIR <= 2."""
    high_rpe = s.rpe is not None and s.rpe >= HARD_SET_MIN_RPE
    low_rir = s.rir is not None and s.rir <= HARD_SET_MAX_RIR
    return high_rpe or low_rir


def count_hard_sets(sets: Iterable[Any]) -> int:
    return sum(1 for s in active_sets(sets) if is_hard_set(s))


def average_rpe(sets: Iterable[Any]) -> float | None:
    rpes = [float(s.rpe) for s in active_sets(sets) if s.rpe is not None]
    return sum(rpes) / len(rpes) if rpes else None


def has_rpe_data(sets: Iterable[Any]) -> bool:
    """Enough working sets carry an RPE for RPE-based metrics to mean anything."""
    working = active_sets(sets)
    if not working:
        return False
    return sum(1 for s in working if s.rpe is not None) / len(working) >= RPE_DATA_MIN_SHARE


def calculate_effort_density(volume_kg: float, duration_seconds: float) -> float:
    """kg per minute of training; 0 without a duration."""
    if duration_seconds <= 0:
        return 0.0
    return volume_kg / (duration_seconds / 60)


def calculate_fatigue_index(avg_rpe: float | None, set_count: int) -> float:
    return avg_rpe * set_count if avg_rpe is not None else 0.0


def categorize_effort_level(avg_rpe: float | None) -> EffortLevel:
    if avg_rpe is None:
        return EffortLevel.UNKNOWN
    if avg_rpe < EFFORT_LIGHT_BELOW:
        return EffortLevel.LIGHT
    if avg_rpe < EFFORT_MODERATE_BELOW:
        return EffortLevel.MODERATE
    if avg_rpe < EFFORT_HARD_BELOW:
        return EffortLevel.HARD
    return EffortLevel.MAX


def average_intensity_percent(sets_by_exercise: dict[Any, list[Any]]) -> float:
    """Mean working-set weight as a percent of the heaviest set of the same exercise."""
    percents: list[float] = []
    for sets in sets_by_exercise.values():
        weights = [float(s.weight_kg) for s in active_sets(sets) if s.weight_kg]
        if not weights:
            continue
        top = max(weights)
        percents.extend(w / top * 100 for w in weights)
    return sum(percents) / len(percents) if percents else 0.0


def percent_change(current: float, baseline: float) -> float:
    """Unrounded percent difference from ``baseline``; 0 when there is no baseline."""
    if baseline <= 0:
        return 0.0
    return (current - baseline) / baseline * 100


def calculate_load_level(current_volume: float, average_volume: float) -> tuple[LoadLevel, float]:
    """Load band for the current week and a 0-100 gauge value.

    light maps to 10-40, moderate to 40-60 and heavy to 60-95.
    """
    if average_volume <= 0:
        return LoadLevel.MODERATE, 50.0
    ratio = current_volume / average_volume
    if ratio < LOAD_LIGHT_RATIO:
        return LoadLevel.LIGHT, max(10.0, ratio * 50)
    if ratio > LOAD_HEAVY_RATIO:
        return LoadLevel.HEAVY, min(95.0, 50 + (ratio - 1) * 50)
    return LoadLevel.MODERATE, 40 + (ratio - LOAD_LIGHT_RATIO) * 50
