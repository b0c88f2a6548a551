"""Tests for the pure training math."""

import uuid
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from ironlog.core.enums import BalanceStatus, EffortLevel, LoadLevel, RecoveryStatus, WorkoutSuggestion
from ironlog.services import analytics


def make_set(weight_kg=None, reps=None, is_warmup=False, is_deleted=False, rpe=None, rir=None, set_number=1):
    return SimpleNamespace(
        weight_kg=weight_kg,
        reps=reps,
        is_warmup=is_warmup,
        is_deleted=is_deleted,
        rpe=rpe,
        rir=rir,
        set_number=set_number,
    )


def sessions_from(maxima, start=None):
    start = start or datetime(2026, 1, 1, tzinfo=timezone.utc)
    return [
        analytics.SessionMax(uuid.uuid4(), start + timedelta(days=i), weight)
        for i, weight in enumerate(maxima)
    ]


class TestVolume:
    """Tests for set/exercise volume and set counts."""

    def test_set_volume(self):
        assert analytics.calculate_set_volume(100, 5) == 500

    def test_set_volume_missing_values(self):
        """Missing weight or reps contributes nothing."""
        assert analytics.calculate_set_volume(None, 5) == 0
        assert analytics.calculate_set_volume(100, None) == 0

    def test_exercise_volume_skips_warmups_and_deleted(self):
        sets = [
            make_set(40, 10, is_warmup=True),
            make_set(100, 5),
            make_set(100, 5, is_deleted=True),
            make_set(None, 8),
        ]
        assert analytics.calculate_exercise_volume(sets) == 500
        assert analytics.calculate_exercise_volume(sets, include_warmups=True) == 900

    def test_counts_keep_sets_without_load(self):
        """A set missing weight still counts as a performed set."""
        sets = [make_set(40, 10, is_warmup=True), make_set(None, 8), make_set(100, 5, is_deleted=True)]
        assert analytics.count_sets(sets) == 2
        assert analytics.count_working_sets(sets) == 1


class TestDuration:
    def test_duration_seconds(self):
        start = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)
        assert analytics.calculate_duration_seconds(start, start + timedelta(minutes=45)) == 2700

    def test_in_progress_has_no_duration(self):
        assert analytics.calculate_duration_seconds(datetime.now(timezone.utc), None) is None

    @pytest.mark.parametrize(
        "seconds,expected",
        [(None, ""), (0, "0:00"), (125, "2:05"), (3725, "1:02:05")],
    )
    def test_format_duration(self, seconds, expected):
        assert analytics.format_duration(seconds) == expected


class TestOneRepMax:
    """Tests for the Brzycki estimate."""

    def test_brzycki(self):
        assert analytics.calculate_1rm(100, 5) == pytest.approx(112.5)

    def test_single_rep_is_the_weight(self):
        assert analytics.calculate_1rm(140, 1) == pytest.approx(140)

    @pytest.mark.parametrize("reps", [None, 0, 37, 50])
    def test_out_of_range_reps(self, reps):
        assert analytics.calculate_1rm(100, reps) is None

    def test_best_e1rm_ignores_warmups(self):
        sets = [make_set(200, 1, is_warmup=True), make_set(100, 5), make_set(90, 8)]
        assert analytics.best_e1rm(sets) == pytest.approx(112.5)

    def test_session_max_weight(self):
        sets = [make_set(120, 3, is_warmup=True), make_set(100, 5), make_set(110, None)]
        assert analytics.session_max_weight(sets) == 100


class TestPRDetection:
    """Tests for chronological PR detection."""

    def test_monotonic_pr_events(self):
        """[80, 75, 90, 90, 95]: baseline, then 90 and 95; the repeated 90 is not a PR."""
        sessions = sessions_from([80, 75, 90, 90, 95])
        events = analytics.detect_pr_events(sessions)

        assert [e.weight_kg for e in events] == [80, 90, 95]
        assert [e.workout_id for e in events] == [sessions[0].workout_id, sessions[2].workout_id, sessions[4].workout_id]
        assert [e.is_new for e in events] == [False, True, True]
        assert [e.previous_best_kg for e in events] == [None, 80, 90]

    def test_unordered_input_is_sorted(self):
        sessions = sessions_from([80, 75, 90])
        events = analytics.detect_pr_events(list(reversed(sessions)))
        assert [e.weight_kg for e in events] == [80, 90]

    def test_no_sessions(self):
        assert analytics.detect_pr_events([]) == []

    def test_recent_filter_is_newest_first(self):
        now = datetime(2026, 3, 1, tzinfo=timezone.utc)
        sessions = sessions_from([80, 90, 100], start=now - timedelta(days=40))
        sessions[2] = sessions[2]._replace(completed_at=now - timedelta(days=2))
        events = analytics.detect_pr_events(sessions)

        recent = analytics.filter_recent_prs(events, now=now, days=30)
        assert [e.weight_kg for e in recent] == [100]
        everything = analytics.filter_recent_prs(events, now=now)
        assert [e.weight_kg for e in everything] == [100, 90, 80]
        assert len(analytics.filter_recent_prs(events, now=now, limit=2)) == 2


class TestStreaks:
    """Tests for consecutive-day streaks."""

    def test_streak_boundary(self):
        """Days [today, today-1, today-3] give current 2 and longest 2."""
        today = date(2026, 3, 10)
        summary = analytics.calculate_streaks([today, today - timedelta(days=1), today - timedelta(days=3)], today)
        assert summary.current_streak == 2
        assert summary.longest_streak == 2
        assert summary.worked_out_today is True
        assert summary.is_active is True

    def test_grace_day(self):
        """No workout today yet: the streak still counts from yesterday."""
        today = date(2026, 3, 10)
        days = [today - timedelta(days=1), today - timedelta(days=2)]
        summary = analytics.calculate_streaks(days, today)
        assert summary.current_streak == 2
        assert summary.worked_out_today is False
        assert summary.is_active is True

    def test_broken_streak(self):
        today = date(2026, 3, 10)
        days = [today - timedelta(days=2), today - timedelta(days=3), today - timedelta(days=4)]
        summary = analytics.calculate_streaks(days, today)
        assert summary.current_streak == 0
        assert summary.longest_streak == 3
        assert summary.is_active is False

    def test_duplicate_days_count_once(self):
        today = date(2026, 3, 10)
        summary = analytics.calculate_streaks([today, today], today)
        assert summary.current_streak == 1
        assert summary.total_days == 1

    def test_empty(self):
        summary = analytics.calculate_streaks([], date(2026, 3, 10))
        assert summary.current_streak == 0
        assert summary.last_workout_date is None


class TestTrend:
    @pytest.mark.parametrize(
        "current,previous,expected",
        [(10, 0, 100), (0, 0, 0), (110, 100, 10), (95, 100, -5), (150, 100, 50), (0, 100, -100)],
    )
    def test_calculate_trend(self, current, previous, expected):
        assert analytics.calculate_trend(current, previous) == expected

    def test_week_starts_on_monday(self):
        assert analytics.week_start(date(2026, 3, 12)) == date(2026, 3, 9)
        assert analytics.week_start(date(2026, 3, 9)) == date(2026, 3, 9)


class TestRecovery:
    """Tests for fatigue decay and recovery bands."""

    def test_untrained_is_fully_recovered(self):
        assert analytics.calculate_recovery("Chest", 0, 0) == 100

    def test_full_fatigue_right_after_session(self):
        assert analytics.calculate_recovery("Chest", 5000, 0) == 0

    def test_linear_decay(self):
        """Half of the Chest window leaves half the fatigue."""
        assert analytics.calculate_recovery("Chest", 5000, 42) == pytest.approx(50)

    def test_past_window(self):
        assert analytics.calculate_recovery("Biceps", 1500, 60) == 100

    def test_unknown_muscle_uses_defaults(self):
        assert analytics.calculate_recovery("Forearms", 2500, 0) == pytest.approx(50)

    @pytest.mark.parametrize(
        "value,status",
        [
            (100, RecoveryStatus.READY),
            (70, RecoveryStatus.READY),
            (69.9, RecoveryStatus.RECOVERING),
            (40, RecoveryStatus.RECOVERING),
            (39.9, RecoveryStatus.FATIGUED),
        ],
    )
    def test_status_bands(self, value, status):
        assert analytics.recovery_status(value) == status


class TestSuggestion:
    def test_everything_fresh(self):
        suggestion = analytics.suggest_workout({})
        assert suggestion.type == WorkoutSuggestion.FULL

    def test_legs_fatigued(self):
        levels = {"Quads": 10, "Hamstrings": 20, "Glutes": 10, "Calves": 30}
        suggestion = analytics.suggest_workout(levels)
        assert suggestion.type == WorkoutSuggestion.UPPER
        assert "Chest" in suggestion.fresh_muscles

    def test_upper_fatigued(self):
        levels = {m: 10 for m in ("Chest", "Shoulders", "Back", "Biceps", "Triceps")}
        assert analytics.suggest_workout(levels).type == WorkoutSuggestion.LOWER

    def test_everything_fatigued(self):
        levels = {m: 20 for m in ("Chest", "Shoulders", "Back", "Biceps", "Triceps", "Quads", "Hamstrings", "Glutes", "Calves")}
        suggestion = analytics.suggest_workout(levels)
        assert suggestion.type == WorkoutSuggestion.REST
        assert suggestion.fresh_muscles == []


class TestBalance:
    def test_ratio(self):
        assert analytics.balance_ratio(120, 100) == 1.2
        assert analytics.balance_ratio(100, 0) is None

    @pytest.mark.parametrize(
        "numerator,denominator,status",
        [
            (0, 0, BalanceStatus.INSUFFICIENT_DATA),
            (100, 0, BalanceStatus.NUMERATOR_DOMINANT),
            (130, 100, BalanceStatus.NUMERATOR_DOMINANT),
            (100, 100, BalanceStatus.BALANCED),
            (120, 100, BalanceStatus.BALANCED),
            (80, 100, BalanceStatus.DENOMINATOR_DOMINANT),
        ],
    )
    def test_status(self, numerator, denominator, status):
        assert analytics.balance_status(numerator, denominator) == status


class TestGhostSets:
    def test_working_sets_with_load_in_order(self):
        sets = [
            make_set(105, 3, set_number=3),
            make_set(40, 10, is_warmup=True, set_number=1),
            make_set(100, 5, set_number=2),
            make_set(None, 8, set_number=4),
            make_set(110, 1, is_deleted=True, set_number=5),
        ]
        assert [(s.weight_kg, s.reps) for s in analytics.ghost_sets(sets)] == [(100, 5), (105, 3)]


class TestEffort:
    """Tests for RPE-based effort metrics."""

    @pytest.mark.parametrize(
        "rpe,rir,hard",
        [(8, None, True), (7.5, None, False), (None, 2, True), (None, 3, False), (None, None, False), (6, 1, True)],
    )
    def test_hard_set(self, rpe, rir, hard):
        assert analytics.is_hard_set(make_set(100, 5, rpe=rpe, rir=rir)) is hard

    def test_average_rpe_ignores_unrated_and_warmups(self):
        sets = [make_set(100, 5, rpe=8), make_set(100, 5), make_set(100, 5, rpe=9), make_set(40, 10, is_warmup=True, rpe=6)]
        assert analytics.average_rpe(sets) == 8.5
        assert analytics.average_rpe([make_set(100, 5)]) is None

    def test_rpe_data_needs_thirty_percent(self):
        rated = [make_set(100, 5, rpe=8)] + [make_set(100, 5) for _ in range(2)]
        sparse = [make_set(100, 5, rpe=8)] + [make_set(100, 5) for _ in range(3)]
        assert analytics.has_rpe_data(rated) is True
        assert analytics.has_rpe_data(sparse) is False
        assert analytics.has_rpe_data([]) is False

    def test_density_and_fatigue(self):
        assert analytics.calculate_effort_density(1800, 1800) == 60
        assert analytics.calculate_effort_density(1800, 0) == 0
        assert analytics.calculate_fatigue_index(8.5, 4) == 34
        assert analytics.calculate_fatigue_index(None, 4) == 0

    @pytest.mark.parametrize(
        "avg_rpe,level",
        [(None, EffortLevel.UNKNOWN), (6.5, EffortLevel.LIGHT), (7, EffortLevel.MODERATE), (8.5, EffortLevel.HARD), (9, EffortLevel.MAX)],
    )
    def test_effort_level(self, avg_rpe, level):
        assert analytics.categorize_effort_level(avg_rpe) == level


class TestTrainingLoad:
    @pytest.mark.parametrize(
        "current,average,level,gauge",
        [
            (0, 0, LoadLevel.MODERATE, 50),
            (100, 100, LoadLevel.MODERATE, 50),
            (50, 100, LoadLevel.LIGHT, 25),
            (10, 100, LoadLevel.LIGHT, 10),
            (150, 100, LoadLevel.HEAVY, 75),
            (300, 100, LoadLevel.HEAVY, 95),
        ],
    )
    def test_load_level(self, current, average, level, gauge):
        result_level, result_gauge = analytics.calculate_load_level(current, average)
        assert result_level == level
        assert result_gauge == pytest.approx(gauge)

    def test_intensity_is_relative_to_each_exercise_top_set(self):
        by_exercise = {
            "bench": [make_set(100, 5), make_set(80, 5)],
            "squat": [make_set(150, 5), make_set(60, 10, is_warmup=True)],
        }
        assert analytics.average_intensity_percent(by_exercise) == pytest.approx((100 + 80 + 100) / 3)
        assert analytics.average_intensity_percent({}) == 0

    def test_percent_change(self):
        assert analytics.percent_change(120, 100) == pytest.approx(20)
        assert analytics.percent_change(5, 0) == 0
