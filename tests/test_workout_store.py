"""Tests for workout lifecycle writes and soft deletes."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ironlog.core.exceptions import ConflictError, NotFoundError, WorkoutSaveError
from ironlog.core.exercise_catalog import builtin_exercise_id
from ironlog.models import Workout, WorkoutExercise
from ironlog.schemas.workout import (
    SetCreate,
    SetInput,
    WorkoutExerciseInput,
    WorkoutFinish,
    WorkoutStart,
    WorkoutUpdate,
)
from ironlog.services import insights, workout_store
from ironlog.services.reconciler import SnapshotReconciler

SQUAT = [("squat", [{"weight_kg": 60, "reps": 5, "is_warmup": True}, {"weight_kg": 120, "reps": 5}])]


class TestFinishWorkout:
    """Tests for the batch save at the end of a session."""

    async def test_only_completed_sets_are_saved(self, db):
        workout = await workout_store.start_workout(db, WorkoutStart(name="Legs"))
        payload = WorkoutFinish(
            exercises=[
                WorkoutExerciseInput(
                    exercise_id=builtin_exercise_id("squat"),
                    sets=[
                        SetInput(weight_kg=100, reps=5),
                        SetInput(weight_kg=110, reps=5, completed=False),
                        SetInput(weight_kg=120, reps=3),
                    ],
                ),
                WorkoutExerciseInput(
                    exercise_id=builtin_exercise_id("leg-curl"),
                    sets=[SetInput(weight_kg=40, reps=12, completed=False)],
                ),
            ]
        )
        await workout_store.finish_workout(db, workout.id, payload)

        detail = await insights.get_workout_details(db, workout.id)
        assert detail.completed_at is not None
        assert [e.exercise.name for e in detail.exercises] == ["Back Squat"]
        assert [(s.set_number, s.weight_kg) for s in detail.exercises[0].sets] == [(1, 100), (2, 120)]

    async def test_finishing_twice_conflicts(self, db, log_workout):
        workout = await log_workout(SQUAT)
        with pytest.raises(ConflictError):
            await workout_store.finish_workout(db, workout.id, WorkoutFinish())

    async def test_completed_before_start_conflicts(self, db):
        started = datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc)
        workout = await workout_store.start_workout(db, WorkoutStart(started_at=started))
        with pytest.raises(ConflictError):
            await workout_store.finish_workout(
                db, workout.id, WorkoutFinish(completed_at=started - timedelta(minutes=5))
            )

    async def test_unknown_exercise(self, db):
        workout = await workout_store.start_workout(db, WorkoutStart())
        payload = WorkoutFinish(exercises=[WorkoutExerciseInput(exercise_id=uuid.uuid4(), sets=[SetInput(reps=5)])])
        with pytest.raises(NotFoundError):
            await workout_store.finish_workout(db, workout.id, payload)

    async def test_failed_save_rolls_back(self, db, session_maker, monkeypatch):
        """A failure mid-save leaves no half-finished workout behind."""
        workout = await workout_store.start_workout(db, WorkoutStart(name="Legs"))
        await db.commit()

        async def broken_snapshot(self, workout_id):
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(SnapshotReconciler, "record_snapshot", broken_snapshot)
        payload = WorkoutFinish(
            exercises=[WorkoutExerciseInput(exercise_id=builtin_exercise_id("squat"), sets=[SetInput(weight_kg=100, reps=5)])]
        )
        with pytest.raises(WorkoutSaveError):
            await workout_store.finish_workout(db, workout.id, payload)

        async with session_maker() as fresh:
            stored = await fresh.get(Workout, workout.id)
            assert stored.completed_at is None
            exercises = await fresh.execute(select(WorkoutExercise).where(WorkoutExercise.workout_id == workout.id))
            assert exercises.scalars().all() == []


class TestEdits:
    async def test_add_set_numbers_after_last(self, db, log_workout):
        workout = await log_workout(SQUAT)
        detail = await insights.get_workout_details(db, workout.id)
        we_id = detail.exercises[0].id

        s = await workout_store.add_set(db, we_id, SetCreate(weight_kg=125, reps=3))
        assert s.set_number == 3

    async def test_update_workout_rejects_inverted_times(self, db, log_workout):
        workout = await log_workout(SQUAT)
        with pytest.raises(ConflictError):
            await workout_store.update_workout(
                db, workout.id, WorkoutUpdate(completed_at=workout.started_at - timedelta(hours=1))
            )

    async def test_start_from_template_requires_live_template(self, db):
        with pytest.raises(NotFoundError):
            await workout_store.start_workout(db, WorkoutStart(template_id=uuid.uuid4()))


class TestSoftDelete:
    """Soft deletes are idempotent and hide rows from every read."""

    async def test_delete_workout_twice(self, db, log_workout):
        workout = await log_workout(SQUAT)
        assert await workout_store.soft_delete_workout(db, workout.id) is True
        assert await workout_store.soft_delete_workout(db, workout.id) is False

        assert await insights.get_workout_details(db, workout.id) is None
        assert await insights.list_workouts(db) == []
        with pytest.raises(NotFoundError):
            await workout_store.get_live_workout(db, workout.id)

    async def test_delete_unknown_workout(self, db):
        with pytest.raises(NotFoundError):
            await workout_store.soft_delete_workout(db, uuid.uuid4())

    async def test_deleted_sets_drop_out_of_counts(self, db, log_workout):
        workout = await log_workout(SQUAT)
        detail = await insights.get_workout_details(db, workout.id)
        working = detail.exercises[0].sets[1]

        assert await workout_store.soft_delete_set(db, working.id) is True
        assert await workout_store.soft_delete_set(db, working.id) is False

        detail = await insights.get_workout_details(db, workout.id)
        assert detail.set_count == 1
        assert detail.working_set_count == 0
        assert detail.total_volume_kg == 0

        [summary] = await insights.list_workouts(db)
        assert summary.set_count == 1
        assert summary.total_volume_kg == 0

    async def test_delete_exercise(self, db, log_workout):
        workout = await log_workout(SQUAT + [("leg-curl", [{"weight_kg": 40, "reps": 12}])])
        detail = await insights.get_workout_details(db, workout.id)

        assert await workout_store.soft_delete_exercise(db, detail.exercises[0].id) is True
        assert await workout_store.soft_delete_exercise(db, detail.exercises[0].id) is False

        detail = await insights.get_workout_details(db, workout.id)
        assert [e.exercise.name for e in detail.exercises] == ["Leg Curl"]
        assert detail.total_volume_kg == 480
