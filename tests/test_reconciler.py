"""Tests for the snapshot reconciler (rows <-> canonical documents)."""

import uuid

import pytest
from sqlalchemy import delete, func, select

from ironlog.core.constants import SCHEMA_VERSION
from ironlog.core.exceptions import CanonicalValidationError, NotFoundError
from ironlog.core.exercise_catalog import builtin_exercise_id
from ironlog.models import ExerciseDefinition, WorkoutExercise, WorkoutSet, WorkoutSnapshot
from ironlog.schemas.workout import SetUpdate
from ironlog.services import workout_store
from ironlog.services.migration import migrate_workout
from ironlog.services.reconciler import SnapshotReconciler

BENCH_AND_ROW = [
    ("bench-press", [{"weight_kg": 40, "reps": 10, "is_warmup": True}, {"weight_kg": 100, "reps": 5, "rpe": 8}]),
    ("barbell-row", [{"weight_kg": 80, "reps": 8}, {"weight_kg": 80, "reps": 7, "is_failure": True}]),
]


async def snapshot_count(db, workout_id):
    result = await db.execute(select(func.count(WorkoutSnapshot.id)).where(WorkoutSnapshot.workout_id == workout_id))
    return result.scalar()


async def first_set(db, workout_id):
    result = await db.execute(
        select(WorkoutSet)
        .join(WorkoutExercise, WorkoutExercise.id == WorkoutSet.workout_exercise_id)
        .where(WorkoutExercise.workout_id == workout_id)
        .order_by(WorkoutExercise.order, WorkoutSet.set_number)
    )
    return result.scalars().first()


class TestBuildCanonicalWorkout:
    """Tests for serializing normalized rows."""

    async def test_round_trip(self, db, log_workout):
        """build -> migrate -> validate matches the source rows."""
        workout = await log_workout(BENCH_AND_ROW)
        built = await SnapshotReconciler(db).build_canonical_workout(workout.id)
        doc = migrate_workout(built.model_dump(mode="json"))

        assert doc.schema_version == SCHEMA_VERSION
        assert doc.workout_id == workout.id
        assert doc.metadata.name == "Session"
        assert [e.exercise_definition.name for e in doc.exercises] == ["Bench Press", "Barbell Row"]
        assert [e.exercise_ref_id for e in doc.exercises] == [
            builtin_exercise_id("bench-press"),
            builtin_exercise_id("barbell-row"),
        ]
        bench_sets = doc.exercises[0].sets
        assert [(s.set_number, s.weight_kg, s.reps, s.is_warmup) for s in bench_sets] == [
            (1, 40, 10, True),
            (2, 100, 5, False),
        ]
        assert bench_sets[1].rpe == 8
        assert doc.exercises[1].sets[1].is_failure is True
        assert doc.model_dump(exclude={"created_at", "updated_at"}) == built.model_dump(
            exclude={"created_at", "updated_at"}
        )

    async def test_deleted_rows_are_left_out(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        s = await first_set(db, workout.id)
        await workout_store.soft_delete_set(db, s.id)

        doc = await SnapshotReconciler(db).build_canonical_workout(workout.id)
        assert [x.set_number for x in doc.exercises[0].sets] == [2]

    async def test_missing_definition_skips_exercise(self, db, log_workout):
        """A deleted catalog row drops that exercise instead of failing the read."""
        workout = await log_workout(BENCH_AND_ROW)
        row = await db.get(ExerciseDefinition, builtin_exercise_id("barbell-row"))
        row.mark_deleted()
        await db.flush()

        doc = await SnapshotReconciler(db).build_canonical_workout(workout.id)
        assert [e.exercise_definition.name for e in doc.exercises] == ["Bench Press"]

    async def test_unknown_workout(self, db):
        with pytest.raises(NotFoundError):
            await SnapshotReconciler(db).build_canonical_workout(uuid.uuid4())


class TestGetCanonicalWorkout:
    """Tests for snapshot-first reads."""

    async def test_finish_records_snapshot(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        assert await snapshot_count(db, workout.id) == 1

    async def test_prefers_snapshot_over_rows(self, db, log_workout):
        """Row changes that bypass the save path are not visible until the next snapshot."""
        workout = await log_workout(BENCH_AND_ROW)
        s = await first_set(db, workout.id)
        s.weight_kg = 45
        await db.flush()

        doc = await SnapshotReconciler(db).get_canonical_workout(workout.id)
        assert doc.exercises[0].sets[0].weight_kg == 40

    async def test_newest_snapshot_wins(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        s = await first_set(db, workout.id)
        await workout_store.update_set(db, s.id, SetUpdate(weight_kg=50))

        assert await snapshot_count(db, workout.id) == 2
        doc = await SnapshotReconciler(db).get_canonical_workout(workout.id)
        assert doc.exercises[0].sets[0].weight_kg == 50

    async def test_rebuilds_when_no_snapshot(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        await db.execute(delete(WorkoutSnapshot).where(WorkoutSnapshot.workout_id == workout.id))
        await db.flush()

        doc = await SnapshotReconciler(db).get_canonical_workout(workout.id)
        assert doc is not None
        assert len(doc.exercises) == 2
        assert await snapshot_count(db, workout.id) == 0

    async def test_deleted_workout_returns_none(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        await workout_store.soft_delete_workout(db, workout.id)
        assert await SnapshotReconciler(db).get_canonical_workout(workout.id) is None

    async def test_absent_workout_returns_none(self, db):
        assert await SnapshotReconciler(db).get_canonical_workout(uuid.uuid4()) is None

    async def test_corrupt_snapshot_is_a_validation_error(self, db, log_workout):
        workout = await log_workout(BENCH_AND_ROW)
        db.add(WorkoutSnapshot(workout_id=workout.id, schema_version=SCHEMA_VERSION, json_data="{not json"))
        await db.flush()

        with pytest.raises(CanonicalValidationError):
            await SnapshotReconciler(db).get_canonical_workout(workout.id)
