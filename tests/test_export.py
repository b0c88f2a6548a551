"""Tests for CSV/JSON exports and canonical import."""

import copy
import csv
import io
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from ironlog.core.constants import EXPORT_VERSION
from ironlog.core.exceptions import CanonicalValidationError
from ironlog.db.base import Base
from ironlog.db.session import enable_sqlite_savepoints
from ironlog.models import ExerciseDefinition, WorkoutSnapshot
from ironlog.schemas.workout import WorkoutStart
from ironlog.services import export, workout_store
from ironlog.services.export import CSV_COLUMNS, format_number
from ironlog.services.reconciler import SnapshotReconciler

WARMUP_AND_WORKING = [
    ("bench-press", [{"weight_kg": 40, "reps": 10, "is_warmup": True}, {"weight_kg": 100, "reps": 5}]),
]


def parse_csv(text):
    return list(csv.DictReader(io.StringIO(text)))


@pytest.fixture
async def empty_db():
    """A second, empty store (no catalog) to import into."""
    engine = create_async_engine(
        "sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSession(engine, expire_on_commit=False, autoflush=False) as session:
        yield session
    await engine.dispose()


class TestFormatNumber:
    @pytest.mark.parametrize(
        "value,expected",
        [(None, ""), (0, "0"), (500.0, "500"), (112.5, "112.5"), (106.6666, "106.67")],
    )
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestCsvExport:
    """Tests for the one-row-per-set CSV."""

    async def test_warmup_and_working_set(self, db, log_workout):
        """Warmup 40x10 and working 100x5: volumes 400/500, e1RM only on the working row."""
        await log_workout(WARMUP_AND_WORKING, minutes=45)
        text = await export.export_csv(db)

        assert text.splitlines()[0].split(",") == CSV_COLUMNS
        rows = parse_csv(text)
        assert len(rows) == 2
        warmup, working = rows
        assert warmup["Exercise"] == "Bench Press"
        assert warmup["Muscle Group"] == "Chest"
        assert warmup["Equipment"] == "barbell"
        assert warmup["Is Warmup"] == "Yes"
        assert warmup["Volume (kg) [calc]"] == "400"
        assert warmup["Est 1RM (kg) [calc]"] == ""
        assert working["Set Number"] == "2"
        assert working["Weight (kg)"] == "100"
        assert working["Volume (kg) [calc]"] == "500"
        assert working["Est 1RM (kg) [calc]"] == "112.5"
        assert working["Duration"] == "45:00"
        assert working["Duration (sec)"] == "2700"

    async def test_missing_values_are_blank(self, db, log_workout):
        await log_workout([("plank", [{"reps": None, "weight_kg": None, "rest_seconds": 60}])])
        [row] = parse_csv(await export.export_csv(db))
        assert row["Weight (kg)"] == ""
        assert row["Reps"] == ""
        assert row["Volume (kg) [calc]"] == ""
        assert row["Est 1RM (kg) [calc]"] == ""

    async def test_deleted_and_unfinished_workouts_are_excluded(self, db, log_workout):
        kept = await log_workout(WARMUP_AND_WORKING, name="Kept")
        gone = await log_workout(WARMUP_AND_WORKING, name="Gone")
        await workout_store.soft_delete_workout(db, gone.id)
        await workout_store.start_workout(db, WorkoutStart(name="In progress"))

        rows = parse_csv(await export.export_csv(db))
        assert {r["Workout Name"] for r in rows} == {kept.name}

    async def test_corrupt_record_is_skipped(self, db, log_workout):
        good = await log_workout(WARMUP_AND_WORKING, name="Good")
        bad = await log_workout(WARMUP_AND_WORKING, name="Bad")
        db.add(WorkoutSnapshot(workout_id=bad.id, schema_version="1.0.0", json_data='{"workout_id": null}'))
        await db.flush()

        workouts = await export.collect_canonical_workouts(db)
        assert [w.workout_id for w in workouts] == [good.id]


class TestJsonExports:
    async def test_canonical_export(self, db, log_workout):
        workout = await log_workout(WARMUP_AND_WORKING)
        result = await export.export_canonical(db)
        assert result.export_version == EXPORT_VERSION
        assert [w.workout_id for w in result.workouts] == [workout.id]

    async def test_simplified_export_labels_derived_fields(self, db, log_workout):
        await log_workout(WARMUP_AND_WORKING, minutes=60)
        result = await export.export_simplified(db)

        assert result["workout_count"] == 1
        [workout] = result["workouts"]
        assert workout["duration_calc"] == "1:00:00"
        assert workout["total_volume_kg_calc"] == 500
        assert workout["total_sets_calc"] == 1
        [exercise] = workout["exercises"]
        assert exercise["volume_kg_calc"] == 500
        assert [s["volume_kg_calc"] for s in exercise["sets"]] == [400, 500]
        assert exercise["sets"][0]["e1rm_kg_calc"] is None
        assert exercise["sets"][1]["e1rm_kg_calc"] == pytest.approx(112.5)


class TestImport:
    """Tests for canonical import."""

    async def test_round_trip_into_empty_store(self, db, log_workout, empty_db):
        """An exported workout imports into a fresh store and rebuilds identically from rows."""
        workout = await log_workout(WARMUP_AND_WORKING)
        exported = await export.export_canonical(db)

        report = await export.import_canonical_workouts(empty_db, exported.model_dump(mode="json"))
        await empty_db.commit()
        assert report.imported == 1
        assert report.errors == []

        rebuilt = await SnapshotReconciler(empty_db).build_canonical_workout(workout.id)
        original = exported.workouts[0]
        assert rebuilt.model_dump(exclude={"created_at", "updated_at"}, mode="json")["exercises"][0]["sets"] == (
            original.model_dump(mode="json")["exercises"][0]["sets"]
        )
        assert rebuilt.metadata.model_dump() == original.metadata.model_dump()
        definition = await empty_db.get(ExerciseDefinition, original.exercises[0].exercise_ref_id)
        assert definition.name == "Bench Press"
        assert definition.is_custom is True

    async def test_imports_and_skips_existing(self, db, log_workout):
        workout = await log_workout(WARMUP_AND_WORKING)
        exported = (await export.export_canonical(db)).model_dump(mode="json")

        report = await export.import_canonical_workouts(db, exported)
        assert report.imported == 0
        assert report.skipped == 1
        assert report.errors == []

        doc = exported["workouts"][0]
        doc["workout_id"] = str(uuid.uuid4())
        for exercise in doc["exercises"]:
            exercise["workout_exercise_id"] = str(uuid.uuid4())
            for s in exercise["sets"]:
                s["set_id"] = str(uuid.uuid4())
        report = await export.import_canonical_workouts(db, {"workouts": [doc]})
        assert report.imported == 1
        assert report.imported_ids == [uuid.UUID(doc["workout_id"])]

        stored = await SnapshotReconciler(db).get_canonical_workout(uuid.UUID(doc["workout_id"]))
        assert [s.weight_kg for s in stored.exercises[0].sets] == [40, 100]
        assert stored.metadata.name == workout.name

    async def test_bad_record_does_not_abort_batch(self, db):
        good = legacy_workout()
        bad = legacy_workout()
        bad["exercises"][0]["sets"][0]["reps"] = "ten"
        report = await export.import_canonical_workouts(db, [bad, good, "nonsense"])

        assert report.imported == 1
        assert report.imported_ids == [uuid.UUID(good["workout_id"])]
        assert [e.index for e in report.errors] == [0, 2]
        assert report.errors[0].workout_id == bad["workout_id"]
        assert any("reps" in d for d in report.errors[0].details)

    async def test_legacy_document_is_migrated(self, db):
        doc = legacy_workout()
        await export.import_canonical_workouts(db, [doc])

        stored = await SnapshotReconciler(db).get_canonical_workout(uuid.UUID(doc["workout_id"]))
        assert stored.schema_version == "1.0.0"
        assert stored.exercises[0].sets[0].weight_kg == 50

    async def test_missing_definition_is_recreated_as_custom(self, db):
        doc = legacy_workout()
        await export.import_canonical_workouts(db, [doc])

        definition = await db.get(ExerciseDefinition, uuid.UUID(doc["exercises"][0]["exercise_ref_id"]))
        assert definition.name == "Landmine Press"
        assert definition.is_custom is True

    async def test_missing_definition_used_twice(self, db):
        """One lift split across two blocks recreates its definition only once."""
        doc = legacy_workout()
        second = copy.deepcopy(doc["exercises"][0])
        second["order"] = 1
        second["sets"] = [{"set_id": str(uuid.uuid4()), "set_number": 1, "weight": 55, "reps": 8}]
        doc["exercises"].append(second)

        report = await export.import_canonical_workouts(db, [doc])
        assert report.errors == []
        assert report.imported == 1

        ref_id = uuid.UUID(doc["exercises"][0]["exercise_ref_id"])
        count = await db.execute(select(func.count(ExerciseDefinition.id)).where(ExerciseDefinition.id == ref_id))
        assert count.scalar() == 1
        stored = await SnapshotReconciler(db).build_canonical_workout(uuid.UUID(doc["workout_id"]))
        assert [e.exercise_ref_id for e in stored.exercises] == [ref_id, ref_id]
        assert [e.sets[0].weight_kg for e in stored.exercises] == [50, 55]

    async def test_payload_without_workouts(self, db):
        with pytest.raises(CanonicalValidationError):
            await export.import_canonical_workouts(db, {"version": "1.0.0"})


def legacy_workout():
    exercise_id = str(uuid.uuid4())
    return {
        "workout_id": str(uuid.uuid4()),
        "created_at": "2025-05-01T09:00:00Z",
        "updated_at": "2025-05-01T10:00:00Z",
        "metadata": {"name": "Old", "started_at": "2025-05-01T09:00:00Z", "completed_at": "2025-05-01T10:00:00Z"},
        "exercises": [
            {
                "exercise_ref_id": exercise_id,
                "order": 0,
                "exercise_definition": {
                    "id": exercise_id,
                    "name": "Landmine Press",
                    "category": "push",
                    "movement_type": "compound",
                    "primary_muscle_groups": ["Shoulders"],
                },
                "sets": [{"set_id": str(uuid.uuid4()), "set_number": 1, "weight": 50, "reps": 10}],
            }
        ],
    }
