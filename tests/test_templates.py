"""Tests for workout templates."""

import uuid

import pytest
from sqlalchemy import select

from ironlog.core.exceptions import ConflictError, NotFoundError
from ironlog.core.exercise_catalog import builtin_exercise_id
from ironlog.models import TemplateExercise
from ironlog.schemas.template import (
    SetTarget,
    TemplateExerciseInput,
    WorkoutTemplateCreate,
    WorkoutTemplateCreateFromWorkout,
)
from ironlog.schemas.workout import WorkoutStart
from ironlog.services import templates, workout_store


def bench_template(**overrides):
    exercise = dict(
        exercise_id=builtin_exercise_id("bench-press"),
        target_sets=3,
        target_reps="8-10",
        target_weight_kg=80,
    )
    exercise.update(overrides)
    return WorkoutTemplateCreate(name="Push A", exercises=[TemplateExerciseInput(**exercise)])


class TestSetTargets:
    """Per-set targets stored as JSON text."""

    async def test_stored_targets_are_returned(self, db):
        payload = bench_template(set_targets=[SetTarget(reps="10", weight_kg=70), SetTarget(reps="8", weight_kg=80)])
        template = await templates.create_template(db, payload)
        targets = template.exercises[0].set_targets
        assert [(t.reps, t.weight_kg) for t in targets] == [("10", 70), ("8", 80)]

    async def test_scalar_targets_repeat_per_set(self, db):
        template = await templates.create_template(db, bench_template())
        targets = template.exercises[0].set_targets
        assert len(targets) == 3
        assert all(t.reps == "8-10" and t.weight_kg == 80 for t in targets)

    @pytest.mark.parametrize("raw", ["{not json", '{"reps": "8"}', '[{"reps": "8", "weight_kg": -5}]'])
    async def test_malformed_targets_fall_back(self, db, raw):
        """Unreadable targets degrade to one default target instead of failing the read."""
        created = await templates.create_template(db, bench_template())
        result = await db.execute(select(TemplateExercise).where(TemplateExercise.template_id == created.id))
        row = result.scalar_one()
        row.set_targets = raw
        await db.flush()

        template = await templates.get_template(db, created.id)
        targets = template.exercises[0].set_targets
        assert [(t.reps, t.weight_kg) for t in targets] == [("8-10", 80)]


class TestTemplates:
    async def test_unknown_exercise(self, db):
        with pytest.raises(NotFoundError):
            await templates.create_template(db, bench_template(exercise_id=uuid.uuid4()))

    async def test_instantiate_stamps_last_used(self, db):
        created = await templates.create_template(db, bench_template())
        assert created.last_used_at is None

        result = await templates.instantiate_template(db, created.id)
        assert result.workout.template_id == created.id
        assert result.workout.name == "Push A"
        assert result.workout.completed_at is None
        assert result.template.last_used_at is not None

    async def test_list_puts_recently_used_first(self, db):
        first = await templates.create_template(db, bench_template())
        second = await templates.create_template(db, WorkoutTemplateCreate(name="Pull A"))
        await templates.instantiate_template(db, first.id)

        listed = await templates.list_templates(db)
        assert [t.id for t in listed] == [first.id, second.id]

    async def test_soft_delete(self, db):
        created = await templates.create_template(db, bench_template())
        assert await templates.soft_delete_template(db, created.id) is True
        assert await templates.soft_delete_template(db, created.id) is False
        assert await templates.list_templates(db) == []
        with pytest.raises(NotFoundError):
            await templates.get_template(db, created.id)
        with pytest.raises(NotFoundError):
            await workout_store.start_workout(db, WorkoutStart(template_id=created.id))


class TestFromWorkout:
    async def test_uses_working_sets(self, db, log_workout):
        workout = await log_workout(
            [
                (
                    "squat",
                    [
                        {"weight_kg": 60, "reps": 5, "is_warmup": True},
                        {"weight_kg": 120, "reps": 5},
                        {"weight_kg": 125, "reps": 3},
                    ],
                ),
                ("plank", [{"weight_kg": None, "reps": None, "is_warmup": True}]),
            ]
        )
        template = await templates.create_template_from_workout(
            db, WorkoutTemplateCreateFromWorkout(name="Legs", workout_id=workout.id)
        )

        squat, plank = template.exercises
        assert squat.target_sets == 2
        assert squat.target_reps == "3"
        assert squat.target_weight_kg == 125
        assert [(t.reps, t.weight_kg) for t in squat.set_targets] == [("5", 120), ("3", 125)]
        assert plank.target_sets == 3

    async def test_unfinished_workout_conflicts(self, db):
        workout = await workout_store.start_workout(db, WorkoutStart())
        with pytest.raises(ConflictError):
            await templates.create_template_from_workout(
                db, WorkoutTemplateCreateFromWorkout(name="Nope", workout_id=workout.id)
            )
