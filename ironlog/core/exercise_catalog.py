"""Built-in exercise reference dataset, hardcoded so a resync needs no file I/O.

Each entry is keyed by a stable slug; the catalog id is derived from the slug
(uuid5), so resyncing updates existing rows instead of inserting duplicates.
Muscle names use the same vocabulary as the recovery tables in constants.
"""

import uuid
from typing import NamedTuple

from ironlog.core.enums import ExerciseCategory, MovementType

CATALOG_NAMESPACE = uuid.UUID("5b0f3c9e-6a0d-4d52-9f3e-7c1a2b8d4e60")


class CatalogEntry(NamedTuple):
    slug: str
    name: str
    category: ExerciseCategory
    movement_type: MovementType
    movement_pattern: str
    primary: tuple[str, ...]
    secondary: tuple[str, ...]
    equipment: str


def builtin_exercise_id(slug: str) -> uuid.UUID:
    """Stable catalog id for a built-in exercise."""
    return uuid.uuid5(CATALOG_NAMESPACE, slug)


_C, _I = MovementType.COMPOUND, MovementType.ISOLATION
_PUSH, _PULL, _LEGS, _CORE, _CARDIO = (
    ExerciseCategory.PUSH,
    ExerciseCategory.PULL,
    ExerciseCategory.LEGS,
    ExerciseCategory.CORE,
    ExerciseCategory.CARDIO,
)

# ── slug, name, category, type, pattern, primary, secondary, equipment ──
BUILTIN_EXERCISES: list[CatalogEntry] = [
    CatalogEntry("bench-press", "Bench Press", _PUSH, _C, "horizontal_push", ("Chest",), ("Triceps", "Shoulders"), "barbell"),
    CatalogEntry("incline-bench-press", "Incline Bench Press", _PUSH, _C, "horizontal_push", ("Chest",), ("Shoulders", "Triceps"), "barbell"),
    CatalogEntry("dumbbell-bench-press", "Dumbbell Bench Press", _PUSH, _C, "horizontal_push", ("Chest",), ("Triceps", "Shoulders"), "dumbbell"),
    CatalogEntry("overhead-press", "Overhead Press", _PUSH, _C, "vertical_push", ("Shoulders",), ("Triceps",), "barbell"),
    CatalogEntry("dumbbell-shoulder-press", "Dumbbell Shoulder Press", _PUSH, _C, "vertical_push", ("Shoulders",), ("Triceps",), "dumbbell"),
    CatalogEntry("dips", "Dips", _PUSH, _C, "vertical_push", ("Chest", "Triceps"), ("Shoulders",), "bodyweight"),
    CatalogEntry("push-up", "Push-Up", _PUSH, _C, "horizontal_push", ("Chest",), ("Triceps", "Shoulders"), "bodyweight"),
    CatalogEntry("chest-fly", "Cable Chest Fly", _PUSH, _I, "chest_fly", ("Chest",), (), "cable"),
    CatalogEntry("lateral-raise", "Lateral Raise", _PUSH, _I, "shoulder_raise", ("Shoulders",), (), "dumbbell"),
    CatalogEntry("triceps-pushdown", "Triceps Pushdown", _PUSH, _I, "elbow_extension", ("Triceps",), (), "cable"),
    CatalogEntry("skull-crusher", "Skull Crusher", _PUSH, _I, "elbow_extension", ("Triceps",), (), "barbell"),
    CatalogEntry("deadlift", "Deadlift", _PULL, _C, "hinge", ("Back", "Hamstrings", "Glutes"), ("Core",), "barbell"),
    CatalogEntry("pull-up", "Pull-Up", _PULL, _C, "vertical_pull", ("Back",), ("Biceps",), "bodyweight"),
    CatalogEntry("lat-pulldown", "Lat Pulldown", _PULL, _C, "vertical_pull", ("Back",), ("Biceps",), "cable"),
    CatalogEntry("barbell-row", "Barbell Row", _PULL, _C, "horizontal_pull", ("Back",), ("Biceps", "Shoulders"), "barbell"),
    CatalogEntry("dumbbell-row", "Dumbbell Row", _PULL, _C, "horizontal_pull", ("Back",), ("Biceps",), "dumbbell"),
    CatalogEntry("seated-cable-row", "Seated Cable Row", _PULL, _C, "horizontal_pull", ("Back",), ("Biceps",), "cable"),
    CatalogEntry("face-pull", "Face Pull", _PULL, _I, "horizontal_pull", ("Shoulders",), ("Back",), "cable"),
    CatalogEntry("barbell-curl", "Barbell Curl", _PULL, _I, "elbow_flexion", ("Biceps",), (), "barbell"),
    CatalogEntry("hammer-curl", "Hammer Curl", _PULL, _I, "elbow_flexion", ("Biceps",), (), "dumbbell"),
    CatalogEntry("squat", "Back Squat", _LEGS, _C, "squat", ("Quads", "Glutes"), ("Hamstrings", "Core"), "barbell"),
    CatalogEntry("front-squat", "Front Squat", _LEGS, _C, "squat", ("Quads",), ("Glutes", "Core"), "barbell"),
    CatalogEntry("leg-press", "Leg Press", _LEGS, _C, "squat", ("Quads", "Glutes"), ("Hamstrings",), "machine"),
    CatalogEntry("romanian-deadlift", "Romanian Deadlift", _LEGS, _C, "hinge", ("Hamstrings", "Glutes"), ("Back",), "barbell"),
    CatalogEntry("hip-thrust", "Hip Thrust", _LEGS, _C, "hinge", ("Glutes",), ("Hamstrings",), "barbell"),
    CatalogEntry("walking-lunge", "Walking Lunge", _LEGS, _C, "lunge", ("Quads", "Glutes"), ("Hamstrings",), "dumbbell"),
    CatalogEntry("leg-extension", "Leg Extension", _LEGS, _I, "knee_extension", ("Quads",), (), "machine"),
    CatalogEntry("leg-curl", "Leg Curl", _LEGS, _I, "knee_flexion", ("Hamstrings",), (), "machine"),
    CatalogEntry("standing-calf-raise", "Standing Calf Raise", _LEGS, _I, "calf_raise", ("Calves",), (), "machine"),
    CatalogEntry("plank", "Plank", _CORE, _I, "anti_extension", ("Core",), (), "bodyweight"),
    CatalogEntry("hanging-leg-raise", "Hanging Leg Raise", _CORE, _I, "trunk_flexion", ("Core",), (), "bodyweight"),
    CatalogEntry("cable-crunch", "Cable Crunch", _CORE, _I, "trunk_flexion", ("Core",), (), "cable"),
    CatalogEntry("rowing-machine", "Rowing Machine", _CARDIO, _C, "cardio", ("Back", "Quads"), ("Biceps", "Core"), "machine"),
]

BUILTIN_BY_SLUG: dict[str, CatalogEntry] = {e.slug: e for e in BUILTIN_EXERCISES}


def get_builtin(slug: str) -> CatalogEntry | None:
    """Return the catalog entry for a slug, or None if unknown."""
    return BUILTIN_BY_SLUG.get(slug)
