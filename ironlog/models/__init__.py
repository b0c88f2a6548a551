"""ORM models - import all so Base.metadata is complete for migrations."""

from ironlog.models.exercise import ExerciseDefinition
from ironlog.models.snapshot import WorkoutSnapshot
from ironlog.models.template import TemplateExercise, WorkoutTemplate
from ironlog.models.workout import Workout, WorkoutExercise, WorkoutSet

__all__ = [
    "ExerciseDefinition",
    "Workout",
    "WorkoutExercise",
    "WorkoutSet",
    "WorkoutSnapshot",
    "WorkoutTemplate",
    "TemplateExercise",
]
