"""Workout templates - reusable prescriptions."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ironlog.db.base import Base, SoftDeleteMixin, TimestampMixin


class WorkoutTemplate(SoftDeleteMixin, TimestampMixin, Base):
    """Saved workout prescription (name + ordered exercises with targets)."""

    __tablename__ = "workout_templates"
    __table_args__ = (Index("ix_workout_templates_last_used_at", "last_used_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    exercises: Mapped[list["TemplateExercise"]] = relationship(
        "TemplateExercise",
        back_populates="template",
        order_by="TemplateExercise.order",
    )


class TemplateExercise(SoftDeleteMixin, TimestampMixin, Base):
    """Exercise in a template with its targets.

    ``set_targets`` holds a JSON list of ``{"reps": "8-10", "weight_kg": 60}``
    objects, one per target set; the scalar columns are the fallback when it is
    missing or unreadable.
    """

    __tablename__ = "template_exercises"
    __table_args__ = (Index("ix_template_exercises_template_id", "template_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    template_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("workout_templates.id"), nullable=False)
    exercise_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("exercises.id"), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    target_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_reps: Mapped[str | None] = mapped_column(String(20), nullable=True)  # "10" or "8-10"
    target_weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    set_targets: Mapped[str | None] = mapped_column(Text, nullable=True)

    template: Mapped["WorkoutTemplate"] = relationship("WorkoutTemplate", back_populates="exercises")
    exercise: Mapped["ExerciseDefinition"] = relationship("ExerciseDefinition")
