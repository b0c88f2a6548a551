"""Exercise catalog model - built-in and user-defined exercise definitions."""

from __future__ import annotations

import uuid

from sqlalchemy import JSON, Boolean, Enum, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ironlog.core.enums import ExerciseCategory, MovementType
from ironlog.db.base import Base, SoftDeleteMixin, TimestampMixin


class ExerciseDefinition(SoftDeleteMixin, TimestampMixin, Base):
    """Catalog entry: classification, muscle groups and equipment.

    Built-ins (``is_custom=False``) carry a stable ``slug`` and are owned by the
    resync job; custom entries are user-defined and never touched by it.
    """

    __tablename__ = "exercises"
    __table_args__ = (
        Index("ix_exercises_is_custom", "is_custom"),
        Index("ix_exercises_slug", "slug", unique=True),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slug: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[ExerciseCategory] = mapped_column(
        Enum(ExerciseCategory, native_enum=False, length=20), default=ExerciseCategory.OTHER, nullable=False
    )
    movement_type: Mapped[MovementType] = mapped_column(
        Enum(MovementType, native_enum=False, length=20), default=MovementType.COMPOUND, nullable=False
    )
    movement_pattern: Mapped[str | None] = mapped_column(String(50), nullable=True)
    primary_muscle_groups: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    secondary_muscle_groups: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    equipment: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_custom: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def muscle_group(self) -> str | None:
        """Single display muscle group (first primary)."""
        return self.primary_muscle_groups[0] if self.primary_muscle_groups else None
