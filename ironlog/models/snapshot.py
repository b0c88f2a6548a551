"""Append-only canonical workout snapshots."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ironlog.db.base import Base, utcnow


class WorkoutSnapshot(Base):
    """Serialized CanonicalWorkout at one point in time. Rows are never updated.

    The autoincrement id breaks ties between snapshots written in the same
    timestamp tick.
    """

    __tablename__ = "workout_snapshots"
    __table_args__ = (Index("ix_workout_snapshots_workout_created", "workout_id", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("workouts.id"), nullable=False)
    schema_version: Mapped[str] = mapped_column(String(20), nullable=False)
    json_data: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
