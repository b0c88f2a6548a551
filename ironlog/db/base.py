"""SQLAlchemy declarative base, shared column mixins and soft-delete filter."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.elements import ColumnElement


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    """Base for all ORM models."""

    pass


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )


class SoftDeleteMixin:
    """Soft delete: the only deletion path for mutable rows.

    Each model's flag is authoritative only for itself, so queries that join
    several soft-deletable tables must apply ``live()`` for every one of them
    (see ``live_filter``).
    """

    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @classmethod
    def live(cls) -> ColumnElement[bool]:
        """SQL criterion selecting rows that are not soft-deleted."""
        return cls.is_deleted.is_(False)

    def mark_deleted(self, when: datetime | None = None) -> bool:
        """Flag the row deleted. Returns False (and changes nothing) if it already was."""
        if self.is_deleted:
            return False
        self.is_deleted = True
        self.deleted_at = when or utcnow()
        return True


def live_filter(*models: type[SoftDeleteMixin]) -> list[ColumnElement[bool]]:
    """One ``is_deleted = false`` criterion per joined model."""
    return [model.live() for model in models]
