"""
SQLAlchemy Base Model and Mixins

Declarative base plus the id/timestamp columns every Academy table carries.
Report queries order by `created_at, id`, so both are always populated, also
on objects that were never flushed.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, event, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all Academy models."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {getattr(self, 'id', None)}>"


class UUIDPrimaryKeyMixin:
    """Opaque UUID primary key; ids travel in report query strings."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4, comment="UUID primary key")


class TimestampMixin:
    """Timezone-aware created_at/updated_at, stored in UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Row creation time (UTC); enrollment reports window on it",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        nullable=False,
        comment="Last modification time (UTC)",
    )


@event.listens_for(UUIDPrimaryKeyMixin, "init", propagate=True)
def _assign_id(target, args, kwargs):  # type: ignore[no-untyped-def]
    if "id" not in kwargs:
        target.id = uuid4()


@event.listens_for(TimestampMixin, "init", propagate=True)
def _stamp(target, args, kwargs):  # type: ignore[no-untyped-def]
    now = utcnow()
    target.created_at = kwargs.get("created_at", now)
    target.updated_at = kwargs.get("updated_at", now)
