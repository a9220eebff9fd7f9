from __future__ import annotations

import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum as SqlEnum,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from lakehenry.extensions import db


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class TimestampedBase(db.Model):
    """Abstract base providing created/updated columns."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class EventStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class EventKind(Enum):
    EVENT = "Event"
    RAFFLE = "Raffle"
    FUNDRAISER = "Fundraiser"
    MEETING = "Meeting"


class PhotoStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"


PHOTO_CATEGORIES = (
    "Restoration",
    "Donations",
    "Community Events",
    "Raffles",
    "Scenery",
)


class Donor(db.Model):
    __tablename__ = "donors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(200))
    in_memory_of: Mapped[str | None] = mapped_column(String(200))
    source: Mapped[str] = mapped_column(String(20), nullable=False, default="admin")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    @property
    def public_name(self) -> str:
        return self.display_name or self.name


class Event(TimestampedBase):
    __tablename__ = "events"
    __table_args__ = (
        Index("ix_events_status_start", "status", "date_start"),
    )

    id: Mapped[str] = mapped_column(String(120), primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[EventKind] = mapped_column(
        SqlEnum(EventKind, name="event_kind", native_enum=False, values_callable=_enum_values),
        nullable=False,
    )
    status: Mapped[EventStatus] = mapped_column(
        SqlEnum(EventStatus, name="event_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=EventStatus.DRAFT,
    )
    date_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    date_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    is_tbd: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    location: Mapped[str | None] = mapped_column(String(255))
    summary: Mapped[str | None] = mapped_column(Text)
    url: Mapped[str | None] = mapped_column(String(1024))
    url_label: Mapped[str | None] = mapped_column(String(120))
    poster_key: Mapped[str | None] = mapped_column(String(255))
    poster_alt: Mapped[str | None] = mapped_column(String(500))


class Photo(db.Model):
    __tablename__ = "photos"
    __table_args__ = (
        Index("ix_photos_status_submitted", "status", "submitted_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    status: Mapped[PhotoStatus] = mapped_column(
        SqlEnum(PhotoStatus, name="photo_status", native_enum=False, values_callable=_enum_values),
        nullable=False,
        default=PhotoStatus.PENDING,
    )
    object_key: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str | None] = mapped_column(String(200))
    caption: Mapped[str | None] = mapped_column(Text)
    alt: Mapped[str] = mapped_column(String(500), nullable=False)
    submitted_by: Mapped[str | None] = mapped_column(String(200))
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class RaffleWinner(db.Model):
    __tablename__ = "raffle_winners"

    # <raffle_key>-<draw_date>-<ticket_number>; the same ticket may win on different days
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    raffle_key: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    draw_date: Mapped[date] = mapped_column(Date, nullable=False)
    ticket_number: Mapped[int] = mapped_column(Integer, nullable=False)
    winner_name: Mapped[str] = mapped_column(String(200), nullable=False)
    town: Mapped[str] = mapped_column(String(120), nullable=False)
    prize: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class RaffleMonth(db.Model):
    __tablename__ = "raffle_months"

    month_key: Mapped[str] = mapped_column(String(7), primary_key=True)
    title: Mapped[str | None] = mapped_column(String(200))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
