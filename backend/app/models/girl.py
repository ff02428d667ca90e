from sqlalchemy import String, DateTime, Boolean, Integer, Float, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
import uuid
from typing import Optional

from app.db.base import Base


class Girl(Base):
    """A bookable therapist as exposed to partners."""

    __tablename__ = "girls"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    girl_number: Mapped[int] = mapped_column(
        Integer,
        unique=True,
        nullable=False,
    )

    city_id: Mapped[str | None] = mapped_column(
        String(36),
        nullable=True,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    avatar_url: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )

    is_blocked: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Only profiles ranked 998+ are published to partners
    sort_order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    status: Mapped[Optional["GirlStatus"]] = relationship(
        back_populates="girl",
        uselist=False,
        lazy="joined",
    )

    __table_args__ = (
        Index("idx_girls_public_listing", "is_blocked", "is_verified", "sort_order"),
    )


class GirlStatus(Base):
    __tablename__ = "girls_status"

    girl_id: Mapped[str] = mapped_column(
        ForeignKey("girls.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # available | busy | offline
    status: Mapped[str] = mapped_column(
        String(32),
        default="offline",
        nullable=False,
    )

    current_lat: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )

    current_lng: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
    )

    next_available_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    girl: Mapped[Girl] = relationship(back_populates="status")
