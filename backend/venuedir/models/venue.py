"""
Venue Directory Backend: Venue SQLAlchemy Model
==================================================

What:  ORM model for the `restaurants` table (one row per venue).
Who:   Used by VenueRepository for CRUD and by Alembic for the schema.

Table Design:
    - category / seating are PostgreSQL enums (`venue_category`, `seating_type`)
    - vibe is TEXT[] on PostgreSQL and JSON elsewhere (SQLite in tests);
      tag order is preserved either way
    - latitude DECIMAL(10,8), longitude DECIMAL(11,8), rating DECIMAL(3,2),
      all returned as floats
    - google_place_id is UNIQUE; NULLs never collide
    - added_by / last_modified_by are attribution-only references to users;
      deleting a user nulls them instead of cascading

Indexes:
    idx_restaurants_name, idx_restaurants_category, idx_google_place_id,
    idx_restaurants_location (latitude, longitude), and
    idx_restaurants_created_at (DESC) for the newest-first listing.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Mapped, mapped_column

from venuedir.database import Base

VENUE_CATEGORIES = ("Bar", "Restaurant", "Cafe")
SEATING_TYPES = ("Indoor", "Al Fresco", "Both")

VibeType = JSON().with_variant(postgresql.ARRAY(Text()), "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Venue(Base):
    """
    A bar, restaurant or cafe listed in the directory.

    Lifecycle:
        1. Created via POST /api/restaurants (added_by = last_modified_by = caller)
        2. Replaced via PUT (updated_at refreshed, last_modified_by = caller)
        3. Removed via DELETE
    """

    __tablename__ = "restaurants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    category: Mapped[str] = mapped_column(
        Enum(*VENUE_CATEGORIES, name="venue_category"),
        nullable=False,
    )

    price_range: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    vibe: Mapped[List[str]] = mapped_column(VibeType, nullable=False, default=list)

    latitude: Mapped[float] = mapped_column(Numeric(10, 8, asdecimal=False), nullable=False)
    longitude: Mapped[float] = mapped_column(Numeric(11, 8, asdecimal=False), nullable=False)

    address: Mapped[str] = mapped_column(Text, nullable=False)

    seating: Mapped[str] = mapped_column(
        Enum(*SEATING_TYPES, name="seating_type"),
        nullable=False,
    )

    is_licensed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    has_shisha: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    google_place_id: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )

    rating: Mapped[Optional[float]] = mapped_column(
        Numeric(3, 2, asdecimal=False), nullable=True
    )

    # ── Attribution ───────────────────────────────────────────────────────
    added_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_modified_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_restaurants_name", "name"),
        Index("idx_restaurants_category", "category"),
        Index("idx_google_place_id", "google_place_id"),
        Index("idx_restaurants_location", "latitude", "longitude"),
        Index("idx_restaurants_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name='{self.name}', category='{self.category}')>"
