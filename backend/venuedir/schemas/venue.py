"""
Venue Directory Backend: Venue Request/Response Schemas
==========================================================

What:  Pydantic models for the /api/restaurants contract.
How:   `VenueInput` types every field the client may send. Required fields
       are typed Optional so that their absence is reported by
       `missing_required_fields()` as one 400 listing every missing name,
       instead of FastAPI's per-field 422. Wrong types still fail
       validation (mapped to 400 by the global handler). Unknown keys are
       ignored, so a client can PUT back a record it just fetched.
"""

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

Category = Literal["Bar", "Restaurant", "Cafe"]
Seating = Literal["Indoor", "Al Fresco", "Both"]

# Canonical order used when reporting missing fields
REQUIRED_FIELDS = ("name", "category", "latitude", "longitude", "address", "seating")


class VenueInput(BaseModel):
    """
    Body of POST /api/restaurants and PUT /api/restaurants/{id}.

    PUT is a full replace: optional fields left out are reset to their
    defaults (None, False or an empty vibe list).
    """

    name: Optional[str] = Field(default=None, max_length=255)
    category: Optional[Category] = None
    price_range: Optional[str] = Field(default=None, max_length=50)
    vibe: List[str] = Field(default_factory=list, description="Ordered free-text tags")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    address: Optional[str] = None
    seating: Optional[Seating] = None
    is_licensed: bool = False
    has_shisha: bool = False
    google_place_id: Optional[str] = Field(default=None, max_length=255)
    rating: Optional[float] = Field(default=None, ge=0, le=5)

    model_config = {"extra": "ignore"}

    @field_validator("vibe", mode="before")
    @classmethod
    def split_vibe(cls, v: Any) -> Any:
        """Accepts either a list of tags or a comma-separated string."""
        if v is None:
            return []
        if isinstance(v, str):
            return [tag.strip() for tag in v.split(",") if tag.strip()]
        return v

    @field_validator("price_range", "google_place_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        # "" would collide on the google_place_id unique index
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def missing_required_fields(self) -> List[str]:
        """Names of required fields that are absent, null or blank."""
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)
        return missing

    def column_values(self) -> dict:
        """Values for every mutable column, in the shape the ORM expects."""
        return self.model_dump(include=set(MUTABLE_FIELDS))


MUTABLE_FIELDS = (
    "name",
    "category",
    "price_range",
    "vibe",
    "latitude",
    "longitude",
    "address",
    "seating",
    "is_licensed",
    "has_shisha",
    "google_place_id",
    "rating",
)


class VenueResponse(BaseModel):
    """
    A venue as returned by every /api/restaurants endpoint.

    `added_by_user` / `modified_by_user` carry the attribution users' names
    and are filled in by the listing endpoint only.
    """

    id: int
    name: str
    category: Category
    price_range: Optional[str] = None
    vibe: List[str] = Field(default_factory=list)
    latitude: float
    longitude: float
    address: str
    seating: Seating
    is_licensed: bool = False
    has_shisha: bool = False
    google_place_id: Optional[str] = None
    rating: Optional[float] = None
    added_by: Optional[int] = None
    last_modified_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    added_by_user: Optional[str] = None
    modified_by_user: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("vibe", mode="before")
    @classmethod
    def none_vibe(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite drops the offset; stored values are always UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
