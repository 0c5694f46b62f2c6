"""
Venue Directory Backend: Venue Repository
============================================

What:  Data-access operations on the `restaurants` relation.
How:   Every statement is built with SQLAlchemy expression constructs, so
       every value travels as a bound parameter. No SQL text is assembled
       from request data anywhere in this module.
Who:   Constructed per request (see dependencies.get_venue_repository) with
       a session drawn from the shared pool.

Operations:
    create(data, actor_id)      INSERT ... (added_by = last_modified_by = actor)
    list()                      SELECT ... LEFT JOIN users ×2 ORDER BY created_at DESC
    get_by_id(id)               SELECT ... WHERE id = :id
    update(id, data, actor_id)  UPDATE ... WHERE id = :id RETURNING *
    delete(id)                  DELETE ... WHERE id = :id RETURNING id

Error Translation:
    missing required fields           → MissingFieldsError (400)
    no row for id                     → NotFoundError (404)
    duplicate google_place_id         → ConflictError (409)
    any other SQLAlchemy/driver error → DatabaseError (500)

Writes commit before returning, so a success response means the row is
durable. Concurrent writers to the same row are last-write-wins.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from venuedir.exceptions import (
    ConflictError,
    DatabaseError,
    MissingFieldsError,
    NotFoundError,
)
from venuedir.models.user import User
from venuedir.models.venue import Venue
from venuedir.schemas.venue import VenueInput, VenueResponse

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _is_duplicate_place_id(exc: IntegrityError) -> bool:
    """True when `exc` is the unique index on google_place_id firing."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    message = str(orig)
    if sqlstate == UNIQUE_VIOLATION:
        return "google_place_id" in message or "restaurants_google_place_id" in message
    # SQLite: "UNIQUE constraint failed: restaurants.google_place_id"
    return "UNIQUE" in message and "google_place_id" in message


class VenueRepository:
    """CRUD over venues for one request's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, data: VenueInput, actor_id: Optional[int]) -> VenueResponse:
        """
        Insert a new venue attributed to `actor_id`.

        Raises:
            MissingFieldsError: one or more required fields absent (lists them all)
            ConflictError:      google_place_id already used by another venue
            DatabaseError:      any other storage failure
        """
        missing = data.missing_required_fields()
        if missing:
            logger.info("Venue create rejected, missing fields: %s", missing)
            raise MissingFieldsError(missing)

        venue = Venue(
            **data.column_values(),
            added_by=actor_id,
            last_modified_by=actor_id,
        )
        try:
            self.session.add(venue)
            await self.session.flush()
            # Reload what the column types actually stored (NUMERIC rounding)
            await self.session.refresh(venue)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_duplicate_place_id(e):
                logger.info("Duplicate google_place_id on create: %s", data.google_place_id)
                raise ConflictError(
                    message="Restaurant already exists",
                    detail=f"Key (google_place_id)=({data.google_place_id}) already exists.",
                )
            logger.error("Integrity error creating venue: %s", str(e.orig))
            raise DatabaseError(
                message="Failed to create restaurant",
                context={"reason": str(e.orig)},
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error creating venue: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to create restaurant",
                context={"reason": str(e)},
            )

        logger.info("Venue %s created by user %s", venue.id, actor_id)
        return VenueResponse.model_validate(venue)

    async def list(self) -> List[VenueResponse]:
        """All venues, newest first, with attribution users' names."""
        adder = aliased(User)
        modifier = aliased(User)
        query = (
            select(
                Venue,
                adder.name.label("added_by_user"),
                modifier.name.label("modified_by_user"),
            )
            .outerjoin(adder, Venue.added_by == adder.id)
            .outerjoin(modifier, Venue.last_modified_by == modifier.id)
            .order_by(Venue.created_at.desc(), Venue.id.desc())
        )
        try:
            result = await self.session.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("Database error listing venues: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch restaurants",
                context={"reason": str(e)},
            )

        return [
            VenueResponse.model_validate(venue).model_copy(
                update={"added_by_user": added_by_user, "modified_by_user": modified_by_user}
            )
            for venue, added_by_user, modified_by_user in rows
        ]

    async def get_by_id(self, venue_id: int) -> VenueResponse:
        try:
            result = await self.session.execute(select(Venue).where(Venue.id == venue_id))
            venue = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching venue %s: %s", venue_id, str(e))
            raise DatabaseError(
                message="Failed to fetch restaurant",
                context={"venue_id": venue_id, "reason": str(e)},
            )

        if venue is None:
            raise NotFoundError(resource="restaurant", resource_id=str(venue_id))
        return VenueResponse.model_validate(venue)

    async def update(
        self,
        venue_id: int,
        data: VenueInput,
        actor_id: Optional[int],
    ) -> VenueResponse:
        """
        Replace every mutable field of venue `venue_id` in one UPDATE.

        Raises:
            MissingFieldsError: a required field is absent (PUT is a full replace)
            NotFoundError:      no venue with that id
            ConflictError:      new google_place_id belongs to another venue
        """
        missing = data.missing_required_fields()
        if missing:
            raise MissingFieldsError(missing)

        stmt = (
            update(Venue)
            .where(Venue.id == venue_id)
            .values(
                **data.column_values(),
                last_modified_by=actor_id,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(Venue)
        )
        try:
            result = await self.session.execute(stmt)
            venue = result.scalar_one_or_none()
            if venue is None:
                raise NotFoundError(resource="restaurant", resource_id=str(venue_id))
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if _is_duplicate_place_id(e):
                raise ConflictError(
                    message="Restaurant already exists",
                    detail=f"Key (google_place_id)=({data.google_place_id}) already exists.",
                )
            logger.error("Integrity error updating venue %s: %s", venue_id, str(e.orig))
            raise DatabaseError(
                message="Failed to update restaurant",
                context={"venue_id": venue_id, "reason": str(e.orig)},
            )
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error updating venue %s: %s", venue_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to update restaurant",
                context={"venue_id": venue_id, "reason": str(e)},
            )

        logger.info("Venue %s updated by user %s", venue_id, actor_id)
        return VenueResponse.model_validate(venue)

    async def delete(self, venue_id: int) -> None:
        stmt = delete(Venue).where(Venue.id == venue_id).returning(Venue.id)
        try:
            result = await self.session.execute(stmt)
            deleted_id = result.scalar_one_or_none()
            if deleted_id is None:
                raise NotFoundError(resource="restaurant", resource_id=str(venue_id))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error deleting venue %s: %s", venue_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to delete restaurant",
                context={"venue_id": venue_id, "reason": str(e)},
            )

        logger.info("Venue %s deleted", venue_id)
