"""
Venue Directory Backend: Restaurant Route Handlers
=====================================================

What:  CRUD endpoints for venues under /api/restaurants.
Who:   The directory's admin frontend.

Access Policy:
    Every endpoint here, reads included, requires a valid bearer token
    (`require_identity`). The caller's id is recorded as added_by on create
    and last_modified_by on create and update.

Route Ordering:
    The collection routes ("") are registered before the item routes
    ("/{venue_id}"), and venue_id is an int, so there is no literal
    sub-path that an item route could shadow.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Response, status

from venuedir.dependencies import get_venue_repository, require_identity
from venuedir.schemas.common import ErrorResponse
from venuedir.schemas.venue import VenueInput, VenueResponse
from venuedir.security import Identity
from venuedir.services.venue_repository import VenueRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/restaurants", tags=["Restaurants"])

AUTH_RESPONSES = {
    401: {"description": "Authentication required", "model": ErrorResponse},
    403: {"description": "Invalid token", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=List[VenueResponse],
    responses={**AUTH_RESPONSES, 500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all venues, newest first",
)
async def list_restaurants(
    identity: Identity = Depends(require_identity),
    repo: VenueRepository = Depends(get_venue_repository),
) -> List[VenueResponse]:
    """Includes `added_by_user` / `modified_by_user` names for display."""
    return await repo.list()


@router.post(
    "",
    response_model=VenueResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **AUTH_RESPONSES,
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        409: {"description": "google_place_id already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a venue",
)
async def create_restaurant(
    body: VenueInput,
    identity: Identity = Depends(require_identity),
    repo: VenueRepository = Depends(get_venue_repository),
) -> VenueResponse:
    """
    Required: name, category, latitude, longitude, address, seating.
    A 400 response lists every missing field in `details.missing_fields`.
    """
    return await repo.create(body, actor_id=identity.id)


@router.get(
    "/{venue_id}",
    response_model=VenueResponse,
    responses={**AUTH_RESPONSES, 404: {"description": "Not found", "model": ErrorResponse}},
    summary="Get one venue",
)
async def get_restaurant(
    venue_id: int = Path(description="Venue id"),
    identity: Identity = Depends(require_identity),
    repo: VenueRepository = Depends(get_venue_repository),
) -> VenueResponse:
    return await repo.get_by_id(venue_id)


@router.put(
    "/{venue_id}",
    response_model=VenueResponse,
    responses={
        **AUTH_RESPONSES,
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        404: {"description": "Not found", "model": ErrorResponse},
        409: {"description": "google_place_id already exists", "model": ErrorResponse},
    },
    summary="Replace a venue",
)
async def update_restaurant(
    body: VenueInput,
    venue_id: int = Path(description="Venue id"),
    identity: Identity = Depends(require_identity),
    repo: VenueRepository = Depends(get_venue_repository),
) -> VenueResponse:
    """Full replace: optional fields omitted from the body are reset."""
    return await repo.update(venue_id, body, actor_id=identity.id)


@router.delete(
    "/{venue_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**AUTH_RESPONSES, 404: {"description": "Not found", "model": ErrorResponse}},
    summary="Delete a venue",
)
async def delete_restaurant(
    venue_id: int = Path(description="Venue id"),
    identity: Identity = Depends(require_identity),
    repo: VenueRepository = Depends(get_venue_repository),
) -> Response:
    await repo.delete(venue_id)
    logger.info("User %s deleted venue %s", identity.id, venue_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
