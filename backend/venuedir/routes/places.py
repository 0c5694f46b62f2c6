"""
Venue Directory Backend: Places Lookup Routes
================================================

What:  Authenticated pass-through to the places-search provider.
How:   Results are returned as the provider sends them (Text Search
       `results`, Place Details `result`); provider failures become 502.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from venuedir.dependencies import get_places_client, require_identity
from venuedir.exceptions import ValidationError
from venuedir.schemas.common import ErrorResponse
from venuedir.security import Identity
from venuedir.services.places_client import PlacesClient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/places", tags=["Places"])


@router.get(
    "/search",
    responses={
        400: {"description": "Missing query", "model": ErrorResponse},
        502: {"description": "Provider failure", "model": ErrorResponse},
    },
    summary="Search places by free text",
)
async def search_places(
    query: Optional[str] = Query(default=None, description="Free-text venue query"),
    identity: Identity = Depends(require_identity),
    places: PlacesClient = Depends(get_places_client),
) -> List[Dict[str, Any]]:
    if not query or not query.strip():
        raise ValidationError(message="Query parameter is required", field="query")
    return await places.search(query.strip())


@router.get(
    "/details/{place_id}",
    responses={502: {"description": "Provider failure", "model": ErrorResponse}},
    summary="Get details for one place",
)
async def place_details(
    place_id: str,
    identity: Identity = Depends(require_identity),
    places: PlacesClient = Depends(get_places_client),
) -> Dict[str, Any]:
    return await places.details(place_id)
