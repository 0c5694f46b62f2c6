"""
Venue Directory Backend: Places Search Client
================================================

What:  Async client for the Google Places Text Search and Place Details APIs.
How:   One `httpx.AsyncClient` per process, created by the app factory with
       the API key as a default query parameter and a bounded timeout.
       Closed in the lifespan shutdown.
Who:   Called by the /api/places routes.

Failure Policy:
    No retries. Any of the following raises UpstreamServiceError (502):
    - timeout or transport error
    - non-2xx HTTP status
    - provider `status` other than OK / ZERO_RESULTS
      (REQUEST_DENIED, OVER_QUERY_LIMIT, INVALID_REQUEST, ...)
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from venuedir.config import Settings
from venuedir.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

DETAIL_FIELDS = (
    "name,formatted_address,geometry,website,formatted_phone_number,rating,price_level"
)
OK_STATUSES = {"OK", "ZERO_RESULTS"}


class PlacesClient:

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        timeout: float = 10.0,
        search_suffix: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.search_suffix = search_suffix.strip()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            params={"key": api_key},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "PlacesClient":
        return cls(
            api_key=settings.google_maps_api_key,
            base_url=settings.places_base_url,
            timeout=settings.places_timeout,
            search_suffix=settings.places_search_suffix,
            transport=transport,
        )

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """Free-text search; returns the provider's `results` list."""
        full_query = f"{query} {self.search_suffix}" if self.search_suffix else query
        payload = await self._get("/textsearch/json", {"query": full_query})
        return payload.get("results", [])

    async def details(self, place_id: str) -> Dict[str, Any]:
        """Details for one place; returns the provider's `result` object."""
        payload = await self._get(
            "/details/json",
            {"place_id": place_id, "fields": DETAIL_FIELDS},
        )
        return payload.get("result", {})

    async def _get(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.error("Places request %s timed out: %s", path, str(e))
            raise UpstreamServiceError(
                message="Places search timed out",
                context={"path": path},
            )
        except httpx.HTTPStatusError as e:
            logger.error("Places request %s returned HTTP %d", path, e.response.status_code)
            raise UpstreamServiceError(
                context={"path": path, "http_status": e.response.status_code},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Places request %s failed: %s", path, str(e))
            raise UpstreamServiceError(context={"path": path, "reason": str(e)})

        if not isinstance(payload, dict):
            logger.error("Places request %s returned a non-object body", path)
            raise UpstreamServiceError(context={"path": path, "reason": "unexpected body"})

        status = payload.get("status", "OK")
        if status not in OK_STATUSES:
            logger.error(
                "Places request %s rejected by provider: %s %s",
                path,
                status,
                payload.get("error_message", ""),
            )
            raise UpstreamServiceError(context={"path": path, "provider_status": status})
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
