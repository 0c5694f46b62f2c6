"""
Venue Directory Backend: Places Client and Route Tests
=========================================================

What:  PlacesClient against an httpx.MockTransport, and /api/places through
       the app with a provider that succeeds or fails.

What we test:
    ✅ Search appends the city suffix and sends the API key
    ✅ Details requests the fixed field list
    ✅ ZERO_RESULTS is an empty list, not an error
    ✅ Provider error statuses, HTTP errors and timeouts → UpstreamServiceError
    ✅ A body that is not a JSON object → UpstreamServiceError
    ✅ Routes: auth required, empty query → 400, provider failure → 502
"""

import httpx
import pytest

from venuedir.exceptions import UpstreamServiceError
from venuedir.services.places_client import DETAIL_FIELDS, PlacesClient


def make_client(handler, suffix="restaurant in Dubai"):
    return PlacesClient(
        api_key="k-123",
        base_url="https://places.test/maps/api/place",
        search_suffix=suffix,
        transport=httpx.MockTransport(handler),
    )


class TestPlacesClient:

    @pytest.mark.asyncio
    async def test_search_sends_suffix_and_key(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"status": "OK", "results": [{"name": "Zuma"}]})

        client = make_client(handler)
        try:
            results = await client.search("Zuma")
        finally:
            await client.aclose()

        assert results == [{"name": "Zuma"}]
        assert seen["path"] == "/maps/api/place/textsearch/json"
        assert seen["params"]["query"] == "Zuma restaurant in Dubai"
        assert seen["params"]["key"] == "k-123"

    @pytest.mark.asyncio
    async def test_search_without_suffix(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["query"] = request.url.params["query"]
            return httpx.Response(200, json={"status": "OK", "results": []})

        client = make_client(handler, suffix="")
        try:
            await client.search("Zuma")
        finally:
            await client.aclose()

        assert seen["query"] == "Zuma"

    @pytest.mark.asyncio
    async def test_details_requests_field_list(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"status": "OK", "result": {"name": "Zuma"}})

        client = make_client(handler)
        try:
            result = await client.details("ChIJ-abc")
        finally:
            await client.aclose()

        assert result == {"name": "Zuma"}
        assert seen["params"]["place_id"] == "ChIJ-abc"
        assert seen["params"]["fields"] == DETAIL_FIELDS

    @pytest.mark.asyncio
    async def test_zero_results_is_empty(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        )
        try:
            assert await client.search("nowhere") == []
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"}),
            httpx.Response(200, json={"status": "OVER_QUERY_LIMIT"}),
            httpx.Response(500, text="upstream exploded"),
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json=[{"status": "OK"}]),
            httpx.Response(200, json="OK"),
        ],
    )
    async def test_provider_failures_raise(self, response):
        client = make_client(lambda request: response)
        try:
            with pytest.raises(UpstreamServiceError):
                await client.search("Zuma")
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(UpstreamServiceError, match="timed out"):
                await client.details("ChIJ-abc")
        finally:
            await client.aclose()


class TestPlacesRoutes:

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get("/api/places/search", params={"query": "Zuma"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_search(self, client, auth_headers):
        response = await client.get(
            "/api/places/search",
            params={"query": "Test Lounge"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()[0]["place_id"] == "ChIJ-test-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"query": ""}, {"query": "   "}])
    async def test_search_without_query_is_400(self, client, auth_headers, params):
        response = await client.get("/api/places/search", params=params, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "Query parameter is required"

    @pytest.mark.asyncio
    async def test_details(self, client, auth_headers):
        response = await client.get("/api/places/details/ChIJ-test-1", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Test Lounge"


class TestPlacesProviderDown:

    @pytest.fixture
    def places_handler(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "REQUEST_DENIED"})

        return handler

    @pytest.mark.asyncio
    async def test_search_is_502(self, client, auth_headers):
        response = await client.get(
            "/api/places/search",
            params={"query": "Zuma"},
            headers=auth_headers,
        )
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "Places search service is unavailable"
        assert body["code"] == "upstream_error"
        # provider detail stays server-side outside development
        assert "details" not in body

    @pytest.mark.asyncio
    async def test_details_is_502(self, client, auth_headers):
        response = await client.get("/api/places/details/whatever", headers=auth_headers)
        assert response.status_code == 502
