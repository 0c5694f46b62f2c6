"""
Venue Directory Backend: Restaurant Endpoint Tests
=====================================================

What:  /api/restaurants through the full app (middleware, auth guard,
       exception handlers) against a SQLite database.

What we test:
    ✅ Every route requires a bearer token (401 missing, 403 invalid)
    ✅ Create → 201 with attribution; read back by id and in the listing
    ✅ Missing fields → 400 listing all of them
    ✅ Wrongly typed or out-of-range fields → 400
    ✅ Duplicate google_place_id → 409 with the conflicting key
    ✅ PUT replaces and refreshes updated_at; DELETE → 204 then 404
    ✅ Every response carries an X-Request-ID
"""

from datetime import datetime

import pytest

from venuedir.security import Identity, issue_credential


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestAccessControl:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/restaurants"),
            ("POST", "/api/restaurants"),
            ("GET", "/api/restaurants/1"),
            ("PUT", "/api/restaurants/1"),
            ("DELETE", "/api/restaurants/1"),
        ],
    )
    async def test_missing_token_is_401(self, client, method, path):
        response = await client.request(method, path, json={})
        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required"

    @pytest.mark.asyncio
    async def test_non_bearer_header_is_401(self, client):
        response = await client.get(
            "/api/restaurants",
            headers={"Authorization": "Basic YWRtaW46cGFzcw=="},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self, client):
        response = await client.get(
            "/api/restaurants",
            headers={"Authorization": "Bearer not.a.token"},
        )
        assert response.status_code == 403
        assert response.json()["error"] == "Invalid token"

    @pytest.mark.asyncio
    async def test_expired_token_is_403(self, client, admin_user, test_settings):
        token = issue_credential(
            Identity(id=admin_user.id, email=admin_user.email, role="admin"),
            secret=test_settings.jwt_secret,
            expires_hours=-1,
        )
        response = await client.get(
            "/api/restaurants",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["POST", "PUT"])
    async def test_malformed_body_without_token_is_401(self, client, method):
        path = "/api/restaurants" if method == "POST" else "/api/restaurants/1"
        response = await client.request(
            method,
            path,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Authentication required"

    @pytest.mark.asyncio
    async def test_malformed_body_with_bad_token_is_403(self, client):
        response = await client.post(
            "/api/restaurants",
            content=b"{not json",
            headers={"Content-Type": "application/json", "Authorization": "Bearer nope"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_body_with_token_is_400(self, client, auth_headers):
        response = await client.post(
            "/api/restaurants",
            content=b"{not json",
            headers={"Content-Type": "application/json", **auth_headers},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_non_integer_id_without_token_is_401(self, client):
        response = await client.get("/api/restaurants/abc")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get(
            "/api/restaurants",
            headers={"X-Request-ID": "trace-123"},
        )
        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_returns_201(self, client, auth_headers, admin_user, venue_payload):
        response = await client.post("/api/restaurants", json=venue_payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["id"], int)
        assert body["name"] == "Test Lounge"
        assert body["vibe"] == ["rooftop", "live music"]
        assert body["added_by"] == admin_user.id
        assert body["last_modified_by"] == admin_user.id
        assert body["created_at"]
        assert body["updated_at"]

    @pytest.mark.asyncio
    async def test_missing_fields_is_400(self, client, auth_headers):
        response = await client.post(
            "/api/restaurants",
            json={"name": "Nameless Place", "address": "Somewhere"},
            headers=auth_headers,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Missing required fields"
        assert body["details"]["missing_fields"] == [
            "category",
            "latitude",
            "longitude",
            "seating",
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "override",
        [
            {"category": "Nightclub"},
            {"seating": "Rooftop"},
            {"latitude": "north"},
            {"latitude": 91},
            {"rating": 7},
        ],
    )
    async def test_invalid_values_are_400(self, client, auth_headers, venue_payload, override):
        response = await client.post(
            "/api/restaurants",
            json={**venue_payload, **override},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_comma_separated_vibe(self, client, auth_headers, venue_payload):
        response = await client.post(
            "/api/restaurants",
            json={**venue_payload, "vibe": "cosy, late night ,"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["vibe"] == ["cosy", "late night"]

    @pytest.mark.asyncio
    async def test_duplicate_place_id_is_409(self, client, auth_headers, venue_payload):
        first = await client.post("/api/restaurants", json=venue_payload, headers=auth_headers)
        assert first.status_code == 201

        second = await client.post(
            "/api/restaurants",
            json={**venue_payload, "name": "Another Name"},
            headers=auth_headers,
        )

        assert second.status_code == 409
        body = second.json()
        assert body["error"] == "Restaurant already exists"
        assert body["details"]["detail"] == "Key (google_place_id)=(ChIJ-test-1) already exists."


class TestReadUpdateDelete:

    @pytest.mark.asyncio
    async def test_round_trip(self, client, auth_headers, venue_payload):
        created = (
            await client.post("/api/restaurants", json=venue_payload, headers=auth_headers)
        ).json()

        response = await client.get(f"/api/restaurants/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_listing_is_newest_first(self, client, auth_headers, admin_user, venue_payload):
        ids = []
        for n in range(3):
            response = await client.post(
                "/api/restaurants",
                json={**venue_payload, "name": f"Venue {n}", "google_place_id": f"pid-{n}"},
                headers=auth_headers,
            )
            ids.append(response.json()["id"])

        response = await client.get("/api/restaurants", headers=auth_headers)

        assert response.status_code == 200
        listing = response.json()
        assert [v["id"] for v in listing] == list(reversed(ids))
        assert all(v["added_by_user"] == admin_user.name for v in listing)

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client, auth_headers):
        response = await client.get("/api/restaurants/987654", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_non_integer_id_is_400(self, client, auth_headers):
        response = await client.get("/api/restaurants/search", headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_put_replaces(self, client, auth_headers, venue_payload):
        created = (
            await client.post("/api/restaurants", json=venue_payload, headers=auth_headers)
        ).json()

        fetched = (
            await client.get(f"/api/restaurants/{created['id']}", headers=auth_headers)
        ).json()
        fetched["name"] = "Updated Lounge"
        fetched["has_shisha"] = True

        # Server-managed keys in the body are ignored
        response = await client.put(
            f"/api/restaurants/{created['id']}",
            json=fetched,
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["name"] == "Updated Lounge"
        assert body["has_shisha"] is True
        assert body["google_place_id"] == "ChIJ-test-1"
        assert parse_ts(body["created_at"]) == parse_ts(created["created_at"])
        assert parse_ts(body["updated_at"]) > parse_ts(created["updated_at"])

    @pytest.mark.asyncio
    async def test_put_unknown_id_is_404(self, client, auth_headers, venue_payload):
        response = await client.put(
            "/api/restaurants/424242",
            json=venue_payload,
            headers=auth_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_put_missing_fields_is_400(self, client, auth_headers):
        response = await client.put(
            "/api/restaurants/1",
            json={"name": "Only Name"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    @pytest.mark.asyncio
    async def test_delete_then_404(self, client, auth_headers, venue_payload):
        created = (
            await client.post("/api/restaurants", json=venue_payload, headers=auth_headers)
        ).json()

        response = await client.delete(f"/api/restaurants/{created['id']}", headers=auth_headers)
        assert response.status_code == 204
        assert response.content == b""

        again = await client.get(f"/api/restaurants/{created['id']}", headers=auth_headers)
        assert again.status_code == 404

        second_delete = await client.delete(
            f"/api/restaurants/{created['id']}", headers=auth_headers
        )
        assert second_delete.status_code == 404
