"""
Venue Directory Backend: Test Configuration (conftest.py)
============================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Each test gets its own SQLite file database (tables created from
       the ORM metadata) and an app built by create_app() around it. The
       places provider is replaced by an httpx.MockTransport, so no test
       leaves the process.

Fixture Hierarchy (all function-scoped):
    test_settings        Settings for ENVIRONMENT=test
    database             SQLite-backed Database with tables created
    places_handler       MockTransport handler (override per class/module)
    places_client        PlacesClient on that transport
    app / client         FastAPI app + HTTPX AsyncClient via ASGITransport
    admin_user           seeded admin (bcrypt rounds=4 for speed)
    auth_headers         {"Authorization": "Bearer <token>"} for admin_user
    mock_db_session      AsyncMock session for failure-path unit tests
    venue_payload        a complete, valid create body
"""

import os

# Set before any venuedir import: config.settings is built at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["GOOGLE_MAPS_API_KEY"] = "test-key-not-real"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from venuedir.config import Settings
from venuedir.database import Database, build_engine
from venuedir.security import Identity, issue_credential
from venuedir.services.credential_store import CredentialStore
from venuedir.services.places_client import PlacesClient

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct-horse-battery"
ADMIN_NAME = "Site Admin"


def default_places_handler(request: httpx.Request) -> httpx.Response:
    """Canned provider: one search hit, one details record."""
    if request.url.path.endswith("/textsearch/json"):
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [
                    {
                        "place_id": "ChIJ-test-1",
                        "name": "Test Lounge",
                        "formatted_address": "1 Test Street, Dubai",
                    }
                ],
            },
        )
    return httpx.Response(
        200,
        json={
            "status": "OK",
            "result": {
                "name": "Test Lounge",
                "formatted_address": "1 Test Street, Dubai",
                "rating": 4.4,
            },
        },
    )


# ══════════════════════════════════════════════════════════════════════════
# Infrastructure
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'venuedir.db'}",
        jwt_secret="test-secret-not-real",
        google_maps_api_key="test-key-not-real",
        environment="test",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(build_engine(test_settings.database_url))
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def places_handler():
    """Override in a test class or module to simulate provider behaviour."""
    return default_places_handler


@pytest_asyncio.fixture
async def places_client(test_settings, places_handler):
    client = PlacesClient.from_settings(
        test_settings,
        transport=httpx.MockTransport(places_handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def app(test_settings, database, places_client):
    from venuedir.main import create_app

    return create_app(
        settings=test_settings,
        database=database,
        places_client=places_client,
    )


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient that talks to the app in-process.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ══════════════════════════════════════════════════════════════════════════
# Users and Credentials
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def admin_user(database):
    async with database.session() as session:
        user = await CredentialStore(session).upsert_user(
            email=ADMIN_EMAIL,
            password=ADMIN_PASSWORD,
            name=ADMIN_NAME,
            role="admin",
            rounds=4,
        )
    return user


@pytest.fixture
def auth_headers(admin_user, test_settings):
    token = issue_credential(
        Identity(id=admin_user.id, email=admin_user.email, role=admin_user.role),
        secret=test_settings.jwt_secret,
    )
    return {"Authorization": f"Bearer {token}"}


# ══════════════════════════════════════════════════════════════════════════
# Unit-test Doubles and Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
        with pytest.raises(DatabaseError):
            await VenueRepository(mock_db_session).list()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def venue_payload():
    return {
        "name": "Test Lounge",
        "category": "Bar",
        "price_range": "$$$",
        "vibe": ["rooftop", "live music"],
        "latitude": 25.19720000,
        "longitude": 55.27440000,
        "address": "1 Test Street, Downtown Dubai",
        "seating": "Both",
        "is_licensed": True,
        "has_shisha": False,
        "google_place_id": "ChIJ-test-1",
        "rating": 4.5,
    }
