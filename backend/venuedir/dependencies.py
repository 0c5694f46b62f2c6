"""
Venue Directory Backend: FastAPI Dependencies
================================================

What:  Request-scoped wiring between routes and services.
How:   The app factory stores one `Database`, one `PlacesClient` and the
       `Settings` on `app.state`. These dependencies read them from the
       current request, so tests can build an app around a SQLite database
       or a mocked provider without touching module globals.

    get_db_session        one session per request (commit / rollback / close)
    get_venue_repository  VenueRepository bound to that session
    get_auth_service      AuthService over a CredentialStore on that session
    get_places_client     the shared PlacesClient
    require_identity      Credential Verifier → Identity, or 401 / 403
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from venuedir.config import Settings
from venuedir.exceptions import AuthenticationRequiredError, InvalidCredentialError
from venuedir.security import MISSING, Identity, verify_credential
from venuedir.services.auth_service import AuthService
from venuedir.services.credential_store import CredentialStore
from venuedir.services.places_client import PlacesClient
from venuedir.services.venue_repository import VenueRepository


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Provides a database session per request.

    Delegates to Database.session(): commits when the handler returns,
    rolls back when it raises, and always returns the connection to the pool.
    """
    async with request.app.state.database.session() as session:
        yield session


def get_venue_repository(db: AsyncSession = Depends(get_db_session)) -> VenueRepository:
    return VenueRepository(db)


def get_auth_service(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> AuthService:
    return AuthService(CredentialStore(db), settings)


def get_places_client(request: Request) -> PlacesClient:
    return request.app.state.places_client


def require_identity(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> Identity:
    """
    Guard for protected routes.

    Missing or non-Bearer Authorization header → AuthenticationRequiredError (401)
    Bad, expired or mis-signed token            → InvalidCredentialError (403)
    Otherwise the Identity is stored on request.state.identity and returned.
    """
    result = verify_credential(
        request.headers.get("Authorization"),
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    if not result.ok:
        if result.failure == MISSING:
            raise AuthenticationRequiredError()
        raise InvalidCredentialError.invalid_token()

    request.state.identity = result.identity
    return result.identity
