"""
Venue Directory Backend: Authentication Route
================================================

What:  POST /api/auth/login, the only unauthenticated write.
How:   Delegates to AuthService; failures surface as application exceptions
       (400 incomplete body, 401 invalid credentials) via global handlers.
"""

import logging

from fastapi import APIRouter, Depends

from venuedir.dependencies import get_auth_service
from venuedir.schemas.auth import LoginRequest, LoginResponse
from venuedir.schemas.common import ErrorResponse
from venuedir.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange email and password for a bearer token",
)
async def login(
    body: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Returns {token, user}. The token embeds {id, email, role} and expires
    after JWT_EXPIRES_HOURS (24 by default).
    """
    return await auth_service.login(body.email, body.password)
