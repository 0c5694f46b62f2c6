"""
Venue Directory Backend: Login Service
=========================================

What:  Exchanges an email/password pair for a signed bearer token.
Who:   Called by POST /api/auth/login.

Workflow:
    1. Reject an incomplete body                 → ValidationError (400)
    2. Look the user up by exact email
    3. bcrypt-compare (against a dummy hash when the email is unknown)
    4. Unknown email or wrong password           → InvalidCredentialError (401)
    5. Refresh last_login (best-effort)
    6. Issue token with {id, email, role}; return it with the public profile

The response for step 4 is identical in both cases. Passwords and hashes
are never logged or returned.
"""

import logging

from starlette.concurrency import run_in_threadpool

from venuedir.config import Settings
from venuedir.exceptions import InvalidCredentialError, ValidationError
from venuedir.schemas.auth import LoginResponse, UserPublic
from venuedir.security import (
    DUMMY_PASSWORD_HASH,
    Identity,
    issue_credential,
    verify_password,
)
from venuedir.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, store: CredentialStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def login(self, email: str, password: str) -> LoginResponse:
        if not email or not password:
            raise ValidationError(message="Email and password required")

        logger.info("Login attempt received for: %s", email)
        user = await self.store.find_by_email(email)

        stored_hash = user.password_hash if user is not None else DUMMY_PASSWORD_HASH
        # bcrypt is CPU-bound; keep it off the event loop
        password_ok = await run_in_threadpool(verify_password, password, stored_hash)
        if user is None or not password_ok:
            logger.info("Login failed for: %s", email)
            raise InvalidCredentialError()

        identity = Identity(id=user.id, email=user.email, role=user.role)
        profile = UserPublic.model_validate(user)

        await self.store.record_login(identity.id)

        token = issue_credential(
            identity,
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            expires_hours=self.settings.jwt_expires_hours,
        )
        logger.info("Login succeeded for user %s", identity.id)
        return LoginResponse(token=token, user=profile)
