"""
Venue Directory Backend: Credential Store
============================================

What:  User lookups and writes needed by login and admin setup.
How:   Parameterized SQLAlchemy statements against `users` through the
       session handed in at construction.

Operations:
    find_by_email(email)                    exact-match lookup
    record_login(user_id)                   best-effort last_login refresh
    upsert_user(email, password, name, role) create, or reset the password
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from venuedir.exceptions import DatabaseError, ValidationError
from venuedir.models.user import USER_ROLES, User
from venuedir.security import hash_password

logger = logging.getLogger(__name__)

# bcrypt only hashes the first 72 bytes; newer releases reject longer input
MAX_PASSWORD_BYTES = 72


class CredentialStore:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self.session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up user: %s", str(e))
            raise DatabaseError(
                message="Server error during login",
                context={"reason": str(e)},
            )

    async def record_login(self, user_id: int) -> bool:
        """
        Set last_login to now. Returns False instead of raising on failure.

        On failure the transaction is rolled back, which expires every
        loaded instance; callers read what they need from the user first.
        """
        try:
            await self.session.execute(
                update(User)
                .where(User.id == user_id)
                .values(last_login=datetime.now(timezone.utc))
            )
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning("Could not record last_login for user %s: %s", user_id, str(e))
            return False

    async def upsert_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str = "user",
        rounds: int = 12,
    ) -> User:
        """
        Create a user, or reset the password hash, name and role of an
        existing user with the same email.
        """
        if role not in USER_ROLES:
            raise ValidationError(
                message=f"Invalid role '{role}'. Must be one of: {', '.join(USER_ROLES)}",
                field="role",
            )
        if not email or not password:
            raise ValidationError(message="Email and password required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

        password_hash = await run_in_threadpool(hash_password, password, rounds)
        user = await self.find_by_email(email)
        try:
            if user is None:
                user = User(email=email, password_hash=password_hash, name=name, role=role)
                self.session.add(user)
                logger.info("Creating user %s (role=%s)", email, role)
            else:
                user.password_hash = password_hash
                user.name = name
                user.role = role
                logger.info("Resetting password for existing user %s", email)
            await self.session.flush()
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Database error saving user %s: %s", email, str(e))
            raise DatabaseError(message="Could not save user", context={"reason": str(e)})
        return user
