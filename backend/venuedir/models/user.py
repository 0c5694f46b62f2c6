"""
Venue Directory Backend: User SQLAlchemy Model
=================================================

What:  ORM model for the `users` table.
Who:   Read by CredentialStore at login; written by the admin setup script.

Table Design:
    - email is unique; lookups at login are by exact match
    - password_hash holds a bcrypt hash and is never serialized by any schema
    - role is a PostgreSQL enum `user_role` ('admin', 'user'), default 'user'
    - last_login is refreshed on every successful login
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import TIMESTAMP, Enum, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from venuedir.database import Base

USER_ROLES = ("admin", "user")


class User(Base):
    """
    A person allowed to sign in and edit the directory.

    Lifecycle:
        1. Created (or password reset) by the admin setup script
        2. last_login updated on each successful login
        3. Never deleted through the API
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        Enum(*USER_ROLES, name="user_role"),
        nullable=False,
        default="user",
        server_default=text("'user'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
