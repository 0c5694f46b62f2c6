"""
Venue Directory Backend: Authentication Schemas
==================================================

What:  Request/response models for POST /api/auth/login.

Both login fields are Optional so that an incomplete body produces the
service's 400 "Email and password required" rather than a 422.
`UserPublic` is the only user shape the API ever serializes; it has no
password_hash field.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Account email (exact match)")
    password: Optional[str] = Field(default=None, description="Plaintext password")

    model_config = {"extra": "ignore"}


class UserPublic(BaseModel):
    id: int
    email: str
    role: str
    name: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Signed bearer token plus the public profile of the signed-in user."""

    token: str = Field(description="HS256-signed JWT; send as 'Authorization: Bearer <token>'")
    user: UserPublic
