"""
Venue Directory Backend: Credential Hashing, Issuance and Verification
=========================================================================

What:  bcrypt password hashing plus HS256 JWT issuance and verification.
How:   `verify_credential()` never raises. It returns a `VerificationResult`
       holding either an `Identity` or a failure kind, and the caller
       (dependencies.require_identity) decides the HTTP mapping:

           no header / not "Bearer <token>"      → MISSING  → 401
           bad signature, expired, bad claims    → INVALID  → 403
           valid                                 → Identity(id, email, role)

Signed claims: {id, email, role, iat, exp}. Expiry is checked by
python-jose during decode.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer"

MISSING = "missing"
INVALID = "invalid"


@dataclass(frozen=True)
class Identity:
    """Identity Context attached to an authenticated request."""

    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


@dataclass(frozen=True)
class VerificationResult:
    identity: Optional[Identity] = None
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.identity is not None


# ══════════════════════════════════════════════════════════════════════════
# Passwords
# ══════════════════════════════════════════════════════════════════════════

def hash_password(plain: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """
    Constant-time bcrypt comparison.

    A malformed stored hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# Compared against when the email is unknown so both failure paths cost
# one bcrypt check.
DUMMY_PASSWORD_HASH = hash_password("not-a-real-password", rounds=12)


# ══════════════════════════════════════════════════════════════════════════
# Tokens
# ══════════════════════════════════════════════════════════════════════════

def issue_credential(
    identity: Identity,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "id": identity.id,
        "email": identity.email,
        "role": identity.role,
        "iat": now,
        "exp": now + timedelta(hours=expires_hours),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Returns the token from a 'Bearer <token>' header value, else None."""
    if not authorization:
        return None
    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != BEARER_PREFIX:
        return None
    token = parts[1].strip()
    return token or None


def verify_credential(
    authorization: Optional[str],
    secret: str,
    algorithm: str = "HS256",
) -> VerificationResult:
    token = extract_bearer_token(authorization)
    if token is None:
        return VerificationResult(failure=MISSING)

    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        return VerificationResult(failure=INVALID)

    try:
        identity = Identity(
            id=int(claims["id"]),
            email=str(claims["email"]),
            role=str(claims["role"]),
        )
    except (KeyError, TypeError, ValueError):
        logger.info("Rejected bearer token: missing identity claims")
        return VerificationResult(failure=INVALID)

    return VerificationResult(identity=identity)
