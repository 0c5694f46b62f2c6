"""
Venue Directory Backend: Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for each failure the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) translate
       them into JSON error responses with the matching HTTP status code.
Who:   Raised by services and the auth dependency; caught by global handlers.

Exception Hierarchy:
    VenueDirError (base)
    ├── ValidationError               → 400 Bad Request
    ├── AuthenticationRequiredError   → 401 Unauthorized
    ├── InvalidCredentialError        → 401 (bad password) / 403 (bad token)
    ├── NotFoundError                 → 404 Not Found
    ├── ConflictError                 → 409 Conflict
    └── ServiceError
        ├── DatabaseError             → 500 Internal Server Error
        └── UpstreamServiceError      → 502 Bad Gateway

Response body shape (see main.register_exception_handlers):
    {"error": "<message>", "code": "<machine code>", "request_id": "...",
     "details": {...}}   # details only where safe to expose
"""

from typing import Any, Dict, List, Optional


class VenueDirError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return)
        context:  Extra information; only returned by handlers that say so
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(VenueDirError):
    """
    Raised when client input is missing or malformed.

    HTTP: 400 Bad Request. `context` is returned as `details`, e.g.
        {"error": "Missing required fields",
         "details": {"missing_fields": ["name", "seating"]}}
    """

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class MissingFieldsError(ValidationError):
    """Raised when one or more required body fields are absent."""

    def __init__(self, missing_fields: List[str]):
        super().__init__(
            message="Missing required fields",
            context={"missing_fields": list(missing_fields)},
        )
        self.missing_fields = list(missing_fields)


class AuthenticationRequiredError(VenueDirError):
    """No bearer credential was supplied to a protected route (401)."""

    status_code = 401
    code = "authentication_required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message=message)


class InvalidCredentialError(VenueDirError):
    """
    A credential was supplied but rejected.

    Two flavours share this class:
        - login with unknown email or wrong password → 401 "Invalid credentials"
        - bearer token mis-signed, expired or malformed → 403 "Invalid token"
    The login flavour never says which half of the credential was wrong.
    """

    code = "invalid_credentials"

    def __init__(
        self,
        message: str = "Invalid credentials",
        status_code: int = 401,
        code: Optional[str] = None,
    ):
        super().__init__(message=message)
        self.status_code = status_code
        if code:
            self.code = code

    @classmethod
    def invalid_token(cls) -> "InvalidCredentialError":
        return cls(message="Invalid token", status_code=403, code="invalid_token")


class NotFoundError(VenueDirError):
    """
    Raised when a requested record does not exist (404).

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(VenueDirError):
    """
    Raised on a unique-constraint violation (409).

    `context["detail"]` names the duplicated key and is returned to the
    client so it can tell which record already exists.
    """

    status_code = 409
    code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if detail:
            ctx["detail"] = detail
        super().__init__(message=message, context=ctx)


class ServiceError(VenueDirError):
    """Storage or upstream failure. Handlers never expose `context` in production."""


class DatabaseError(ServiceError):
    """
    Raised when a database operation fails unexpectedly (500).

    Covers lost connections, pool/statement timeouts and unexpected driver
    errors. The response message is always generic; the original error is
    logged server-side and echoed only in development mode.
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(ServiceError):
    """
    Raised when the places-search provider fails (502).

    Covers timeouts, transport errors, non-2xx responses and provider-level
    error statuses. Never retried inside a request.
    """

    status_code = 502
    code = "upstream_error"

    def __init__(
        self,
        message: str = "Places search service is unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
