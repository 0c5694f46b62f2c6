"""
Venue Directory Backend: Shared Response Schemas
===================================================

What:  Error and health response models used across routers.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "Missing required fields",
            "code": "validation_error",
            "details": {"missing_fields": ["seating"]},
            "request_id": "1f2e3d4c"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="'ok' when the database answered")
    timestamp: str = Field(description="Database server time")
    environment: str = Field(description="Configured runtime environment")
    database: str = Field(description="connected / disconnected")
    version: str = Field(description="Application version")
