"""
MediRate Admin Backend — Shared Response Schemas
==================================================

What:  Response models reused across route modules: the error envelope,
       the plain message/success bodies, and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "authorization_error",
            "message": "Admin access required",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Confirmation body returned by the admin delete handlers."""
    message: str


class SuccessResponse(BaseModel):
    """Bare acknowledgement returned by Drive-backed handlers."""
    success: bool = True


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    blob_store: str = Field(description="Blob store: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
