"""
Clinic Tracker Backend — Shared Response Schemas
=================================================

What:  Envelopes used by more than one router: the error body, the health
       report and the plain `{message}` acknowledgement.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body returned for every non-2xx response.

    Example:
        {
            "error": "forbidden",
            "message": "You do not have permission to delete some of the exercise records",
            "details": {"resource": "exercise", "unauthorized_ids": [7, 9]},
            "request_id": "550e8400-e29b-41d4-a716-446655440000"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    mail: str = Field(description="Outbound mail: configured, not_configured")
    steatosis_formula: str = Field(description="Formula used when a diagnosis names none")
    uptime_seconds: float = Field(description="Seconds since service started")
