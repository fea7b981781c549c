"""
Tally Backend - Shared Response Schemas
========================================

What:  Pydantic models for the envelope and error bodies shared by every
       endpoint. Used for OpenAPI documentation; handlers build the actual
       payloads with tally.core.responses.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class SuccessEnvelope(BaseModel):
    """
    Wrapper around every successful JSON body.

    Example:
        {"ok": true, "data": {"id": 1, "record": 5.0, "VariableId": 1, "DateRecordId": 2}}
    """
    ok: bool = Field(default=True, description="Always true on success")
    data: Any = Field(default=None, description="Entity, list of entities, or null")


class ErrorResponse(BaseModel):
    """
    What:  Failure envelope returned by every error handler.

    Fields:
        ok: Always false
        message: Human-readable description, prefixed with the request path
                 for validation and lookup failures
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        details: Optional extra context (e.g., which fields were missing)
        request_id: Correlation ID for tracing this error in server logs
    """
    ok: bool = Field(default=False, description="Always false on failure")
    message: str = Field(description="Human-readable error description")
    error: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
