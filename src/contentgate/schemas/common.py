"""Common Pydantic schemas used across the API.

This module provides shared schemas for:
- Error responses (consistent error format)
- Health check responses
"""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Details of an error response.

    Attributes:
        code: Machine-readable error code (e.g., "ORIGIN_SERVICE_ERROR")
        message: Human-readable error description
        request_id: Correlation ID for tracing (optional)
        details: Additional error context (optional)
    """

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    request_id: str | None = Field(
        None, description="Request correlation ID for tracing"
    )
    details: dict[str, str | int | bool | None] | None = Field(
        None, description="Additional error context"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "ORIGIN_SERVICE_ERROR",
                "message": "Failed to fetch content from origin",
                "request_id": "abc-123-def-456",
                "details": {"origin_status": 404, "origin_body": "Not Found"},
            }
        }
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail


# =============================================================================
# Health Check Schemas
# =============================================================================


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: str = Field("ok", pattern="^ok$")
    version: str


class HealthCheckResponse(BaseModel):
    """Readiness probe response.

    Attributes:
        status: "ok" when the origin is reachable, "degraded" otherwise
        version: Gateway version
        checks: Per-dependency status ("ok" or "unavailable")
    """

    status: str = Field(..., pattern="^(ok|degraded)$")
    version: str
    checks: dict[str, str] = Field(
        default_factory=dict, description="Individual dependency checks"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "ok",
                "version": "1.0.0",
                "checks": {"redis": "ok", "strapi": "ok"},
            }
        }
    )
