"""Exception hierarchy for the gateway.

Every error that should reach an API consumer derives from GatewayError,
which knows its HTTP status code and how to render itself as the standard
error envelope:

    {"error": {"code": "...", "message": "...", "request_id": "...", "details": {...}}}

Usage:
    from contentgate.core.exceptions import OriginServiceError

    raise OriginServiceError(origin_status=404, origin_body="Not Found")
"""

from typing import Any


class GatewayError(Exception):
    """Base exception for all gateway errors.

    Attributes:
        code: Machine-readable error code (e.g., "INVALID_API_KEY")
        message: Human-readable error message
        status_code: HTTP status code to return
        details: Additional error details (optional)
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message:
            self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, request_id: str | None = None) -> dict[str, Any]:
        """Convert exception to API error response format.

        Args:
            request_id: Request correlation ID

        Returns:
            Error response dictionary
        """
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if request_id:
            error["request_id"] = request_id
        if self.details:
            error["details"] = self.details
        return {"error": error}


# =============================================================================
# Authentication Errors (401)
# =============================================================================


class AuthenticationError(GatewayError):
    """Raised when a request cannot be authenticated."""

    code: str = "AUTHENTICATION_FAILED"
    message: str = "Authentication failed"
    status_code: int = 401


class InvalidAPIKeyError(AuthenticationError):
    """Raised when the API key is missing or does not match."""

    code: str = "INVALID_API_KEY"
    message: str = "Missing or invalid API key"


# =============================================================================
# Client Errors (429)
# =============================================================================


class RateLimitExceededError(GatewayError):
    """Raised when a client exceeds its request budget."""

    code: str = "RATE_LIMIT_EXCEEDED"
    message: str = "Too many requests"
    status_code: int = 429

    def __init__(self, retry_after: int, limit: int | None = None) -> None:
        self.retry_after = retry_after
        details: dict[str, Any] = {"retry_after": retry_after}
        if limit is not None:
            details["limit"] = limit
        super().__init__(details=details)


# =============================================================================
# External Service Errors (502)
# =============================================================================


class ExternalServiceError(GatewayError):
    """Base class for upstream dependency errors."""

    code: str = "EXTERNAL_SERVICE_ERROR"
    message: str = "External service error"
    status_code: int = 502


class OriginServiceError(ExternalServiceError):
    """Raised when the content origin fails or answers with a non-200 status."""

    code: str = "ORIGIN_SERVICE_ERROR"
    message: str = "Failed to fetch content from origin"

    def __init__(
        self,
        origin_status: int | None = None,
        origin_body: str | None = None,
        message: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"origin_status": origin_status}
        if origin_body:
            details["origin_body"] = origin_body
        super().__init__(message=message, details=details)
