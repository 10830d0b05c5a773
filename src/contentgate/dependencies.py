"""FastAPI dependency injection container.

Long-lived components are built once in the application lifespan and
stored on ``app.state``; these functions hand them to route handlers and
can be replaced through ``app.dependency_overrides`` in tests.
"""

import secrets
from typing import Annotated

from fastapi import Depends, Header, Request

from contentgate.config import Settings
from contentgate.core.exceptions import InvalidAPIKeyError
from contentgate.services.analytics import AnalyticsService
from contentgate.services.content import ContentService
from contentgate.services.health import HealthAggregator


# ========================================
# Settings Dependencies
# ========================================
def get_settings_from_request(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings_from_request)]


# ========================================
# Service Dependencies
# ========================================
def _from_state(request: Request, name: str) -> object:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise RuntimeError(f"{name} not initialized. Is the lifespan running?")
    return service


def get_content_service(request: Request) -> ContentService:
    """Get the cache-aside content retrieval service."""
    return _from_state(request, "content_service")  # type: ignore[return-value]


def get_health_aggregator(request: Request) -> HealthAggregator:
    """Get the readiness aggregator."""
    return _from_state(request, "health_aggregator")  # type: ignore[return-value]


def get_analytics_service(request: Request) -> AnalyticsService:
    """Get the analytics fan-out service."""
    return _from_state(request, "analytics_service")  # type: ignore[return-value]


# ========================================
# Auth Dependencies
# ========================================
async def require_api_key(
    settings: SettingsDep,
    x_api_key: Annotated[str | None, Header()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Check the API key on protected routes.

    The key is read from ``X-API-Key``, falling back to an
    ``Authorization: Bearer <key>`` header. With the development
    placeholder key configured every request is let through.

    Raises:
        InvalidAPIKeyError: 401 if the key is missing or wrong
    """
    if not settings.api_key_required:
        return

    key = x_api_key
    if not key and authorization and authorization.startswith("Bearer "):
        key = authorization.removeprefix("Bearer ")

    expected = settings.api_key.get_secret_value()
    if not key or not secrets.compare_digest(key.encode(), expected.encode()):
        raise InvalidAPIKeyError()
