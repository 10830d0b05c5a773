"""Pytest configuration and fixtures for gateway tests.

This module provides reusable fixtures for:
- Settings overrides
- An in-memory Redis double and a scripted Strapi origin
- Real services wired to those doubles
- Async HTTP clients against the ASGI app
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from contentgate.config import Settings
from contentgate.dependencies import (
    get_analytics_service,
    get_content_service,
    get_health_aggregator,
)
from contentgate.main import create_app
from contentgate.services.analytics import AnalyticsService, ConsoleProvider
from contentgate.services.cache import CacheStore
from contentgate.services.content import ContentService
from contentgate.services.health import HealthAggregator
from contentgate.services.origin import OriginClient
from tests.doubles import STRAPI_URL, TEST_API_KEY, FakeRedis, OriginStub

# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Create test-specific settings."""
    return Settings(
        app_env="development",  # type: ignore[arg-type]
        log_level="DEBUG",  # type: ignore[arg-type]
        log_format="console",  # type: ignore[arg-type]
        strapi_url=STRAPI_URL,
        strapi_api_token="strapi-token",  # type: ignore[arg-type]
        redis_url="redis://localhost:6379/15",
        cache_ttl=300,
        api_key=TEST_API_KEY,  # type: ignore[arg-type]
        rate_limit_requests=10_000,
        analytics_rate_limit_requests=10_000,
    )


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache_store(fake_redis: FakeRedis, test_settings: Settings) -> CacheStore:
    """CacheStore backed by the in-memory Redis double."""
    return CacheStore(fake_redis, ttl=test_settings.cache_ttl)  # type: ignore[arg-type]


@pytest.fixture
def origin_stub() -> OriginStub:
    return OriginStub()


@pytest.fixture
async def origin_client(
    test_settings: Settings, origin_stub: OriginStub
) -> AsyncGenerator[OriginClient, None]:
    """OriginClient talking to the scripted origin."""
    client = OriginClient(test_settings, transport=httpx.MockTransport(origin_stub))
    yield client
    await client.close()


@pytest.fixture
def content_service(
    cache_store: CacheStore, origin_client: OriginClient
) -> ContentService:
    return ContentService(cache_store, origin_client)


@pytest.fixture
def health_aggregator(
    cache_store: CacheStore, origin_client: OriginClient
) -> HealthAggregator:
    return HealthAggregator(cache_store, origin_client)


@pytest.fixture
def analytics_service() -> AnalyticsService:
    return AnalyticsService([ConsoleProvider()])


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_settings: Settings,
    content_service: ContentService,
    health_aggregator: HealthAggregator,
    analytics_service: AnalyticsService,
) -> FastAPI:
    """Create a test application wired to the test doubles.

    ASGITransport does not run the lifespan, so services are injected
    through dependency overrides.
    """
    app = create_app(settings=test_settings)
    app.dependency_overrides[get_content_service] = lambda: content_service
    app.dependency_overrides[get_health_aggregator] = lambda: health_aggregator
    app.dependency_overrides[get_analytics_service] = lambda: analytics_service
    return app


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an unauthenticated async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def authenticated_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async client that sends the X-API-Key header."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": TEST_API_KEY},
    ) as client:
        yield client
