"""Integration tests for per-IP rate limiting."""

from collections.abc import AsyncGenerator

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
from contentgate.services.analytics import AnalyticsService
from contentgate.services.content import ContentService
from contentgate.services.health import HealthAggregator
from tests.doubles import TEST_API_KEY, OriginStub

pytestmark = pytest.mark.integration


@pytest.fixture
def limited_app(
    test_settings: Settings,
    content_service: ContentService,
    health_aggregator: HealthAggregator,
    analytics_service: AnalyticsService,
) -> FastAPI:
    settings = test_settings.model_copy(
        update={"rate_limit_requests": 2, "analytics_rate_limit_requests": 1}
    )
    app = create_app(settings=settings)
    app.dependency_overrides[get_content_service] = lambda: content_service
    app.dependency_overrides[get_health_aggregator] = lambda: health_aggregator
    app.dependency_overrides[get_analytics_service] = lambda: analytics_service
    return app


@pytest.fixture
async def limited_client(limited_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=limited_app),
        base_url="http://test",
        headers={"X-API-Key": TEST_API_KEY},
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_exceeding_budget_returns_429(
    limited_client: AsyncClient, origin_stub: OriginStub
) -> None:
    origin_stub.respond("/api/articles")

    assert (await limited_client.get("/api/v1/content/articles")).status_code == 200
    assert (await limited_client.get("/api/v1/content/articles")).status_code == 200
    response = await limited_client.get("/api/v1/content/articles")

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) >= 1
    error = response.json()["error"]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert error["details"]["limit"] == 2
    # The second read was a cache hit.
    assert len(origin_stub.content_requests()) == 1


@pytest.mark.asyncio
async def test_budget_is_per_client_ip(
    limited_client: AsyncClient, origin_stub: OriginStub
) -> None:
    origin_stub.respond("/api/articles")
    for _ in range(2):
        await limited_client.get(
            "/api/v1/content/articles", headers={"X-Forwarded-For": "203.0.113.1"}
        )

    response = await limited_client.get(
        "/api/v1/content/articles", headers={"X-Forwarded-For": "203.0.113.2"}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_health_is_not_limited(limited_client: AsyncClient) -> None:
    statuses = [
        (await limited_client.get("/health/live")).status_code for _ in range(5)
    ]

    assert statuses == [200] * 5


@pytest.mark.asyncio
async def test_analytics_has_its_own_budget(limited_client: AsyncClient) -> None:
    body = {"events": [{"name": "page_view"}]}

    first = await limited_client.post("/api/v1/analytics/events", json=body)
    second = await limited_client.post("/api/v1/analytics/events", json=body)

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["error"]["details"]["limit"] == 1


@pytest.mark.asyncio
async def test_allowed_responses_carry_budget_headers(
    limited_client: AsyncClient, origin_stub: OriginStub
) -> None:
    origin_stub.respond("/api/articles")

    response = await limited_client.get("/api/v1/content/articles")

    assert response.headers["X-RateLimit-Limit"] == "2"
    assert response.headers["X-RateLimit-Remaining"] == "1"
