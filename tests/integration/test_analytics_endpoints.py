"""Integration tests for analytics event ingestion."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import AsyncClient

from contentgate.dependencies import get_analytics_service
from contentgate.services.analytics import AnalyticsService

pytestmark = pytest.mark.integration


@pytest.fixture
def tracked(app: FastAPI) -> AsyncMock:
    """Swap in a service whose track_event is recorded."""
    service = AnalyticsService([])
    service.track_event = AsyncMock()  # type: ignore[method-assign]
    app.dependency_overrides[get_analytics_service] = lambda: service
    return service.track_event


@pytest.mark.asyncio
async def test_ingest_events(async_client: AsyncClient, tracked: AsyncMock) -> None:
    response = await async_client.post(
        "/api/v1/analytics/events",
        json={
            "events": [
                {"name": "page_view", "properties": {"path": "/"}},
                {"name": "cta_click", "category": "engagement", "value": 1},
            ]
        },
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 2}
    assert tracked.await_count == 2
    assert tracked.await_args_list[1].args[0].category == "engagement"


@pytest.mark.asyncio
async def test_empty_batch(async_client: AsyncClient, tracked: AsyncMock) -> None:
    response = await async_client.post("/api/v1/analytics/events", json={"events": []})

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 0}
    tracked.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_json_is_400(
    async_client: AsyncClient, tracked: AsyncMock
) -> None:
    response = await async_client.post(
        "/api/v1/analytics/events",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "count": 0,
        "message": "Invalid request body",
    }
    tracked.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"events": [{"name": ""}]},
        {"events": [{"category": "engagement"}]},
        {"events": "page_view"},
        ["page_view"],
    ],
)
async def test_invalid_schema_is_400(
    async_client: AsyncClient, tracked: AsyncMock, body: object
) -> None:
    response = await async_client.post("/api/v1/analytics/events", json=body)

    assert response.status_code == 400
    assert response.json()["success"] is False
    tracked.assert_not_called()


@pytest.mark.asyncio
async def test_ingestion_needs_no_api_key(async_client: AsyncClient) -> None:
    """Browsers post events directly, so no key is required."""
    response = await async_client.post(
        "/api/v1/analytics/events", json={"events": [{"name": "page_view"}]}
    )

    assert response.status_code == 200
