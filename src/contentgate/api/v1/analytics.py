"""Analytics event ingestion endpoint."""

from typing import Annotated

import pydantic
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from contentgate.core.logging import get_logger
from contentgate.dependencies import get_analytics_service
from contentgate.schemas.analytics import AnalyticsEventBatch, IngestResponse
from contentgate.services.analytics import AnalyticsService

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/events",
    response_model=IngestResponse,
    response_model_exclude_none=True,
    summary="Ingest analytics events",
    description=(
        "Accept a batch of client events and forward them to analytics providers."
    ),
    responses={400: {"model": IngestResponse, "description": "Invalid request body"}},
)
async def ingest_events(
    request: Request,
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> IngestResponse | JSONResponse:
    """Track every event in the batch.

    The body is validated by hand so a malformed batch gets the ingestion
    failure envelope with a 400, not FastAPI's generic 422.
    """
    try:
        batch = AnalyticsEventBatch.model_validate(await request.json())
    except (ValueError, pydantic.ValidationError) as e:
        logger.warning("analytics_invalid_body", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=IngestResponse(
                success=False, message="Invalid request body"
            ).model_dump(exclude_none=True),
        )

    for event in batch.events:
        await analytics.track_event(event)

    logger.info("analytics_events_ingested", count=len(batch.events))
    return IngestResponse(success=True, count=len(batch.events))
