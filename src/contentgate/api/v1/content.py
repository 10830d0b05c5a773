"""Content read endpoints backed by the cache-aside ContentService.

Responses carry the origin's bytes verbatim, plus an ``X-Cache-Status``
header reporting HIT, MISS or BYPASS.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from contentgate.core.exceptions import OriginServiceError
from contentgate.core.logging import get_logger, log_context
from contentgate.dependencies import get_content_service
from contentgate.schemas.common import ErrorResponse
from contentgate.schemas.content import (
    CacheInvalidationRequest,
    CacheInvalidationResponse,
)
from contentgate.services.content import ContentService, RetrievalOutcome
from contentgate.services.origin import OriginError

logger = get_logger(__name__)

router = APIRouter()

ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]

CONTENT_RESPONSES: dict[int | str, dict] = {
    200: {"description": "Raw origin payload", "content": {"application/json": {}}},
    401: {"model": ErrorResponse, "description": "Missing or invalid API key"},
    502: {"model": ErrorResponse, "description": "Origin error"},
}


def _to_response(outcome: RetrievalOutcome, **extra_headers: str) -> Response:
    headers = {"X-Cache-Status": outcome.provenance.value, **extra_headers}
    return Response(
        content=outcome.payload,
        media_type="application/json",
        headers=headers,
    )


def _origin_failure(error: OriginError) -> OriginServiceError:
    return OriginServiceError(origin_status=error.status_code, origin_body=error.body)


# =============================================================================
# Content Endpoints
# =============================================================================


@router.get(
    "/content/{content_type}",
    summary="Get a collection",
    description="List entries of a content type. All query parameters are forwarded.",
    responses=CONTENT_RESPONSES,
)
async def get_collection(
    content_type: str,
    request: Request,
    content: ContentServiceDep,
) -> Response:
    try:
        outcome = await content.get_collection(
            content_type, request.query_params.multi_items()
        )
    except OriginError as e:
        raise _origin_failure(e) from e
    return _to_response(outcome)


@router.get(
    "/content/{content_type}/{item_id}",
    summary="Get a single entry",
    description=(
        "Fetch one entry of a content type by ID. Query parameters are forwarded."
    ),
    responses=CONTENT_RESPONSES,
)
async def get_single(
    content_type: str,
    item_id: str,
    request: Request,
    content: ContentServiceDep,
) -> Response:
    try:
        outcome = await content.get_single(
            content_type, item_id, request.query_params.multi_items()
        )
    except OriginError as e:
        raise _origin_failure(e) from e
    return _to_response(outcome)


@router.get(
    "/pages/{slug}",
    summary="Get a page by slug",
    description="Look up a page by slug with all relations populated.",
    responses=CONTENT_RESPONSES,
)
async def get_page(slug: str, content: ContentServiceDep) -> Response:
    try:
        outcome = await content.get_page_by_slug(slug)
    except OriginError as e:
        raise _origin_failure(e) from e
    return _to_response(outcome)


@router.get(
    "/preview/{content_type}/{item_id}",
    summary="Preview a draft entry",
    description="Fetch the draft version of an entry. Never cached.",
    responses=CONTENT_RESPONSES,
)
async def get_preview(
    content_type: str,
    item_id: str,
    content: ContentServiceDep,
) -> Response:
    try:
        outcome = await content.get_preview(content_type, item_id)
    except OriginError as e:
        raise _origin_failure(e) from e
    return _to_response(outcome, **{"Cache-Control": "no-store"})


# =============================================================================
# Cache Management
# =============================================================================


@router.post(
    "/cache/invalidate",
    response_model=CacheInvalidationResponse,
    summary="Invalidate cached content",
    description=(
        "Drop cached collection and single-entry reads of a content type. "
        "Suitable as a Strapi webhook target. Page lookups are not affected."
    ),
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid API key"}
    },
)
async def invalidate_cache(
    body: CacheInvalidationRequest,
    content: ContentServiceDep,
) -> CacheInvalidationResponse:
    with log_context(content_type=body.content_type):
        deleted = await content.invalidate_cache(body.content_type)
    return CacheInvalidationResponse(content_type=body.content_type, deleted=deleted)
