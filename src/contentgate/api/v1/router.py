"""API v1 main router.

Aggregates all v1 API routers into a single router for inclusion in the app.
"""

from fastapi import APIRouter, Depends

from contentgate.api.v1.analytics import router as analytics_router
from contentgate.api.v1.content import router as content_router
from contentgate.dependencies import require_api_key

router = APIRouter()

# Content, pages, previews and cache management require an API key
router.include_router(
    content_router,
    tags=["Content"],
    dependencies=[Depends(require_api_key)],
)
router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])
