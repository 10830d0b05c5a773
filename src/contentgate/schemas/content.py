"""Schemas for cache management endpoints."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CacheInvalidationRequest(BaseModel):
    """Invalidation trigger.

    Strapi webhooks name the changed content type ``model``; it is
    accepted as an alias of ``content_type``.
    """

    content_type: str = Field(
        ...,
        min_length=1,
        pattern=r"^[A-Za-z0-9_\-]+$",
        validation_alias=AliasChoices("content_type", "model"),
        description="Content type whose cached entries should be dropped",
    )

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"content_type": "articles"}},
    )


class CacheInvalidationResponse(BaseModel):
    """Invalidation result."""

    content_type: str
    deleted: int = Field(..., ge=0, description="Number of cache entries removed")
