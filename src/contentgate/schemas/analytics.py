"""Schemas for analytics event ingestion."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalyticsEvent(BaseModel):
    """A single tracked event sent by a client."""

    name: str = Field(..., min_length=1, description="Event name (e.g. page_view)")
    category: str | None = Field(None, description="Event category")
    label: str | None = Field(None, description="Event label")
    value: float | None = Field(None, description="Numeric event value")
    session_id: str | None = Field(None, description="Client session identifier")
    user_id: str | None = Field(None, description="Client user identifier")
    timestamp: datetime | None = Field(
        None, description="Event time; set on receipt when omitted"
    )
    properties: dict[str, Any] = Field(
        default_factory=dict, description="Free-form event properties"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "cta_click",
                "category": "engagement",
                "label": "book-a-tour",
                "session_id": "s-123",
                "properties": {"path": "/day-pass"},
            }
        }
    )


class AnalyticsEventBatch(BaseModel):
    """Request body of the ingestion endpoint."""

    events: list[AnalyticsEvent] = Field(default_factory=list)


class IngestResponse(BaseModel):
    """Ingestion result. ``message`` is only set on failure."""

    success: bool
    count: int = 0
    message: str | None = None
