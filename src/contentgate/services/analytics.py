"""Analytics event fan-out to pluggable providers.

Providers are chosen from configuration at startup. Each one exposes a
name, an enablement check and an async ``track`` coroutine; the service
sends every event to every enabled provider and never lets a provider
failure reach the caller.
"""

from datetime import UTC, datetime
from typing import Any, Protocol

import httpx

from contentgate.config import Settings
from contentgate.core.logging import get_logger
from contentgate.schemas.analytics import AnalyticsEvent

logger = get_logger(__name__)


class AnalyticsProvider(Protocol):
    """Capability implemented by every analytics backend."""

    name: str

    def is_enabled(self) -> bool: ...

    async def track(self, event: AnalyticsEvent) -> None: ...


class ConsoleProvider:
    """Logs events at debug level. Always enabled."""

    name = "console"

    def is_enabled(self) -> bool:
        return True

    async def track(self, event: AnalyticsEvent) -> None:
        logger.debug(
            "analytics_event",
            event_name=event.name,
            category=event.category,
            session=event.session_id,
            properties=event.properties,
        )


class GoogleAnalyticsProvider:
    """Sends events to GA4 through the Measurement Protocol.

    See: https://developers.google.com/analytics/devguides/collection/protocol/ga4
    """

    name = "google_analytics"

    COLLECT_URL = "https://www.google-analytics.com/mp/collect"

    def __init__(
        self,
        measurement_id: str,
        api_secret: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.measurement_id = measurement_id
        self.api_secret = api_secret
        self._client = client

    def is_enabled(self) -> bool:
        return bool(self.measurement_id and self.api_secret)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=5.0)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def build_payload(self, event: AnalyticsEvent) -> dict[str, Any]:
        params: dict[str, Any] = dict(event.properties)
        for key in ("category", "label", "value"):
            value = getattr(event, key)
            if value is not None:
                params[f"event_{key}"] = value
        if event.session_id:
            params["session_id"] = event.session_id

        payload: dict[str, Any] = {
            "client_id": event.session_id or "anonymous",
            "events": [{"name": event.name, "params": params}],
        }
        if event.user_id:
            payload["user_id"] = event.user_id
        if event.timestamp:
            payload["timestamp_micros"] = int(event.timestamp.timestamp() * 1_000_000)
        return payload

    async def track(self, event: AnalyticsEvent) -> None:
        response = await self._get_client().post(
            self.COLLECT_URL,
            params={
                "measurement_id": self.measurement_id,
                "api_secret": self.api_secret,
            },
            json=self.build_payload(event),
        )
        response.raise_for_status()


class AnalyticsService:
    """Dispatches events to all enabled providers.

    Usage:
        ```python
        analytics = AnalyticsService.from_settings(settings)
        await analytics.track_event(AnalyticsEvent(name="signup"))
        ```
    """

    def __init__(self, providers: list[AnalyticsProvider]) -> None:
        self.providers = providers

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnalyticsService":
        """Build the provider list from configuration."""
        providers: list[AnalyticsProvider] = [ConsoleProvider()]

        if settings.google_analytics_id:
            ga = GoogleAnalyticsProvider(
                measurement_id=settings.google_analytics_id,
                api_secret=settings.google_analytics_api_secret.get_secret_value(),
            )
            providers.append(ga)
            logger.info(
                "google_analytics_configured",
                ga_id=settings.google_analytics_id,
                enabled=ga.is_enabled(),
            )

        return cls(providers)

    async def track_event(self, event: AnalyticsEvent) -> None:
        """Send an event to every enabled provider.

        Provider errors are logged, never raised.
        """
        if event.timestamp is None:
            event = event.model_copy(update={"timestamp": datetime.now(UTC)})

        for provider in self.providers:
            if not provider.is_enabled():
                continue
            try:
                await provider.track(event)
            except Exception as e:
                logger.error(
                    "analytics_track_failed",
                    provider=provider.name,
                    event_name=event.name,
                    error=str(e),
                )

    async def track_page_view(
        self,
        path: str,
        referrer: str | None = None,
        user_agent: str | None = None,
        session_id: str | None = None,
    ) -> None:
        await self.track_event(
            AnalyticsEvent(
                name="page_view",
                category="navigation",
                session_id=session_id,
                properties={
                    "path": path,
                    "referrer": referrer,
                    "user_agent": user_agent,
                },
            )
        )

    async def close(self) -> None:
        """Close provider HTTP clients."""
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
