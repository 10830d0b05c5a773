"""Strapi origin client.

Issues authenticated GET requests against the Strapi content API and
returns the raw response bytes. Payloads are never parsed here; the
gateway passes them through to its consumers untouched.

Endpoint shapes:
    collection: {base}/api/{type}[?{query}]
    single:     {base}/api/{type}/{id}[?{query}]
    page:       {base}/api/pages?filters[slug][$eq]={slug}&populate=*
    preview:    {base}/api/{type}/{id}?publicationState=preview
"""

from urllib.parse import quote, quote_plus

import httpx

from contentgate.config import Settings
from contentgate.core.logging import get_logger

logger = get_logger(__name__)


class OriginError(Exception):
    """Raised when an origin request fails.

    Attributes:
        status_code: HTTP status returned by the origin, None for transport errors
        body: Response body (or transport error text)
    """

    def __init__(self, status_code: int | None, body: str) -> None:
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"origin request failed: {body}")
        else:
            super().__init__(f"origin returned status {status_code}: {body}")


class OriginClient:
    """Async client for the Strapi content API.

    One pooled ``httpx.AsyncClient`` is shared by all requests. Every call is
    a single attempt bounded by ``strapi_timeout``; nothing is retried.

    Usage:
        ```python
        origin = OriginClient(settings)
        data = await origin.fetch(origin.collection_url("articles", "limit=10"))
        ```
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Application settings (origin URL, token, timeout)
            transport: Optional httpx transport override
        """
        self.base_url = settings.strapi_url
        self._health_path = settings.strapi_health_path
        self._timeout = settings.strapi_timeout
        self._token = (
            settings.strapi_api_token.get_secret_value()
            if settings.strapi_api_token
            else ""
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Endpoint construction
    # -------------------------------------------------------------------------

    def _path(self, *segments: str) -> str:
        """Path segments are escaped so they cannot add a query or a path level."""
        return "/".join(quote(segment, safe="") for segment in segments)

    def collection_url(self, content_type: str, query: str = "") -> str:
        endpoint = f"{self.base_url}/api/{self._path(content_type)}"
        return f"{endpoint}?{query}" if query else endpoint

    def single_url(self, content_type: str, item_id: str, query: str = "") -> str:
        endpoint = f"{self.base_url}/api/{self._path(content_type, item_id)}"
        return f"{endpoint}?{query}" if query else endpoint

    def page_url(self, slug: str) -> str:
        return (
            f"{self.base_url}/api/pages"
            f"?filters[slug][$eq]={quote_plus(slug)}&populate=*"
        )

    def preview_url(self, content_type: str, item_id: str) -> str:
        return (
            f"{self.base_url}/api/{self._path(content_type, item_id)}"
            "?publicationState=preview"
        )

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def fetch(self, endpoint: str) -> bytes:
        """GET an origin endpoint and return the body bytes.

        Args:
            endpoint: Absolute origin URL

        Returns:
            Raw response body

        Raises:
            OriginError: On transport failure or any status other than 200
        """
        client = self._get_client()
        logger.debug("origin_fetch", endpoint=endpoint)

        try:
            response = await client.get(endpoint, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error("origin_request_error", endpoint=endpoint, error=str(e))
            raise OriginError(None, str(e)) from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "origin_fetch_failed",
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise OriginError(response.status_code, response.text)

        return response.content

    async def is_healthy(self) -> bool:
        """Probe the origin liveness endpoint. Never raises.

        Both 200 and 204 count as healthy.
        """
        client = self._get_client()
        try:
            response = await client.get(f"{self.base_url}{self._health_path}")
        except httpx.HTTPError as e:
            logger.warning("origin_health_check_failed", error=str(e))
            return False

        return response.status_code in (httpx.codes.OK, httpx.codes.NO_CONTENT)
