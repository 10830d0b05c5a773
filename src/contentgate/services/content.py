"""ContentService - cache-aside retrieval of Strapi content.

Every cacheable read follows the same steps:

1. Build a deterministic cache key from the operation and its inputs.
2. Look the key up in the CacheStore; on a hit, return without calling the origin.
3. On a miss, fetch from the origin. Failures propagate and are never cached.
4. Write the fetched bytes back under the key (best-effort) and return them.

Previews skip the cache entirely.

Query parameters are canonicalised before they become part of a key: pairs
are stably sorted by name, so ``?limit=10&sort=title`` and
``?sort=title&limit=10`` share a key, while the relative order of a repeated
parameter's values is preserved (``?tag=a&tag=b`` and ``?tag=b&tag=a``
stay distinct).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from contentgate.core.logging import get_logger
from contentgate.services.cache import CacheStore
from contentgate.services.origin import OriginClient

logger = get_logger(__name__)

QueryParams = Mapping[str, str] | Iterable[tuple[str, str]] | None


class Provenance(str, Enum):
    """Where a payload came from. Emitted as the X-Cache-Status header."""

    HIT = "HIT"
    MISS = "MISS"
    BYPASS = "BYPASS"


@dataclass(frozen=True)
class RetrievalOutcome:
    """Payload bytes plus their provenance."""

    payload: bytes
    provenance: Provenance

    @property
    def cached(self) -> bool:
        return self.provenance is Provenance.HIT


def query_pairs(query: QueryParams) -> list[tuple[str, str]]:
    """Materialise query parameters as a list of ``(name, value)`` pairs."""
    if not query:
        return []
    return list(query.items()) if isinstance(query, Mapping) else list(query)


def encode_query(query: QueryParams) -> str:
    """Encode query parameters in canonical form.

    Accepts a mapping, an iterable of ``(name, value)`` pairs (for
    repeated parameters, e.g. Starlette's ``multi_items()``), or None.
    """
    pairs = query_pairs(query)
    pairs.sort(key=lambda pair: pair[0])
    return urlencode(pairs)


class ContentService:
    """Cache-aside orchestrator over CacheStore and OriginClient.

    The service owns the cache-key policy only; the Redis connection and
    the HTTP connection pool belong to their respective clients.
    """

    def __init__(self, cache: CacheStore, origin: OriginClient) -> None:
        self.cache = cache
        self.origin = origin

    # -------------------------------------------------------------------------
    # Cache Key Generators
    # -------------------------------------------------------------------------

    @staticmethod
    def collection_key(content_type: str, query: QueryParams = None) -> str:
        """e.g. "collection:articles:limit=10" """
        return f"collection:{content_type}:{encode_query(query)}"

    @staticmethod
    def single_key(content_type: str, item_id: str, query: QueryParams = None) -> str:
        """e.g. "single:articles:42:populate=%2A" """
        return f"single:{content_type}:{item_id}:{encode_query(query)}"

    @staticmethod
    def page_key(slug: str) -> str:
        """e.g. "page:about-us" """
        return f"page:{slug}"

    @staticmethod
    def invalidation_pattern(content_type: str) -> str:
        """Glob matching collection and single keys of a content type.

        ``page:{slug}`` keys never match, even when the page populates
        entries of that type.
        """
        return f"*:{content_type}:*"

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    async def get_collection(
        self, content_type: str, query: QueryParams = None
    ) -> RetrievalOutcome:
        """Get a collection of entries.

        Raises:
            OriginError: When the origin fetch fails on a cache miss
        """
        pairs = query_pairs(query)
        return await self._read_through(
            cache_key=self.collection_key(content_type, pairs),
            endpoint=self.origin.collection_url(content_type, encode_query(pairs)),
        )

    async def get_single(
        self, content_type: str, item_id: str, query: QueryParams = None
    ) -> RetrievalOutcome:
        """Get a single entry by ID.

        Raises:
            OriginError: When the origin fetch fails on a cache miss
        """
        pairs = query_pairs(query)
        return await self._read_through(
            cache_key=self.single_key(content_type, item_id, pairs),
            endpoint=self.origin.single_url(content_type, item_id, encode_query(pairs)),
        )

    async def get_page_by_slug(self, slug: str) -> RetrievalOutcome:
        """Get a page by its slug, with all relations populated.

        Raises:
            OriginError: When the origin fetch fails on a cache miss
        """
        return await self._read_through(
            cache_key=self.page_key(slug),
            endpoint=self.origin.page_url(slug),
        )

    async def get_preview(self, content_type: str, item_id: str) -> RetrievalOutcome:
        """Get the draft version of an entry. Never read from or written to cache.

        Raises:
            OriginError: When the origin fetch fails
        """
        endpoint = self.origin.preview_url(content_type, item_id)
        payload = await self.origin.fetch(endpoint)
        return RetrievalOutcome(payload=payload, provenance=Provenance.BYPASS)

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    async def invalidate_cache(self, content_type: str) -> int:
        """Drop cached collection and single entries of a content type.

        Returns:
            Number of cache entries deleted
        """
        pattern = self.invalidation_pattern(content_type)
        count = await self.cache.delete_pattern(pattern)
        logger.info(
            "cache_invalidated",
            content_type=content_type,
            pattern=pattern,
            deleted=count,
        )
        return count

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    async def _read_through(self, cache_key: str, endpoint: str) -> RetrievalOutcome:
        cached, found = await self.cache.get(cache_key)
        if found and cached is not None:
            logger.debug("cache_hit", cache_key=cache_key)
            return RetrievalOutcome(payload=cached, provenance=Provenance.HIT)

        logger.debug("cache_miss", cache_key=cache_key)
        payload = await self.origin.fetch(endpoint)

        await self.cache.set_raw(cache_key, payload)

        return RetrievalOutcome(payload=payload, provenance=Provenance.MISS)
