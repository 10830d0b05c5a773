"""Readiness aggregation over the cache and the origin.

The origin is a hard dependency; the cache is an optional performance
layer. Overall status is therefore driven by the origin probe alone.
"""

import asyncio
from dataclasses import dataclass, field

from contentgate.services.cache import CacheStore
from contentgate.services.origin import OriginClient

STATUS_OK = "ok"
STATUS_UNAVAILABLE = "unavailable"
STATUS_DEGRADED = "degraded"


@dataclass
class HealthReport:
    """Overall status plus the per-dependency results."""

    status: str
    checks: dict[str, str] = field(default_factory=dict)

    @property
    def is_ok(self) -> bool:
        return self.status == STATUS_OK


class HealthAggregator:
    """Runs both liveness probes concurrently and combines them."""

    def __init__(self, cache: CacheStore, origin: OriginClient) -> None:
        self.cache = cache
        self.origin = origin

    async def readiness(self) -> HealthReport:
        redis_ok, strapi_ok = await asyncio.gather(
            self.cache.is_connected(),
            self.origin.is_healthy(),
        )
        checks = {
            "redis": STATUS_OK if redis_ok else STATUS_UNAVAILABLE,
            "strapi": STATUS_OK if strapi_ok else STATUS_UNAVAILABLE,
        }
        return HealthReport(
            status=STATUS_OK if strapi_ok else STATUS_DEGRADED,
            checks=checks,
        )
