"""Services package for the gateway.

This module exports the retrieval, health and analytics services.
"""

from contentgate.services.analytics import (
    AnalyticsProvider,
    AnalyticsService,
    ConsoleProvider,
    GoogleAnalyticsProvider,
)
from contentgate.services.cache import CacheStore
from contentgate.services.content import (
    ContentService,
    Provenance,
    RetrievalOutcome,
    encode_query,
    query_pairs,
)
from contentgate.services.health import HealthAggregator, HealthReport
from contentgate.services.origin import OriginClient, OriginError

__all__ = [
    # Analytics
    "AnalyticsProvider",
    "AnalyticsService",
    "ConsoleProvider",
    "GoogleAnalyticsProvider",
    # Cache
    "CacheStore",
    # Content
    "ContentService",
    "Provenance",
    "RetrievalOutcome",
    "encode_query",
    "query_pairs",
    # Health
    "HealthAggregator",
    "HealthReport",
    # Origin
    "OriginClient",
    "OriginError",
]
