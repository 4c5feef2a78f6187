"""Subgraph-backed item retrieval with pagination, filters, and caching."""

from .cache import ItemsCache, cache_key
from .cancellation import CancellationToken
from .client import ItemsBatch, SubgraphClient, build_items_query
from .service import FetchProgress, FetchResult, FetchStats, ItemsService

__all__ = [
    "CancellationToken",
    "FetchProgress",
    "FetchResult",
    "FetchStats",
    "ItemsBatch",
    "ItemsCache",
    "ItemsService",
    "SubgraphClient",
    "build_items_query",
    "cache_key",
]
