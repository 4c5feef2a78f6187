"""Paginated, filterable, cached retrieval of registry items from the subgraph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

import httpx
from loguru import logger

from curate.core.config import Settings, get_settings
from curate.domain import Item, ItemStatus
from curate.errors import AbortedError, NetworkError

from .cache import ItemFilters, ItemsCache, cache_key
from .cancellation import CancellationToken
from .client import ItemsBatch, SubgraphClient


@dataclass(slots=True)
class FetchProgress:
    loaded: int
    total: int | None = None


@dataclass(slots=True)
class FetchStats:
    batches: int = 0
    total: int = 0


@dataclass(slots=True)
class FetchResult:
    items: list[Item] = field(default_factory=list)
    stats: FetchStats = field(default_factory=FetchStats)


ProgressCallback = Callable[[FetchProgress], None]
ErrorCallback = Callable[[Exception], None]


def _status_label(status: str | ItemStatus) -> str:
    return status.label if isinstance(status, ItemStatus) else status


class ItemsService:
    """Fetches items batch by batch and keeps the results in an injected cache.

    Listing failures degrade quietly: cancellation and network errors return an
    empty result instead of raising, so listing views can render partial data.
    """

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        cache: ItemsCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.cache = cache if cache is not None else ItemsCache()
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            timeout=self.settings.request_timeout_seconds
        )

    def _subgraph(self, chain_id: int, subgraph_url: str | None) -> SubgraphClient:
        url = subgraph_url or self.settings.resolve_subgraph_url(chain_id)
        return SubgraphClient(
            url, batch_size=self.settings.items_batch_size, client=self.http_client
        )

    async def fetch_items_batch(
        self,
        registry_address: str,
        chain_id: int,
        *,
        cursor: int | None = None,
        filters: ItemFilters | None = None,
        subgraph_url: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ItemsBatch:
        client = self._subgraph(chain_id, subgraph_url)
        return await client.fetch_items_batch(
            registry_address, cursor=cursor, filters=filters, cancel_token=cancel_token
        )

    async def fetch_items(
        self,
        registry_address: str,
        chain_id: int,
        *,
        subgraph_url: str | None = None,
        force_refresh: bool = False,
        cancel_token: CancellationToken | None = None,
        on_progress: ProgressCallback | None = None,
        max_batches: int | None = None,
        filters: ItemFilters | None = None,
        on_error: ErrorCallback | None = None,
    ) -> FetchResult:
        key = cache_key(chain_id, registry_address, filters)

        if not force_refresh:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Serving {} cached items for {}", len(cached), key)
                return FetchResult(items=cached, stats=FetchStats(batches=0, total=len(cached)))

        client = self._subgraph(chain_id, subgraph_url)
        items: list[Item] = []
        cursor: int | None = None
        batches = 0

        try:
            while max_batches is None or batches < max_batches:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                batch = await client.fetch_items_batch(
                    registry_address, cursor=cursor, filters=filters, cancel_token=cancel_token
                )
                batches += 1
                items.extend(batch.items)

                if on_progress is not None:
                    on_progress(
                        FetchProgress(
                            loaded=len(items), total=None if batch.has_more else len(items)
                        )
                    )

                if not batch.has_more or not batch.items:
                    break
                cursor = int(batch.items[-1].latest_request_submission_time)
        except AbortedError:
            logger.info("Fetch of {} aborted after {} batches", key, batches)
            return FetchResult()
        except NetworkError as exc:
            logger.error("Error fetching items for {}: {}", key, exc)
            if on_error is not None:
                on_error(exc)
            return FetchResult()

        # Partial results from max_batches are cached as-is.
        self.cache.set(key, items)
        return FetchResult(items=items, stats=FetchStats(batches=batches, total=len(items)))

    async def fetch_items_by_id(
        self,
        registry_address: str,
        item_ids: Sequence[str],
        chain_id: int,
        **options,
    ) -> FetchResult:
        options.pop("filters", None)
        options["force_refresh"] = True
        return await self.fetch_items(
            registry_address, chain_id, filters={"itemID": list(item_ids)}, **options
        )

    async def fetch_items_by_status(
        self,
        registry_address: str,
        statuses: Sequence[str | ItemStatus],
        chain_id: int,
        **options,
    ) -> FetchResult:
        options.pop("filters", None)
        options["force_refresh"] = True
        labels = [_status_label(status) for status in statuses]
        return await self.fetch_items(
            registry_address, chain_id, filters={"status": labels}, **options
        )

    def clear_items_cache(
        self,
        registry_address: str | None = None,
        chain_id: int | None = None,
        filters: ItemFilters | None = None,
    ) -> None:
        if registry_address is None and chain_id is None and filters is None:
            self.cache.clear()
            return
        if registry_address and chain_id:
            self.cache.delete(cache_key(chain_id, registry_address, filters))

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "ItemsService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


__all__ = [
    "FetchProgress",
    "FetchResult",
    "FetchStats",
    "ItemsService",
]
