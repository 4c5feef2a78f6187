"""Process-local cache of item listings keyed by chain, registry, and filters."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from loguru import logger

from curate.domain import Item
from curate.errors import CacheKeyError

ItemFilters = Mapping[str, Sequence[str]]


def validate_filters(filters: ItemFilters | None) -> dict[str, list[str]]:
    """Return ``filters`` as plain lists, rejecting anything that is not ``{str: [str]}``."""

    if filters is None:
        return {}
    if not isinstance(filters, Mapping):
        raise CacheKeyError(f"Filters must be a mapping of field name to values, got {type(filters).__name__}")

    normalized: dict[str, list[str]] = {}
    for key, values in filters.items():
        if not isinstance(key, str) or not key:
            raise CacheKeyError(f"Filter field names must be non-empty strings, got {key!r}")
        if values is None:
            normalized[key] = []
            continue
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise CacheKeyError(f"Filter '{key}' must be a list of strings, got {values!r}")
        if not all(isinstance(value, str) for value in values):
            raise CacheKeyError(f"Filter '{key}' must only contain strings")
        normalized[key] = list(values)
    return normalized


def cache_key(chain_id: int, registry_address: str, filters: ItemFilters | None = None) -> str:
    """Build ``"{chain}-{registry}"`` plus a canonical filter suffix when filters are set."""

    if not registry_address:
        raise CacheKeyError("A registry address is required to build a cache key")
    key = f"{chain_id}-{registry_address.lower()}"
    normalized = validate_filters(filters)
    if normalized:
        signature = ";".join(
            f"{name}:{','.join(sorted(values))}" for name, values in sorted(normalized.items())
        )
        key += f"-{signature}"
    return key


class ItemsCache:
    """Plain dict store with no TTL; entries live until explicitly invalidated.

    Safe under single-threaded asyncio scheduling only. Concurrent callers for
    the same key may both fetch and the last writer wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Item]] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> list[Item] | None:
        items = self._entries.get(key)
        return list(items) if items is not None else None

    def set(self, key: str, items: Sequence[Item]) -> None:
        self._entries[key] = list(items)
        logger.debug("Cached {} items under {}", len(items), key)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
