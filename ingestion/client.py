from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from curate.core.config import settings
from curate.domain import Item
from curate.errors import IndexerQueryError, NetworkError

from .cache import ItemFilters, validate_filters
from .cancellation import CancellationToken
from .normalize import normalize_item
from .schemas import GraphQLResponse


ITEM_FIELDS = """
  itemID
  data
  status
  disputed
  latestRequestSubmissionTime
  metadata {
    props {
      description
      isIdentifier
      label
      type
      value
    }
  }
  requests {
    challenger
    deposit
    disputeID
    disputed
    requester
    resolutionTime
    resolved
    requestType
    rounds {
      appealed
      amountPaidChallenger
      amountPaidRequester
      appealPeriodEnd
      appealPeriodStart
      hasPaidChallenger
      hasPaidRequester
      ruling
    }
    submissionTime
    evidenceGroup {
      id
      evidences {
        id
        URI
        party
        timestamp
      }
    }
  }
"""


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_items_query(
    registry_address: str,
    *,
    batch_size: int,
    cursor: int | None = None,
    filters: ItemFilters | None = None,
) -> str:
    """Render the ``litems`` query for one page, newest submissions first."""

    conditions = [f"registry: {_quote(registry_address.lower())}"]
    if cursor:
        conditions.append(f"latestRequestSubmissionTime_lt: {int(cursor)}")
    for name, values in validate_filters(filters).items():
        if values:
            conditions.append(f"{name}_in: [{', '.join(_quote(value) for value in values)}]")

    return f"""
    query GetItems {{
      litems(
        first: {batch_size}
        orderBy: latestRequestSubmissionTime
        orderDirection: desc
        where: {{ {', '.join(conditions)} }}
      ) {{
        {ITEM_FIELDS}
      }}
    }}
    """


@dataclass(slots=True)
class ItemsBatch:
    items: list[Item] = field(default_factory=list)
    has_more: bool = False


class SubgraphClient:
    """POSTs GraphQL queries to a Light Curate subgraph."""

    def __init__(
        self,
        url: str,
        *,
        batch_size: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.batch_size = batch_size or settings.items_batch_size
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=timeout or settings.request_timeout_seconds
        )

    async def query(self, query: str) -> GraphQLResponse:
        try:
            response = await self.client.post(
                self.url,
                json={"query": query},
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            payload: Any = response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"Subgraph request failed: {exc}") from exc
        except ValueError as exc:
            raise IndexerQueryError(f"Subgraph returned invalid JSON: {exc}") from exc

        try:
            result = GraphQLResponse.model_validate(payload)
        except ValidationError as exc:
            raise IndexerQueryError("Received invalid data format from subgraph") from exc

        if result.errors:
            logger.error("GraphQL errors: {}", [error.message for error in result.errors])
            raise IndexerQueryError(f"GraphQL error: {result.errors[0].message}")
        return result

    async def fetch_items_batch(
        self,
        registry_address: str,
        *,
        cursor: int | None = None,
        filters: ItemFilters | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ItemsBatch:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        query = build_items_query(
            registry_address, batch_size=self.batch_size, cursor=cursor, filters=filters
        )
        logger.info(
            "Subgraph batch registry={} cursor={} filters={}",
            registry_address.lower(),
            cursor,
            sorted(filters) if filters else [],
        )
        result = await self.query(query)
        if result.data is None:
            raise IndexerQueryError("Received invalid data format from subgraph")

        raw_items = result.data.litems
        return ItemsBatch(
            items=[normalize_item(raw_item) for raw_item in raw_items],
            has_more=len(raw_items) == self.batch_size,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "SubgraphClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
