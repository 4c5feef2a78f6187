"""Capability contract for the blockchain node consumed by the fee engine and actions."""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class ChainGateway(Protocol):
    """Interface implemented by chain adapters (web3 providers, test doubles)."""

    async def call(self, address: str, method: str, *args: Any) -> Any:
        """Invoke a read-only getter and return its decoded result.

        Getters with several named outputs return a mapping keyed by output name.
        """

    async def estimate_gas(self, address: str, method: str, *args: Any, value: int = 0) -> int:
        """Return the gas estimate for a mutator call sending ``value`` base units."""

    async def send_transaction(
        self,
        address: str,
        method: str,
        *args: Any,
        value: int = 0,
        gas: int | None = None,
    ) -> str:
        """Sign and submit a mutator call, returning the transaction hash."""

    async def get_past_events(
        self,
        address: str,
        event: str,
        *,
        from_block: int = 0,
    ) -> Sequence[Mapping[str, Any]]:
        """Return logged events, each carrying a ``returnValues`` mapping."""


__all__ = ["ChainGateway"]
