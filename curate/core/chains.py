"""Static parameters of the chains a Light Curate deployment exists on."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from curate.errors import UnsupportedChainError


class SupportedChain(IntEnum):
    ETHEREUM_MAINNET = 1
    GNOSIS_CHAIN = 100


@dataclass(frozen=True, slots=True)
class ChainConfig:
    chain_id: int
    name: str
    currency_symbol: str
    decimals: int
    rpc_url: str
    explorer_url: str


CHAINS: dict[int, ChainConfig] = {
    SupportedChain.ETHEREUM_MAINNET: ChainConfig(
        chain_id=1,
        name="Ethereum Mainnet",
        currency_symbol="ETH",
        decimals=18,
        rpc_url="https://rpc.ankr.com/eth",
        explorer_url="https://etherscan.io",
    ),
    SupportedChain.GNOSIS_CHAIN: ChainConfig(
        chain_id=100,
        name="Gnosis Chain",
        currency_symbol="xDAI",
        decimals=18,
        rpc_url="https://gnosis-pokt.nodies.app",
        explorer_url="https://gnosisscan.io",
    ),
}


def get_chain(chain_id: int) -> ChainConfig:
    """Return the chain parameters or fail with the list of supported chains."""

    try:
        return CHAINS[int(chain_id)]
    except (KeyError, TypeError, ValueError) as exc:
        raise UnsupportedChainError(chain_id, CHAINS) from exc


__all__ = ["CHAINS", "ChainConfig", "SupportedChain", "get_chain"]
