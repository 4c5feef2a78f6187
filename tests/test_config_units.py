from __future__ import annotations

from decimal import Decimal

import pytest

from curate.core.chains import CHAINS, SupportedChain, get_chain
from curate.core.config import Settings
from curate.errors import ConfigurationError, UnsupportedChainError
from curate.units import apply_stake, ceil_days, from_base_units, to_base_units, with_gas_buffer


def test_subgraph_url_is_built_from_gateway_key_and_deployment():
    settings = Settings(
        graph_api_key="secret",
        graph_gateway_url="https://gateway.example/api/",
        subgraph_ids={1: "Qmdeployment"},
        subgraph_urls={},
    )

    assert settings.resolve_subgraph_url(1) == (
        "https://gateway.example/api/secret/subgraphs/id/Qmdeployment"
    )


def test_subgraph_url_override_wins_without_api_key():
    settings = Settings(graph_api_key="  ", subgraph_urls={100: "https://indexer.local/gnosis"})

    assert settings.graph_api_key is None
    assert settings.resolve_subgraph_url(100) == "https://indexer.local/gnosis"


def test_subgraph_url_requires_api_key_or_override():
    settings = Settings(graph_api_key=None, subgraph_urls={})

    with pytest.raises(ConfigurationError):
        settings.resolve_subgraph_url(1)


def test_subgraph_url_rejects_unsupported_chain():
    with pytest.raises(UnsupportedChainError) as excinfo:
        Settings(graph_api_key="secret").resolve_subgraph_url(137)

    assert excinfo.value.chain_id == 137


def test_rpc_url_defaults_to_chain_parameters():
    settings = Settings(rpc_urls={1: "https://node.local"})

    assert settings.resolve_rpc_url(1) == "https://node.local"
    assert settings.resolve_rpc_url(100) == CHAINS[SupportedChain.GNOSIS_CHAIN].rpc_url


def test_chain_parameters():
    assert get_chain(1).currency_symbol == "ETH"
    assert get_chain(SupportedChain.GNOSIS_CHAIN).decimals == 18
    with pytest.raises(UnsupportedChainError):
        get_chain(5)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0"),
        (10**18, "1"),
        (1_500_000_000_000_000_000, "1.5"),
        (1, "0.000000000000000001"),
        (-25 * 10**16, "-0.25"),
        (2**256 - 1, "115792089237316195423570985008687907853269984665640564039457.584007913129639935"),
    ],
)
def test_from_base_units(value, expected):
    assert from_base_units(value) == expected


def test_from_base_units_respects_decimals():
    assert from_base_units(1_234_500, decimals=6) == "1.2345"
    assert from_base_units(42, decimals=0) == "42"


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("0.25", 25 * 10**16),
        ("1", 10**18),
        (3, 3 * 10**18),
        (Decimal("0.000000000000000001"), 1),
        ("123456789012345678901234567890.5", 123456789012345678901234567890 * 10**18 + 5 * 10**17),
    ],
)
def test_to_base_units(amount, expected):
    assert to_base_units(amount) == expected


@pytest.mark.parametrize("amount", ["abc", "0.0000000000000000001", "NaN", "inf"])
def test_to_base_units_rejects_invalid_amounts(amount):
    with pytest.raises(ValueError):
        to_base_units(amount)


@pytest.mark.parametrize(
    "seconds, days",
    [(0, 0), (1, 1), (86_400, 1), (86_401, 2), (302_400, 4), (604_800, 7)],
)
def test_ceil_days(seconds, days):
    assert ceil_days(seconds) == days


def test_stake_and_gas_arithmetic():
    assert apply_stake(10**18, 5_000) == 15 * 10**17
    assert apply_stake(3, 3_333) == 3
    assert with_gas_buffer(100_000, 20) == 120_000
    assert with_gas_buffer(99_999, 20) == 119_998
