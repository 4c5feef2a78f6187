from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx
import pytest

from curate.core.config import Settings

REGISTRY = "0x" + "ab" * 20
ARBITRATOR = "0x" + "cd" * 20
SUBGRAPH_URL = "https://subgraph.test/light-curate"


class FakeGateway:
    """In-memory chain gateway keyed by ``(address, method)``.

    Values may be plain results, callables receiving the call arguments, or
    exceptions to raise.
    """

    def __init__(self, reads: dict[tuple[str, str], Any] | None = None) -> None:
        self.reads: dict[tuple[str, str], Any] = {
            (address.lower(), method): value for (address, method), value in (reads or {}).items()
        }
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.estimates: list[tuple[str, tuple[Any, ...], int]] = []
        self.sent: list[dict[str, Any]] = []
        self.events: list[dict[str, Any]] = []
        self.gas_estimate = 100_000
        self.send_error: Exception | None = None

    def set(self, address: str, method: str, value: Any) -> None:
        self.reads[(address.lower(), method)] = value

    async def call(self, address: str, method: str, *args: Any) -> Any:
        self.calls.append((address, method, args))
        try:
            value = self.reads[(address.lower(), method)]
        except KeyError:
            raise RuntimeError(f"execution reverted: {method}") from None
        if isinstance(value, Exception):
            raise value
        return value(*args) if callable(value) else value

    async def estimate_gas(self, address: str, method: str, *args: Any, value: int = 0) -> int:
        self.estimates.append((method, args, value))
        if self.send_error is not None:
            raise self.send_error
        return self.gas_estimate

    async def send_transaction(
        self, address: str, method: str, *args: Any, value: int = 0, gas: int | None = None
    ) -> str:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append({"method": method, "args": args, "value": value, "gas": gas})
        return f"0xtx{len(self.sent)}"

    async def get_past_events(self, address: str, event: str, *, from_block: int = 0):
        return [entry for entry in self.events if entry.get("event", event) == event]

    def methods_called(self) -> list[str]:
        return [method for _, method, _ in self.calls]


def registry_reads(
    *,
    base_deposits: dict[str, int] | None = None,
    arbitration_cost: int = 20_000_000_000_000_000,
    challenge_period: int = 3 * 86_400 + 1,
) -> dict[tuple[str, str], Any]:
    deposits = {
        "submissionBaseDeposit": 100_000_000_000_000_000,
        "submissionChallengeBaseDeposit": 50_000_000_000_000_000,
        "removalBaseDeposit": 70_000_000_000_000_000,
        "removalChallengeBaseDeposit": 30_000_000_000_000_000,
    }
    deposits.update(base_deposits or {})
    reads: dict[tuple[str, str], Any] = {
        (REGISTRY, method): amount for method, amount in deposits.items()
    }
    reads.update(
        {
            (REGISTRY, "challengePeriodDuration"): challenge_period,
            (REGISTRY, "arbitrator"): ARBITRATOR,
            (REGISTRY, "arbitratorExtraData"): "0x" + "00" * 63 + "03",
            (ARBITRATOR, "arbitrationCost"): arbitration_cost,
        }
    )
    return reads


def dispute_reads(
    *,
    ruling: int = 0,
    appeal_cost: int = 10**18,
    multipliers: tuple[int, int, int] = (10_000, 10_000, 20_000),
    disputed: bool = True,
    number_of_rounds: int = 2,
    amount_paid: tuple[int, int, int] = (0, 0, 0),
    has_paid: tuple[bool, bool, bool] = (False, False, False),
) -> dict[tuple[str, str], Any]:
    shared, winner, loser = multipliers
    return {
        (REGISTRY, "getRequestInfo"): {
            "disputed": disputed,
            "disputeID": 42,
            "submissionTime": 1_700_000_000,
            "resolved": False,
            "parties": ["0x" + "00" * 20, "0x" + "11" * 20, "0x" + "22" * 20],
            "numberOfRounds": number_of_rounds,
            "ruling": ruling,
            "requestArbitrator": ARBITRATOR,
            "requestArbitratorExtraData": "0x01",
            "metaEvidenceID": 0,
        },
        (REGISTRY, "getRoundInfo"): {
            "appealed": False,
            "amountPaid": list(amount_paid),
            "hasPaid": list(has_paid),
            "feeRewards": sum(amount_paid),
        },
        (ARBITRATOR, "appealCost"): appeal_cost,
        (REGISTRY, "sharedStakeMultiplier"): shared,
        (REGISTRY, "winnerStakeMultiplier"): winner,
        (REGISTRY, "loserStakeMultiplier"): loser,
    }


def make_raw_item(
    item_id: str,
    timestamp: int,
    *,
    status: str = "Registered",
    disputed: bool = False,
) -> dict[str, Any]:
    return {
        "itemID": item_id,
        "data": f"/ipfs/Qm{item_id}/item.json",
        "status": status,
        "disputed": disputed,
        "latestRequestSubmissionTime": str(timestamp),
        "metadata": {
            "props": [
                {
                    "description": "Token address",
                    "isIdentifier": True,
                    "label": "Address",
                    "type": "address",
                    "value": "0x" + "12" * 20,
                }
            ]
        },
        "requests": [
            {
                "challenger": "0x" + "00" * 20,
                "deposit": "120000000000000000",
                "disputeID": "0",
                "disputed": disputed,
                "requester": "0x" + "11" * 20,
                "resolutionTime": "0",
                "resolved": not disputed,
                "requestType": "RegistrationRequested",
                "rounds": [
                    {
                        "appealed": False,
                        "amountPaidChallenger": "0",
                        "amountPaidRequester": "0",
                        "appealPeriodEnd": "0",
                        "appealPeriodStart": "0",
                        "hasPaidChallenger": False,
                        "hasPaidRequester": False,
                        "ruling": "None",
                    }
                ],
                "submissionTime": str(timestamp),
                "evidenceGroup": {"id": f"{item_id}-0", "evidences": []},
            }
        ],
    }


class SubgraphStub:
    """Serves queued ``litems`` pages and records every GraphQL query received."""

    def __init__(self, pages: list[Any]) -> None:
        self.pages = list(pages)
        self.queries: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.queries.append(json.loads(request.content)["query"])
        page = self.pages.pop(0) if self.pages else []
        if isinstance(page, httpx.Response):
            return page
        if isinstance(page, dict):
            return httpx.Response(200, json=page)
        return httpx.Response(200, json={"data": {"litems": page}})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(registry_reads())


@pytest.fixture
def test_settings(monkeypatch) -> Settings:
    settings = Settings(
        graph_api_key=None,
        subgraph_urls={1: SUBGRAPH_URL, 100: SUBGRAPH_URL + "-gnosis"},
        items_batch_size=2,
        gas_buffer_percent=20,
    )
    monkeypatch.setattr("curate.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("curate.core.config.settings", settings)
    return settings


@pytest.fixture
def subgraph() -> Callable[[list[Any]], SubgraphStub]:
    return SubgraphStub
