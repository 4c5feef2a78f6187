from __future__ import annotations

import asyncio

import pytest

from conftest import ARBITRATOR, REGISTRY, FakeGateway, dispute_reads, registry_reads
from curate.domain import DepositKind, Ruling, StakeMultipliers
from curate.errors import ExternalReadError, InvalidArbitratorError, NotDisputedError
from curate.services.fees import FeeCalculator, split_appeal_fees
from curate.units import from_base_units


def _calculator(gateway: FakeGateway) -> FeeCalculator:
    return FeeCalculator(gateway, REGISTRY)


def test_submission_deposit_adds_base_deposit_and_arbitration_cost(gateway):
    info = asyncio.run(_calculator(gateway).get_deposit_amount(DepositKind.SUBMISSION))

    assert info.deposit_in_base_units == 120_000_000_000_000_000
    assert info.deposit_amount == "0.12"
    assert info.breakdown.base_deposit == "0.1"
    assert info.breakdown.arbitration_cost == "0.02"
    assert info.breakdown.total == "0.12"
    assert info.breakdown.total_base_units == info.deposit_in_base_units
    # 3 days and one second rounds up to 4 days
    assert info.challenge_period_days == 4


@pytest.mark.parametrize(
    "kind, expected",
    [
        (DepositKind.SUBMISSION_CHALLENGE, 70_000_000_000_000_000),
        (DepositKind.REMOVAL, 90_000_000_000_000_000),
        (DepositKind.REMOVAL_CHALLENGE, 50_000_000_000_000_000),
    ],
)
def test_each_deposit_kind_reads_its_own_getter(gateway, kind, expected):
    info = asyncio.run(_calculator(gateway).get_deposit_amount(kind))

    assert info.deposit_in_base_units == expected
    assert kind.getter in gateway.methods_called()


def test_deposit_total_is_exact_beyond_64_bits():
    base = 2**200 + 7
    arbitration = 2**70 + 3
    gateway = FakeGateway(
        registry_reads(base_deposits={"submissionBaseDeposit": base}, arbitration_cost=arbitration)
    )

    info = asyncio.run(_calculator(gateway).get_submission_deposit())

    assert info.deposit_in_base_units == base + arbitration
    assert info.breakdown.total == from_base_units(base + arbitration)


def test_challenge_period_of_exact_days_is_not_rounded_up():
    gateway = FakeGateway(registry_reads(challenge_period=7 * 86_400))
    assert asyncio.run(_calculator(gateway).get_challenge_period_days()) == 7


def test_failed_getter_surfaces_as_external_read_error(gateway):
    gateway.set(ARBITRATOR, "arbitrationCost", RuntimeError("node unavailable"))

    with pytest.raises(ExternalReadError) as excinfo:
        asyncio.run(_calculator(gateway).get_removal_deposit())

    assert excinfo.value.method == "arbitrationCost"


@pytest.mark.parametrize("address", ["", None, "0x123", "0x" + "00" * 20, 12345])
def test_arbitration_cost_rejects_invalid_arbitrator(gateway, address):
    gateway.set(REGISTRY, "arbitrator", address)

    with pytest.raises(InvalidArbitratorError):
        asyncio.run(_calculator(gateway).get_arbitration_cost())

    assert "arbitrationCost" not in gateway.methods_called()


def test_arbitration_cost_passes_extra_data_to_arbitrator(gateway):
    cost = asyncio.run(_calculator(gateway).get_arbitration_cost())

    assert cost.arbitrator == ARBITRATOR
    assert cost.amount == 20_000_000_000_000_000
    assert cost.display == "0.02"
    assert (ARBITRATOR, "arbitrationCost", (cost.extra_data,)) in gateway.calls


APPEAL_COST = 10**24
MULTIPLIERS = (10_000, 5_000, 20_000)


@pytest.mark.parametrize(
    "ruling, requester_fee, challenger_fee",
    [
        (Ruling.NONE, 2 * APPEAL_COST, 2 * APPEAL_COST),
        (Ruling.ACCEPT, APPEAL_COST + APPEAL_COST // 2, 3 * APPEAL_COST),
        (Ruling.REJECT, 3 * APPEAL_COST, APPEAL_COST + APPEAL_COST // 2),
    ],
)
def test_appeal_cost_splits_fees_by_ruling(ruling, requester_fee, challenger_fee):
    # APPEAL_COST * 5000 overflows 64 bits but stays within 256 bits.
    assert APPEAL_COST * 5_000 > 2**64
    gateway = FakeGateway(
        dispute_reads(ruling=int(ruling), appeal_cost=APPEAL_COST, multipliers=MULTIPLIERS)
    )

    cost = asyncio.run(_calculator(gateway).get_appeal_cost("0xitem", 0))

    assert cost.current_ruling is ruling
    assert cost.requester_appeal_fee_base_units == requester_fee
    assert cost.challenger_appeal_fee_base_units == challenger_fee
    assert cost.requester_appeal_fee == from_base_units(requester_fee)
    assert (ARBITRATOR, "appealCost", (42, "0x01")) in gateway.calls


def test_split_appeal_fees_multiplies_before_truncating():
    multipliers = StakeMultipliers(shared=3_333, winner=1, loser=9_999)

    assert split_appeal_fees(3, Ruling.NONE, multipliers) == (3, 3)
    assert split_appeal_fees(10_001, Ruling.ACCEPT, multipliers) == (10_002, 20_000)
    assert split_appeal_fees(0, Ruling.REJECT, multipliers) == (0, 0)


def test_appeal_cost_requires_a_dispute():
    gateway = FakeGateway(dispute_reads(disputed=False))

    with pytest.raises(NotDisputedError):
        asyncio.run(_calculator(gateway).get_appeal_cost("0xitem", 0))

    assert "appealCost" not in gateway.methods_called()


def test_unknown_ruling_is_a_read_error():
    gateway = FakeGateway(dispute_reads(ruling=7))

    with pytest.raises(ExternalReadError):
        asyncio.run(_calculator(gateway).get_appeal_cost("0xitem", 0))


def test_funding_status_reads_the_latest_round():
    gateway = FakeGateway(
        dispute_reads(
            ruling=1,
            appeal_cost=10**18,
            multipliers=MULTIPLIERS,
            number_of_rounds=3,
            amount_paid=(0, 4 * 10**17, 10**18),
            has_paid=(False, False, False),
        )
    )

    status = asyncio.run(_calculator(gateway).get_appeal_funding_status("0xitem", 1))

    assert status.round_index == 2
    assert (REGISTRY, "getRoundInfo", ("0xitem", 1, 2)) in gateway.calls
    assert status.requester_amount_paid_base_units == 4 * 10**17
    assert status.requester_remaining_to_fund_base_units == 15 * 10**17 - 4 * 10**17
    assert status.requester_remaining_to_fund == "1.1"
    assert status.challenger_remaining_to_fund_base_units == 3 * 10**18 - 10**18
    assert status.current_ruling is Ruling.ACCEPT


def test_funding_status_never_reports_negative_remaining():
    gateway = FakeGateway(
        dispute_reads(
            appeal_cost=10**18,
            multipliers=MULTIPLIERS,
            amount_paid=(0, 5 * 10**18, 0),
        )
    )

    status = asyncio.run(_calculator(gateway).get_appeal_funding_status("0xitem", 0))

    assert status.requester_amount_paid_base_units > 2 * 10**18
    assert status.requester_remaining_to_fund_base_units == 0
    assert status.requester_remaining_to_fund == "0"
    assert status.challenger_remaining_to_fund_base_units == 2 * 10**18


def test_funding_status_requires_a_dispute():
    gateway = FakeGateway(dispute_reads(disputed=False))

    with pytest.raises(NotDisputedError):
        asyncio.run(_calculator(gateway).get_appeal_funding_status("0xitem", 0))


def test_request_info_accepts_positional_results():
    raw = (
        True,
        9,
        1_700_000_000,
        False,
        ("0x0", "0x1", "0x2"),
        1,
        2,
        ARBITRATOR,
        b"\x01",
        0,
    )
    gateway = FakeGateway({(REGISTRY, "getRequestInfo"): raw})

    info = asyncio.run(_calculator(gateway).get_request_info("0xitem", 0))

    assert info.dispute_id == 9
    assert info.ruling is Ruling.REJECT
    assert info.arbitrator_extra_data == b"\x01"
