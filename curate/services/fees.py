"""Deposit and appeal-fee computations for a Light Generalized TCR.

Every amount is handled as a Python ``int`` in base units; display strings are
derived from those integers at the very end and never fed back into a
transaction.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from loguru import logger

from curate.domain import (
    AppealCost,
    AppealFundingStatus,
    ArbitrationCost,
    DepositBreakdown,
    DepositInfo,
    DepositKind,
    ItemInfo,
    ItemStatus,
    Party,
    RequestInfo,
    RoundInfo,
    Ruling,
    StakeMultipliers,
)
from curate.errors import ExternalReadError, InvalidArbitratorError, NotDisputedError
from curate.units import apply_stake, ceil_days, from_base_units

from .gateway import ChainGateway

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")
_ZERO_ADDRESS = "0x" + "0" * 40

_REQUEST_INFO_FIELDS = (
    "disputed",
    "disputeID",
    "submissionTime",
    "resolved",
    "parties",
    "numberOfRounds",
    "ruling",
    "requestArbitrator",
    "requestArbitratorExtraData",
    "metaEvidenceID",
)
_ROUND_INFO_FIELDS = ("appealed", "amountPaid", "hasPaid", "feeRewards")
_ITEM_FIELDS = ("status", "numberOfRequests", "sumDeposit")


def _field(raw: Any, names: Sequence[str], name: str, method: str) -> Any:
    """Read an output by name, falling back to its ABI position for tuple results."""

    if isinstance(raw, Mapping):
        if name in raw:
            return raw[name]
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        index = names.index(name)
        if index < len(raw):
            return raw[index]
    raise ExternalReadError(method, f"'{method}' result is missing '{name}'")


def _as_int(value: Any, method: str) -> int:
    if isinstance(value, bool):
        raise ExternalReadError(method, f"'{method}' returned a boolean where an integer was expected")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ExternalReadError(method, f"'{method}' returned a non-integer value: {value!r}") from exc


def _as_ruling(value: Any, method: str) -> Ruling:
    try:
        return Ruling(_as_int(value, method))
    except ValueError as exc:
        raise ExternalReadError(method, f"'{method}' returned an unknown ruling: {value!r}") from exc


def _triple(values: Any, method: str) -> tuple[Any, Any, Any]:
    if not isinstance(values, Sequence) or isinstance(values, (str, bytes)) or len(values) < 3:
        raise ExternalReadError(method, f"'{method}' returned a malformed per-party array")
    return values[0], values[1], values[2]


def validate_arbitrator(address: Any) -> str:
    if not address or not isinstance(address, str):
        raise InvalidArbitratorError("Invalid arbitrator address: empty")
    if not _ADDRESS_PATTERN.match(address) or address.lower() == _ZERO_ADDRESS:
        raise InvalidArbitratorError(f"Invalid arbitrator address: {address!r}")
    return address


def split_appeal_fees(
    appeal_cost: int, ruling: Ruling, multipliers: StakeMultipliers
) -> tuple[int, int]:
    """Return ``(requester_fee, challenger_fee)`` for the current ruling.

    With no ruling both sides post the shared stake; otherwise the side the
    ruling favours posts the winner stake and the other side the loser stake.
    """

    if ruling is Ruling.NONE:
        shared = apply_stake(appeal_cost, multipliers.shared)
        return shared, shared
    winner = apply_stake(appeal_cost, multipliers.winner)
    loser = apply_stake(appeal_cost, multipliers.loser)
    if ruling is Ruling.ACCEPT:
        return winner, loser
    return loser, winner


class FeeCalculator:
    """Reads deposit and appeal parameters from the registry and its arbitrator."""

    def __init__(self, gateway: ChainGateway, registry_address: str, *, decimals: int = 18) -> None:
        self.gateway = gateway
        self.registry_address = registry_address
        self.decimals = decimals

    def _display(self, value: int) -> str:
        return from_base_units(value, self.decimals)

    async def _read(self, method: str, *args: Any, address: str | None = None) -> Any:
        target = address or self.registry_address
        try:
            return await self.gateway.call(target, method, *args)
        except ExternalReadError:
            raise
        except Exception as exc:
            logger.error("Contract read {} on {} failed: {}", method, target, exc)
            raise ExternalReadError(method, f"Failed to read '{method}': {exc}") from exc

    async def get_challenge_period_days(self) -> int:
        seconds = _as_int(await self._read("challengePeriodDuration"), "challengePeriodDuration")
        return ceil_days(seconds)

    async def get_arbitration_cost(self) -> ArbitrationCost:
        arbitrator = validate_arbitrator(await self._read("arbitrator"))
        extra_data = await self._read("arbitratorExtraData")
        amount = _as_int(
            await self._read("arbitrationCost", extra_data, address=arbitrator),
            "arbitrationCost",
        )
        logger.debug("Arbitrator {} charges {} base units", arbitrator, amount)
        return ArbitrationCost(
            arbitrator=arbitrator,
            extra_data=extra_data,
            amount=amount,
            display=self._display(amount),
        )

    async def get_deposit_amount(self, kind: DepositKind) -> DepositInfo:
        challenge_period_days = await self.get_challenge_period_days()
        base_deposit = _as_int(await self._read(kind.getter) or 0, kind.getter)
        arbitration = await self.get_arbitration_cost()

        total = base_deposit + arbitration.amount
        breakdown = DepositBreakdown(
            base_deposit=self._display(base_deposit),
            arbitration_cost=arbitration.display,
            total=self._display(total),
            base_deposit_base_units=base_deposit,
            arbitration_cost_base_units=arbitration.amount,
            total_base_units=total,
        )
        logger.debug(
            "{} breakdown: base={} arbitration={} total={}",
            kind.description,
            breakdown.base_deposit,
            breakdown.arbitration_cost,
            breakdown.total,
        )
        return DepositInfo(
            deposit_amount=breakdown.total,
            deposit_in_base_units=total,
            breakdown=breakdown,
            challenge_period_days=challenge_period_days,
        )

    async def get_submission_deposit(self) -> DepositInfo:
        return await self.get_deposit_amount(DepositKind.SUBMISSION)

    async def get_submission_challenge_deposit(self) -> DepositInfo:
        return await self.get_deposit_amount(DepositKind.SUBMISSION_CHALLENGE)

    async def get_removal_deposit(self) -> DepositInfo:
        return await self.get_deposit_amount(DepositKind.REMOVAL)

    async def get_removal_challenge_deposit(self) -> DepositInfo:
        return await self.get_deposit_amount(DepositKind.REMOVAL_CHALLENGE)

    async def get_item_info(self, item_id: str) -> ItemInfo:
        method = "items"
        raw = await self._read(method, item_id)
        try:
            status = ItemStatus(_as_int(_field(raw, _ITEM_FIELDS, "status", method), method))
        except ValueError as exc:
            raise ExternalReadError(method, f"'{method}' returned an unknown item status") from exc
        return ItemInfo(
            status=status,
            number_of_requests=_as_int(_field(raw, _ITEM_FIELDS, "numberOfRequests", method), method),
            sum_deposit=_as_int(_field(raw, _ITEM_FIELDS, "sumDeposit", method), method),
        )

    async def get_request_info(self, item_id: str, request_id: int = 0) -> RequestInfo:
        method = "getRequestInfo"
        raw = await self._read(method, item_id, request_id)

        def get(name: str) -> Any:
            return _field(raw, _REQUEST_INFO_FIELDS, name, method)

        return RequestInfo(
            disputed=bool(get("disputed")),
            dispute_id=_as_int(get("disputeID"), method),
            submission_time=_as_int(get("submissionTime"), method),
            resolved=bool(get("resolved")),
            parties=tuple(str(party) for party in _triple(get("parties"), method)),
            number_of_rounds=_as_int(get("numberOfRounds"), method),
            ruling=_as_ruling(get("ruling"), method),
            arbitrator=get("requestArbitrator"),
            arbitrator_extra_data=get("requestArbitratorExtraData"),
            meta_evidence_id=_as_int(get("metaEvidenceID"), method),
        )

    async def get_round_info(self, item_id: str, request_id: int, round_index: int) -> RoundInfo:
        method = "getRoundInfo"
        raw = await self._read(method, item_id, request_id, round_index)

        def get(name: str) -> Any:
            return _field(raw, _ROUND_INFO_FIELDS, name, method)

        amount_paid = tuple(_as_int(value, method) for value in _triple(get("amountPaid"), method))
        has_paid = tuple(bool(value) for value in _triple(get("hasPaid"), method))
        return RoundInfo(
            appealed=bool(get("appealed")),
            amount_paid=amount_paid,  # type: ignore[arg-type]
            has_paid=has_paid,  # type: ignore[arg-type]
            fee_rewards=_as_int(get("feeRewards"), method),
        )

    async def get_meta_evidence_updates(self) -> int:
        return _as_int(await self._read("metaEvidenceUpdates"), "metaEvidenceUpdates")

    async def get_stake_multipliers(self) -> StakeMultipliers:
        return StakeMultipliers(
            shared=_as_int(await self._read("sharedStakeMultiplier"), "sharedStakeMultiplier"),
            winner=_as_int(await self._read("winnerStakeMultiplier"), "winnerStakeMultiplier"),
            loser=_as_int(await self._read("loserStakeMultiplier"), "loserStakeMultiplier"),
        )

    async def _disputed_request(self, item_id: str, request_id: int) -> RequestInfo:
        info = await self.get_request_info(item_id, request_id)
        if not info.disputed:
            logger.warning("Request {} of item {} is not disputed", request_id, item_id)
            raise NotDisputedError(item_id, request_id)
        return info

    async def _appeal_cost_for(self, info: RequestInfo) -> AppealCost:
        arbitrator = validate_arbitrator(info.arbitrator)
        appeal_cost = _as_int(
            await self._read(
                "appealCost", info.dispute_id, info.arbitrator_extra_data, address=arbitrator
            ),
            "appealCost",
        )
        multipliers = await self.get_stake_multipliers()
        requester_fee, challenger_fee = split_appeal_fees(appeal_cost, info.ruling, multipliers)
        logger.debug(
            "Appeal fees for dispute {} (ruling {}): requester={} challenger={}",
            info.dispute_id,
            info.ruling.name,
            requester_fee,
            challenger_fee,
        )
        return AppealCost(
            requester_appeal_fee=self._display(requester_fee),
            challenger_appeal_fee=self._display(challenger_fee),
            requester_appeal_fee_base_units=requester_fee,
            challenger_appeal_fee_base_units=challenger_fee,
            current_ruling=info.ruling,
        )

    async def get_appeal_cost(self, item_id: str, request_id: int = 0) -> AppealCost:
        info = await self._disputed_request(item_id, request_id)
        return await self._appeal_cost_for(info)

    async def get_appeal_funding_status(
        self, item_id: str, request_id: int = 0
    ) -> AppealFundingStatus:
        info = await self._disputed_request(item_id, request_id)
        round_index = info.number_of_rounds - 1
        round_info = await self.get_round_info(item_id, request_id, round_index)
        costs = await self._appeal_cost_for(info)

        requester_paid = round_info.amount_paid[Party.REQUESTER]
        challenger_paid = round_info.amount_paid[Party.CHALLENGER]
        requester_remaining = max(0, costs.requester_appeal_fee_base_units - requester_paid)
        challenger_remaining = max(0, costs.challenger_appeal_fee_base_units - challenger_paid)

        return AppealFundingStatus(
            requester_funded=round_info.has_paid[Party.REQUESTER],
            challenger_funded=round_info.has_paid[Party.CHALLENGER],
            requester_amount_paid=self._display(requester_paid),
            challenger_amount_paid=self._display(challenger_paid),
            requester_amount_paid_base_units=requester_paid,
            challenger_amount_paid_base_units=challenger_paid,
            requester_remaining_to_fund=self._display(requester_remaining),
            challenger_remaining_to_fund=self._display(challenger_remaining),
            requester_remaining_to_fund_base_units=requester_remaining,
            challenger_remaining_to_fund_base_units=challenger_remaining,
            appealed=round_info.appealed,
            current_ruling=info.ruling,
            round_index=round_index,
        )


__all__ = ["FeeCalculator", "split_appeal_fees", "validate_arbitrator"]
