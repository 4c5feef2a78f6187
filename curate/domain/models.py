"""Typed domain representations shared by the fee engine, action layer, and item pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class ItemStatus(IntEnum):
    ABSENT = 0
    REGISTERED = 1
    REGISTRATION_REQUESTED = 2
    CLEARING_REQUESTED = 3

    @classmethod
    def from_label(cls, label: str) -> "ItemStatus":
        """Map the subgraph's ``Registered`` style labels onto the enum."""

        return _STATUS_LABELS[label]

    @property
    def label(self) -> str:
        return _STATUS_NAMES[self]


_STATUS_LABELS = {
    "Absent": ItemStatus.ABSENT,
    "Registered": ItemStatus.REGISTERED,
    "RegistrationRequested": ItemStatus.REGISTRATION_REQUESTED,
    "ClearingRequested": ItemStatus.CLEARING_REQUESTED,
}
_STATUS_NAMES = {value: key for key, value in _STATUS_LABELS.items()}


class Ruling(IntEnum):
    NONE = 0
    ACCEPT = 1
    REJECT = 2

    @classmethod
    def from_label(cls, label: str) -> "Ruling":
        return {"None": cls.NONE, "Accept": cls.ACCEPT, "Reject": cls.REJECT}[label]


class Party(IntEnum):
    NONE = 0
    REQUESTER = 1
    CHALLENGER = 2


class DepositKind(str, Enum):
    SUBMISSION = "submissionBaseDeposit"
    SUBMISSION_CHALLENGE = "submissionChallengeBaseDeposit"
    REMOVAL = "removalBaseDeposit"
    REMOVAL_CHALLENGE = "removalChallengeBaseDeposit"

    @property
    def getter(self) -> str:
        return self.value

    @property
    def description(self) -> str:
        return _DEPOSIT_DESCRIPTIONS[self]


_DEPOSIT_DESCRIPTIONS = {
    DepositKind.SUBMISSION: "submission deposit",
    DepositKind.SUBMISSION_CHALLENGE: "submission challenge deposit",
    DepositKind.REMOVAL: "removal deposit",
    DepositKind.REMOVAL_CHALLENGE: "removal challenge deposit",
}


@dataclass(slots=True)
class ItemProperty:
    label: str
    type: str
    value: str
    description: str = ""
    is_identifier: bool = False


@dataclass(slots=True)
class Evidence:
    evidence_id: str
    uri: str
    party: str
    timestamp: int


@dataclass(slots=True)
class EvidenceGroup:
    group_id: str
    evidences: list[Evidence] = field(default_factory=list)


@dataclass(slots=True)
class Round:
    """One arbitration round of a disputed request, as indexed by the subgraph."""

    amount_paid_requester: int
    amount_paid_challenger: int
    has_paid_requester: bool
    has_paid_challenger: bool
    appeal_period_start: int
    appeal_period_end: int
    ruling: Ruling
    appealed: bool = False


@dataclass(slots=True)
class ItemRequest:
    """A registration or removal attempt on an item."""

    requester: str
    challenger: str | None
    deposit: int
    dispute_id: int
    disputed: bool
    resolved: bool
    submission_time: int
    resolution_time: int
    request_type: str | None = None
    rounds: list[Round] = field(default_factory=list)
    evidence_group: EvidenceGroup | None = None


@dataclass(slots=True)
class Item:
    """Registry entry returned by the item retrieval pipeline."""

    item_id: str
    data: str
    status: ItemStatus
    disputed: bool
    latest_request_submission_time: int
    props: list[ItemProperty] = field(default_factory=list)
    requests: list[ItemRequest] = field(default_factory=list)
    raw_data: dict[str, Any] | None = None

    @property
    def latest_request(self) -> ItemRequest | None:
        if not self.requests:
            return None
        return max(self.requests, key=lambda request: request.submission_time)

    @property
    def identifier_props(self) -> list[ItemProperty]:
        return [prop for prop in self.props if prop.is_identifier]


@dataclass(slots=True)
class DepositBreakdown:
    base_deposit: str
    arbitration_cost: str
    total: str
    base_deposit_base_units: int
    arbitration_cost_base_units: int
    total_base_units: int


@dataclass(slots=True)
class DepositInfo:
    """Deposit required for an action; the base-unit total is the value of record."""

    deposit_amount: str
    deposit_in_base_units: int
    breakdown: DepositBreakdown
    challenge_period_days: int


@dataclass(slots=True)
class ArbitrationCost:
    arbitrator: str
    extra_data: Any
    amount: int
    display: str


@dataclass(slots=True)
class StakeMultipliers:
    """Parts-per-ten-thousand factors applied to the arbitrator's appeal cost."""

    shared: int
    winner: int
    loser: int


@dataclass(slots=True)
class AppealCost:
    requester_appeal_fee: str
    challenger_appeal_fee: str
    requester_appeal_fee_base_units: int
    challenger_appeal_fee_base_units: int
    current_ruling: Ruling

    def fee_for(self, side: Party) -> int:
        if side is Party.REQUESTER:
            return self.requester_appeal_fee_base_units
        if side is Party.CHALLENGER:
            return self.challenger_appeal_fee_base_units
        raise ValueError(f"Appeal fees are only owed by the requester or challenger, not {side!r}")


@dataclass(slots=True)
class AppealFundingStatus:
    requester_funded: bool
    challenger_funded: bool
    requester_amount_paid: str
    challenger_amount_paid: str
    requester_amount_paid_base_units: int
    challenger_amount_paid_base_units: int
    requester_remaining_to_fund: str
    challenger_remaining_to_fund: str
    requester_remaining_to_fund_base_units: int
    challenger_remaining_to_fund_base_units: int
    appealed: bool
    current_ruling: Ruling
    round_index: int

    def remaining_for(self, side: Party) -> int:
        if side is Party.REQUESTER:
            return self.requester_remaining_to_fund_base_units
        if side is Party.CHALLENGER:
            return self.challenger_remaining_to_fund_base_units
        raise ValueError(f"Appeals are only funded for the requester or challenger, not {side!r}")

    def is_funded(self, side: Party) -> bool:
        if side is Party.REQUESTER:
            return self.requester_funded
        if side is Party.CHALLENGER:
            return self.challenger_funded
        raise ValueError(f"Appeals are only funded for the requester or challenger, not {side!r}")


@dataclass(slots=True)
class ItemInfo:
    """On-chain ``items(itemID)`` record."""

    status: ItemStatus
    number_of_requests: int
    sum_deposit: int


@dataclass(slots=True)
class RequestInfo:
    """On-chain ``getRequestInfo(itemID, requestID)`` record."""

    disputed: bool
    dispute_id: int
    submission_time: int
    resolved: bool
    parties: tuple[str, ...]
    number_of_rounds: int
    ruling: Ruling
    arbitrator: str
    arbitrator_extra_data: Any
    meta_evidence_id: int


@dataclass(slots=True)
class RoundInfo:
    """On-chain ``getRoundInfo(itemID, requestID, round)`` record, indexed by party."""

    appealed: bool
    amount_paid: tuple[int, int, int]
    has_paid: tuple[bool, bool, bool]
    fee_rewards: int


@dataclass(slots=True)
class MetaEvidence:
    registration: str
    clearing: str
