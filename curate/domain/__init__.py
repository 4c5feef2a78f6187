"""Domain models for registry items and computed deposit/appeal values."""

from .models import (
    AppealCost,
    AppealFundingStatus,
    ArbitrationCost,
    DepositBreakdown,
    DepositInfo,
    DepositKind,
    Evidence,
    EvidenceGroup,
    Item,
    ItemInfo,
    ItemProperty,
    ItemRequest,
    ItemStatus,
    MetaEvidence,
    Party,
    RequestInfo,
    Round,
    RoundInfo,
    Ruling,
    StakeMultipliers,
)

__all__ = [
    "AppealCost",
    "AppealFundingStatus",
    "ArbitrationCost",
    "DepositBreakdown",
    "DepositInfo",
    "DepositKind",
    "Evidence",
    "EvidenceGroup",
    "Item",
    "ItemInfo",
    "ItemProperty",
    "ItemRequest",
    "ItemStatus",
    "MetaEvidence",
    "Party",
    "RequestInfo",
    "Round",
    "RoundInfo",
    "Ruling",
    "StakeMultipliers",
]
