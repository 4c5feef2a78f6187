from __future__ import annotations

from typing import Any, Mapping

from loguru import logger

from curate.core.chains import ChainConfig, get_chain
from curate.core.config import Settings, get_settings
from curate.domain import (
    AppealCost,
    AppealFundingStatus,
    ArbitrationCost,
    DepositInfo,
    DepositKind,
    ItemInfo,
    ItemStatus,
    MetaEvidence,
    Party,
)
from curate.errors import (
    AlreadyFundedError,
    CurateError,
    ExternalReadError,
    ExternalWriteError,
    InvalidItemStateError,
    UserRejectedError,
)
from curate.units import with_gas_buffer

from .fees import FeeCalculator
from .gateway import ChainGateway

USER_REJECTED_CODE = 4001
_REJECTION_MARKERS = ("user denied", "user rejected", "rejected by user")


def format_ipfs_path(path: str) -> str:
    """Return ``path`` with a single leading ``/ipfs/`` marker; blank stays blank."""

    if not path:
        return ""
    if path.startswith("/ipfs/"):
        return path
    if path.startswith("ipfs://"):
        path = path[len("ipfs://") :]
    return f"/ipfs/{path.lstrip('/')}"


def format_address(address: str | None) -> str:
    if not address:
        return "Not connected"
    return f"{address[:6]}...{address[-4:]}"


def is_user_rejection(exc: BaseException) -> bool:
    if getattr(exc, "code", None) == USER_REJECTED_CODE:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _REJECTION_MARKERS)


def _require_side(side: Party | int) -> Party:
    party = Party(side)
    if party is Party.NONE:
        raise ValueError("side must be Party.REQUESTER (1) or Party.CHALLENGER (2)")
    return party


class LightCurateRegistry:
    """Money-moving and read actions against one Light Generalized TCR deployment."""

    def __init__(
        self,
        contract_address: str,
        chain_id: int,
        gateway: ChainGateway,
        *,
        settings: Settings | None = None,
    ) -> None:
        self.chain: ChainConfig = get_chain(chain_id)
        self.contract_address = contract_address
        self.gateway = gateway
        self.settings = settings or get_settings()
        self.fees = FeeCalculator(gateway, contract_address, decimals=self.chain.decimals)

    @property
    def chain_id(self) -> int:
        return self.chain.chain_id

    async def get_challenge_period_days(self) -> int:
        return await self.fees.get_challenge_period_days()

    async def get_arbitration_cost(self) -> ArbitrationCost:
        return await self.fees.get_arbitration_cost()

    async def get_deposit_amount(self, kind: DepositKind) -> DepositInfo:
        return await self.fees.get_deposit_amount(kind)

    async def get_item_info(self, item_id: str) -> ItemInfo:
        return await self.fees.get_item_info(item_id)

    async def get_appeal_cost(self, item_id: str, request_id: int = 0) -> AppealCost:
        return await self.fees.get_appeal_cost(item_id, request_id)

    async def get_appeal_funding_status(
        self, item_id: str, request_id: int = 0
    ) -> AppealFundingStatus:
        return await self.fees.get_appeal_funding_status(item_id, request_id)

    async def _submit(self, method: str, *args: Any, value: int = 0) -> str:
        try:
            estimate = await self.gateway.estimate_gas(
                self.contract_address, method, *args, value=value
            )
            gas = with_gas_buffer(estimate, self.settings.gas_buffer_percent)
            tx_hash = await self.gateway.send_transaction(
                self.contract_address, method, *args, value=value, gas=gas
            )
        except CurateError:
            raise
        except Exception as exc:
            if is_user_rejection(exc):
                logger.warning("{} transaction rejected by user", method)
                raise UserRejectedError(method) from exc
            logger.error("{} transaction failed: {}", method, exc)
            raise ExternalWriteError(method, f"Failed to submit '{method}': {exc}") from exc
        logger.info("Submitted {} with value {} (gas {}): {}", method, value, gas, tx_hash)
        return tx_hash

    async def submit_item(self, ipfs_path: str) -> str:
        deposit = await self.fees.get_deposit_amount(DepositKind.SUBMISSION)
        return await self._submit(
            "addItem", format_ipfs_path(ipfs_path), value=deposit.deposit_in_base_units
        )

    async def remove_item(self, item_id: str, evidence: str = "") -> str:
        deposit = await self.fees.get_deposit_amount(DepositKind.REMOVAL)
        return await self._submit(
            "removeItem",
            item_id,
            format_ipfs_path(evidence),
            value=deposit.deposit_in_base_units,
        )

    async def challenge_request(self, item_id: str, evidence: str = "") -> str:
        info = await self.fees.get_item_info(item_id)
        if info.status is ItemStatus.REGISTRATION_REQUESTED:
            kind = DepositKind.SUBMISSION_CHALLENGE
        elif info.status is ItemStatus.CLEARING_REQUESTED:
            kind = DepositKind.REMOVAL_CHALLENGE
        else:
            raise InvalidItemStateError(
                f"Item {item_id} is {info.status.label} and cannot be challenged"
            )
        deposit = await self.fees.get_deposit_amount(kind)
        return await self._submit(
            "challengeRequest",
            item_id,
            format_ipfs_path(evidence),
            value=deposit.deposit_in_base_units,
        )

    async def submit_evidence(self, item_id: str, evidence_uri: str) -> str:
        return await self._submit("submitEvidence", item_id, format_ipfs_path(evidence_uri))

    async def contribute(
        self, item_id: str, request_id: int, side: Party | int, amount: int
    ) -> str:
        party = _require_side(side)
        if amount <= 0:
            raise ValueError("Contribution amount must be positive")
        return await self._submit("contribute", item_id, request_id, int(party), value=amount)

    async def fund_appeal(
        self,
        item_id: str,
        request_id: int,
        side: Party | int,
        amount: int | None = None,
    ) -> str:
        """Fund one side of an appeal, never sending more than that side still owes.

        ``amount`` is in base units; when omitted the full remaining requirement
        is sent. Partial amounts are allowed so appeals can be crowdfunded.
        """

        party = _require_side(side)
        if amount is not None and amount <= 0:
            raise ValueError("Appeal funding amount must be positive")

        status = await self.fees.get_appeal_funding_status(item_id, request_id)
        remaining = status.remaining_for(party)
        if status.is_funded(party) or remaining == 0:
            raise AlreadyFundedError(
                f"Appeal for the {party.name.lower()} side is already fully funded"
            )

        to_send = remaining if amount is None else min(amount, remaining)
        if amount is not None and amount > remaining:
            logger.info(
                "Clamping {} appeal contribution from {} to remaining {}",
                party.name.lower(),
                amount,
                remaining,
            )
        return await self._submit("fundAppeal", item_id, request_id, int(party), value=to_send)

    async def get_latest_meta_evidence(self) -> MetaEvidence:
        updates = await self.fees.get_meta_evidence_updates()
        registration_id = 2 * (updates - 1)
        clearing_id = registration_id + 1

        try:
            events = await self.gateway.get_past_events(
                self.contract_address, "MetaEvidence", from_block=0
            )
        except Exception as exc:
            raise ExternalReadError("MetaEvidence", f"Failed to read MetaEvidence events: {exc}") from exc

        by_id: dict[int, str] = {}
        for event in events:
            values: Mapping[str, Any] = event.get("returnValues", {})
            try:
                evidence_id = int(values["_metaEvidenceID"])
            except (KeyError, TypeError, ValueError):
                continue
            by_id.setdefault(evidence_id, values.get("_evidence", ""))
        logger.debug("Found {} MetaEvidence events", len(events))

        if registration_id in by_id and clearing_id in by_id:
            return MetaEvidence(registration=by_id[registration_id], clearing=by_id[clearing_id])
        if 0 in by_id and 1 in by_id:
            logger.warning(
                "MetaEvidence {} / {} not found; falling back to the initial pair",
                registration_id,
                clearing_id,
            )
            return MetaEvidence(registration=by_id[0], clearing=by_id[1])
        raise ExternalReadError("MetaEvidence", "Could not find latest MetaEvidence events")


__all__ = [
    "LightCurateRegistry",
    "USER_REJECTED_CODE",
    "format_address",
    "format_ipfs_path",
    "is_user_rejection",
]
