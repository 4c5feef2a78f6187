from __future__ import annotations

from typing import Any

from loguru import logger

from curate.domain import (
    Evidence,
    EvidenceGroup,
    Item,
    ItemProperty,
    ItemRequest,
    ItemStatus,
    Round,
    Ruling,
)

_ZERO_ADDRESS = "0x" + "0" * 40


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _parse_int(value: Any) -> int:
    """Subgraph BigInts arrive as decimal strings; missing values count as zero."""

    if value is None or value == "":
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _parse_address(value: Any) -> str | None:
    if not value or not isinstance(value, str) or value.lower() == _ZERO_ADDRESS:
        return None
    return value


def _parse_status(value: Any) -> ItemStatus:
    if isinstance(value, str):
        try:
            return ItemStatus.from_label(value)
        except KeyError:
            pass
    try:
        return ItemStatus(int(value))
    except (TypeError, ValueError):
        logger.warning("Unknown item status {!r}; treating as Absent", value)
        return ItemStatus.ABSENT


def _parse_ruling(value: Any) -> Ruling:
    if isinstance(value, str):
        try:
            return Ruling.from_label(value)
        except KeyError:
            pass
    try:
        return Ruling(int(value))
    except (TypeError, ValueError):
        return Ruling.NONE


def normalize_round(raw_round: dict[str, Any]) -> Round:
    return Round(
        amount_paid_requester=_parse_int(raw_round.get("amountPaidRequester")),
        amount_paid_challenger=_parse_int(raw_round.get("amountPaidChallenger")),
        has_paid_requester=bool(raw_round.get("hasPaidRequester")),
        has_paid_challenger=bool(raw_round.get("hasPaidChallenger")),
        appeal_period_start=_parse_int(raw_round.get("appealPeriodStart")),
        appeal_period_end=_parse_int(raw_round.get("appealPeriodEnd")),
        ruling=_parse_ruling(raw_round.get("ruling")),
        appealed=bool(raw_round.get("appealed")),
    )


def _normalize_evidence_group(raw_group: Any) -> EvidenceGroup | None:
    if not isinstance(raw_group, dict):
        return None
    evidences = [
        Evidence(
            evidence_id=str(raw.get("id") or ""),
            uri=raw.get("URI") or "",
            party=raw.get("party") or "",
            timestamp=_parse_int(raw.get("timestamp")),
        )
        for raw in _as_list(raw_group.get("evidences"))
        if isinstance(raw, dict)
    ]
    return EvidenceGroup(group_id=str(raw_group.get("id") or ""), evidences=evidences)


def normalize_request(raw_request: dict[str, Any]) -> ItemRequest:
    return ItemRequest(
        requester=raw_request.get("requester") or "",
        challenger=_parse_address(raw_request.get("challenger")),
        deposit=_parse_int(raw_request.get("deposit")),
        dispute_id=_parse_int(raw_request.get("disputeID")),
        disputed=bool(raw_request.get("disputed")),
        resolved=bool(raw_request.get("resolved")),
        submission_time=_parse_int(raw_request.get("submissionTime")),
        resolution_time=_parse_int(raw_request.get("resolutionTime")),
        request_type=raw_request.get("requestType"),
        rounds=[
            normalize_round(raw_round)
            for raw_round in _as_list(raw_request.get("rounds"))
            if isinstance(raw_round, dict)
        ],
        evidence_group=_normalize_evidence_group(raw_request.get("evidenceGroup")),
    )


def normalize_item(raw_item: dict[str, Any]) -> Item:
    metadata = raw_item.get("metadata") if isinstance(raw_item.get("metadata"), dict) else {}
    props = [
        ItemProperty(
            label=raw_prop.get("label") or "",
            type=raw_prop.get("type") or "",
            value=raw_prop.get("value") or "",
            description=raw_prop.get("description") or "",
            is_identifier=bool(raw_prop.get("isIdentifier")),
        )
        for raw_prop in _as_list(metadata.get("props"))
        if isinstance(raw_prop, dict)
    ]
    return Item(
        item_id=str(raw_item.get("itemID") or ""),
        data=raw_item.get("data") or "",
        status=_parse_status(raw_item.get("status")),
        disputed=bool(raw_item.get("disputed")),
        latest_request_submission_time=_parse_int(raw_item.get("latestRequestSubmissionTime")),
        props=props,
        requests=[
            normalize_request(raw_request)
            for raw_request in _as_list(raw_item.get("requests"))
            if isinstance(raw_request, dict)
        ],
        raw_data=raw_item,
    )
