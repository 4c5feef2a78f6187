from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext

SECONDS_PER_DAY = 86_400
MULTIPLIER_DIVISOR = 10_000


def from_base_units(value: int, decimals: int = 18) -> str:
    """Render a base-unit integer as a display string without float rounding.

    ``1500000000000000000`` with 18 decimals becomes ``"1.5"``; whole values
    carry no fractional part.
    """

    amount = int(value)
    sign = "-" if amount < 0 else ""
    whole, fraction = divmod(abs(amount), 10**decimals)
    if not decimals or not fraction:
        return f"{sign}{whole}"
    digits = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{digits}"


def to_base_units(amount: str | int | Decimal, decimals: int = 18) -> int:
    """Parse a display amount (``"0.25"``) into an exact base-unit integer."""

    try:
        parsed = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {amount!r}") from exc
    if not parsed.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(parsed.as_tuple().digits) + decimals + 2)
        scaled = parsed.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{amount!r} has more than {decimals} decimal places")
    return int(scaled)


def ceil_days(seconds: int) -> int:
    """Whole days covering ``seconds``; any partial day counts as a full day."""

    return -(-int(seconds) // SECONDS_PER_DAY)


def apply_stake(appeal_cost: int, multiplier: int) -> int:
    """``appeal_cost`` plus its stake, multiplying before the truncating division."""

    return appeal_cost + (appeal_cost * multiplier) // MULTIPLIER_DIVISOR


def with_gas_buffer(gas_estimate: int, buffer_percent: int) -> int:
    return int(gas_estimate) * (100 + buffer_percent) // 100
