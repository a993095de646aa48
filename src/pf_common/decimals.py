"""Decimal arithmetic utilities for broker amounts.

Quantities, prices and ledger amounts are Decimal end to end; float appears
only inside the XIRR solver.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_TWO_PLACES = Decimal("0.01")

# Column scales: trades.quantity NUMERIC(18,6); price, debit, credit, net_balance NUMERIC(18,4)
QUANTITY_PLACES = Decimal("0.000001")
AMOUNT_PLACES = Decimal("0.0001")


def parse_decimal(raw: str | None) -> Decimal | None:
    """Parse a broker amount: '1,234.50' -> Decimal('1234.50'), '' -> None.

    Raises ValueError for non-numeric input.
    """
    if raw is None:
        return None
    cleaned = str(raw).replace(",", "").strip()
    if cleaned == "":
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"not a number: {raw!r}") from None
    if not value.is_finite():
        raise ValueError(f"not a finite number: {raw!r}")
    return value


def round2(value: Decimal) -> Decimal:
    """Round half-up to 2 places for display: Decimal('1.005') -> Decimal('1.01')."""
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def safe_percent(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator * 100, or 0 when the denominator is 0."""
    if denominator == 0:
        return Decimal(0)
    return numerator / denominator * 100


def to_quantity_scale(value: Decimal) -> Decimal:
    """Round to the stored quantity scale, as PostgreSQL does on INSERT."""
    return value.quantize(QUANTITY_PLACES, rounding=ROUND_HALF_UP)


def to_amount_scale(value: Decimal) -> Decimal:
    """Round to the stored price/amount scale, as PostgreSQL does on INSERT."""
    return value.quantize(AMOUNT_PLACES, rounding=ROUND_HALF_UP)
