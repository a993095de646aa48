"""Broker CSV reading and per-row parsing.

`read_csv` rejects the whole file (InvalidCsvError). The `parse_*_row`
functions reject one row (RowValidationError) and the pipeline moves on.
Amounts are rounded to their column scale here so a re-imported row compares
equal to the one already stored.
"""

import io
from datetime import date, datetime
from decimal import Decimal

import pandas as pd

from src.pf_common.decimals import parse_decimal, to_amount_scale, to_quantity_scale
from src.pf_common.enums import TradeType
from src.pf_common.errors import InvalidCsvError, RowValidationError
from src.pf_import.domain.models import LedgerSnapshot, TradeSnapshot

TRADEBOOK_COLUMNS: tuple[str, ...] = (
    "symbol", "isin", "trade_date", "exchange", "segment", "series",
    "trade_type", "auction", "quantity", "price", "trade_id", "order_id",
    "order_execution_time",
)
TRADEBOOK_REQUIRED: tuple[str, ...] = ("symbol", "trade_date", "trade_type", "quantity", "price")

LEDGER_COLUMNS: tuple[str, ...] = (
    "particular", "posting_date", "cost_center", "voucher_type",
    "debit", "credit", "net_balance",
)
LEDGER_REQUIRED: tuple[str, ...] = ("posting_date", "debit", "credit")

# Broker exports seen in the wild; ISO first, then day-first, then US style
_DATE_FORMATS: tuple[str, ...] = ("%Y-%m-%d", "%d-%m-%Y", "%m/%d/%Y", "%d/%m/%Y")

_TRUE_TOKENS = frozenset({"yes", "true", "1", "y"})


def read_csv(
    content: bytes, columns: tuple[str, ...], required_columns: tuple[str, ...]
) -> list[dict[str, str]]:
    """Parse an uploaded CSV into trimmed string rows keyed by lower-case header.

    Optional columns absent from the header are filled with empty strings.
    """
    if not content or not content.strip():
        raise InvalidCsvError("file is empty")
    try:
        frame = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise InvalidCsvError(str(exc).strip() or "unparseable content") from None

    frame.columns = [str(c).strip().lower() for c in frame.columns]
    missing = [c for c in required_columns if c not in frame.columns]
    if missing:
        raise InvalidCsvError(f"missing columns: {', '.join(missing)}")
    for column in columns:
        if column not in frame.columns:
            frame[column] = ""

    rows = [
        {key: str(value).strip() for key, value in record.items()}
        for record in frame.to_dict(orient="records")
    ]
    rows = [r for r in rows if any(r.values())]
    if not rows:
        raise InvalidCsvError("no records found")
    return rows


def parse_date(raw: str) -> date:
    if not raw:
        raise ValueError("date is required")
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    parsed = pd.to_datetime(raw, errors="coerce")
    if pd.isna(parsed):
        raise ValueError(f"unrecognised date: {raw!r}")
    return parsed.date()


def _parse_timestamp(raw: str) -> datetime | None:
    if not raw:
        return None
    parsed = pd.to_datetime(raw, errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def _blank_to_none(raw: str | None) -> str | None:
    return raw if raw else None


def parse_trade_row(raw: dict[str, str]) -> TradeSnapshot:
    trade_ref = raw.get("trade_id") or "(no trade_id)"

    symbol = raw.get("symbol", "").upper()
    if not symbol:
        raise RowValidationError(f"Missing symbol for trade {trade_ref}")

    try:
        quantity = parse_decimal(raw.get("quantity"))
        price = parse_decimal(raw.get("price"))
    except ValueError:
        raise RowValidationError(f"Invalid quantity or price for trade {trade_ref}") from None
    if quantity is None or price is None:
        raise RowValidationError(f"Invalid quantity or price for trade {trade_ref}")
    if quantity <= 0 or price <= 0:
        raise RowValidationError(
            f"Quantity and price must be positive for trade {trade_ref}"
        )
    quantity, price = to_quantity_scale(quantity), to_amount_scale(price)
    if quantity <= 0 or price <= 0:
        raise RowValidationError(f"Quantity or price rounds to zero for trade {trade_ref}")

    try:
        trade_type = TradeType(raw.get("trade_type", "").lower())
    except ValueError:
        raise RowValidationError(
            f"Invalid trade type for trade {trade_ref}: {raw.get('trade_type', '')}"
        ) from None

    try:
        trade_date = parse_date(raw.get("trade_date", ""))
    except ValueError as exc:
        raise RowValidationError(f"Invalid trade date for trade {trade_ref}: {exc}") from None

    return TradeSnapshot(
        symbol=symbol,
        trade_date=trade_date,
        trade_type=trade_type,
        quantity=quantity,
        price=price,
        isin=_blank_to_none(raw.get("isin")),
        exchange=_blank_to_none(raw.get("exchange")),
        segment=_blank_to_none(raw.get("segment")),
        series=_blank_to_none(raw.get("series")),
        auction=raw.get("auction", "").lower() in _TRUE_TOKENS,
        trade_id=_blank_to_none(raw.get("trade_id")),
        order_id=_blank_to_none(raw.get("order_id")),
        order_execution_time=_parse_timestamp(raw.get("order_execution_time", "")),
    )


def parse_ledger_row(raw: dict[str, str]) -> LedgerSnapshot:
    posting_raw = raw.get("posting_date", "")
    try:
        posting_date = parse_date(posting_raw)
    except ValueError as exc:
        raise RowValidationError(f"Invalid posting date {posting_raw!r}: {exc}") from None

    try:
        debit = parse_decimal(raw.get("debit")) or Decimal(0)
        credit = parse_decimal(raw.get("credit")) or Decimal(0)
        net_balance = parse_decimal(raw.get("net_balance"))
    except ValueError:
        raise RowValidationError(
            f"Invalid debit, credit or net balance for entry on {posting_raw}"
        ) from None
    if debit < 0 or credit < 0:
        raise RowValidationError(
            f"Debit and credit must not be negative for entry on {posting_raw}"
        )
    debit, credit = to_amount_scale(debit), to_amount_scale(credit)
    if net_balance is not None:
        net_balance = to_amount_scale(net_balance)

    return LedgerSnapshot(
        posting_date=posting_date,
        debit=debit,
        credit=credit,
        particular=_blank_to_none(raw.get("particular")),
        cost_center=_blank_to_none(raw.get("cost_center")),
        voucher_type=_blank_to_none(raw.get("voucher_type")),
        net_balance=net_balance,
    )
