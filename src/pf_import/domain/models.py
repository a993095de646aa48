"""Domain models for pf_import — pure dataclasses, no SQLAlchemy dependency.

A snapshot is the full set of broker-supplied columns of one row, either parsed
from an incoming CSV line or captured from a stored row. `Snapshot` is the
tagged union stored in import_conflicts.existing_data / new_data.
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from src.pf_common.enums import ImportType, TradeType

# Columns whose disagreement turns a re-imported trade_id into a conflict
TRADE_COMPARED_FIELDS: tuple[str, ...] = ("quantity", "price", "symbol")


def _encode(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def _decimal_or_none(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))


@dataclass(frozen=True)
class TradeSnapshot:
    kind: ClassVar[str] = "trade"

    symbol: str
    trade_date: date
    trade_type: TradeType
    quantity: Decimal
    price: Decimal
    isin: str | None = None
    exchange: str | None = None
    segment: str | None = None
    series: str | None = None
    auction: bool = False
    trade_id: str | None = None
    order_id: str | None = None
    order_execution_time: datetime | None = None

    @property
    def value(self) -> Decimal:
        return self.quantity * self.price

    def differing_fields(self, other: "TradeSnapshot") -> list[str]:
        return [
            name for name in TRADE_COMPARED_FIELDS
            if getattr(self, name) != getattr(other, name)
        ]

    def to_json(self) -> dict[str, Any]:
        data = {f.name: _encode(getattr(self, f.name)) for f in fields(self)}
        data["kind"] = self.kind
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "TradeSnapshot":
        exec_time = data.get("order_execution_time")
        return cls(
            symbol=data["symbol"],
            trade_date=date.fromisoformat(data["trade_date"]),
            trade_type=TradeType(data["trade_type"]),
            quantity=Decimal(str(data["quantity"])),
            price=Decimal(str(data["price"])),
            isin=data.get("isin"),
            exchange=data.get("exchange"),
            segment=data.get("segment"),
            series=data.get("series"),
            auction=bool(data.get("auction", False)),
            trade_id=data.get("trade_id"),
            order_id=data.get("order_id"),
            order_execution_time=datetime.fromisoformat(exec_time) if exec_time else None,
        )


@dataclass(frozen=True)
class LedgerSnapshot:
    kind: ClassVar[str] = "ledger"

    posting_date: date
    debit: Decimal = Decimal(0)
    credit: Decimal = Decimal(0)
    particular: str | None = None
    cost_center: str | None = None
    voucher_type: str | None = None
    net_balance: Decimal | None = None

    def same_amounts(self, other: "LedgerSnapshot") -> bool:
        return self.debit == other.debit and self.credit == other.credit

    def to_json(self) -> dict[str, Any]:
        data = {f.name: _encode(getattr(self, f.name)) for f in fields(self)}
        data["kind"] = self.kind
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "LedgerSnapshot":
        return cls(
            posting_date=date.fromisoformat(data["posting_date"]),
            debit=_decimal_or_none(data.get("debit")) or Decimal(0),
            credit=_decimal_or_none(data.get("credit")) or Decimal(0),
            particular=data.get("particular"),
            cost_center=data.get("cost_center"),
            voucher_type=data.get("voucher_type"),
            net_balance=_decimal_or_none(data.get("net_balance")),
        )


Snapshot = TradeSnapshot | LedgerSnapshot


def snapshot_from_json(data: dict[str, Any]) -> Snapshot:
    """Rebuild a snapshot from its tagged JSON form."""
    kind = data.get("kind")
    if kind == TradeSnapshot.kind:
        return TradeSnapshot.from_json(data)
    if kind == LedgerSnapshot.kind:
        return LedgerSnapshot.from_json(data)
    raise ValueError(f"Unknown snapshot kind: {kind!r}")


@dataclass
class Trade:
    """A stored trades row."""

    id: int                          # BIGSERIAL
    account_id: int
    snapshot: TradeSnapshot
    import_batch_id: str | None = None
    import_date: datetime | None = None

    @property
    def symbol(self) -> str:
        return self.snapshot.symbol

    @property
    def trade_date(self) -> date:
        return self.snapshot.trade_date

    @property
    def trade_type(self) -> TradeType:
        return self.snapshot.trade_type

    @property
    def quantity(self) -> Decimal:
        return self.snapshot.quantity

    @property
    def price(self) -> Decimal:
        return self.snapshot.price


@dataclass
class LedgerEntry:
    """A stored ledger row."""

    id: int                          # BIGSERIAL
    account_id: int
    snapshot: LedgerSnapshot
    import_batch_id: str | None = None
    import_date: datetime | None = None

    @property
    def posting_date(self) -> date:
        return self.snapshot.posting_date

    @property
    def debit(self) -> Decimal:
        return self.snapshot.debit

    @property
    def credit(self) -> Decimal:
        return self.snapshot.credit

    @property
    def voucher_type(self) -> str | None:
        return self.snapshot.voucher_type


class RowOutcome(str, Enum):
    INSERTED = "inserted"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    CONFLICT_QUEUED = "conflict_queued"


@dataclass
class ImportResult:
    batch_id: str
    import_type: ImportType
    total: int
    imported: int = 0
    skipped: int = 0
    conflicts: int = 0
    errors: list[str] = field(default_factory=list)

    def record(self, outcome: RowOutcome) -> None:
        if outcome == RowOutcome.INSERTED:
            self.imported += 1
        elif outcome == RowOutcome.SKIPPED_DUPLICATE:
            self.skipped += 1
        else:
            self.conflicts += 1
