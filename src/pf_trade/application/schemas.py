"""Pydantic schemas for pf_trade API."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.pf_common.enums import BulkTradeAction, TradeType
from src.pf_import.domain.models import Trade


def _normalize_symbol(v: str) -> str:
    symbol = v.strip().upper()
    if not symbol:
        raise ValueError("symbol must not be blank")
    return symbol


class CreateTradeRequest(BaseModel):
    account_id: int
    symbol: str = Field(..., max_length=64)
    trade_date: date
    trade_type: TradeType
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    exchange: str | None = Field(None, max_length=16)
    segment: str | None = Field(None, max_length=16)
    series: str | None = Field(None, max_length=16)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        return _normalize_symbol(v)


class TradeEdit(BaseModel):
    """Fields left as None are not changed."""

    symbol: str | None = Field(None, max_length=64)
    quantity: Decimal | None = Field(None, gt=0)
    price: Decimal | None = Field(None, gt=0)

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v: str | None) -> str | None:
        return None if v is None else _normalize_symbol(v)


class BulkUpdateRequest(BaseModel):
    action: BulkTradeAction
    # rename_symbol
    old_symbol: str | None = None
    new_symbol: str | None = Field(None, max_length=64)
    account_id: int | None = None
    # update_trades
    trade_ids: list[int] = Field(default_factory=list)
    updates: TradeEdit | None = None

    @field_validator("old_symbol", "new_symbol")
    @classmethod
    def upper_symbol(cls, v: str | None) -> str | None:
        return None if v is None else _normalize_symbol(v)


class TradeResponse(BaseModel):
    id: int
    account_id: int
    symbol: str
    isin: str | None
    trade_date: date
    exchange: str | None
    segment: str | None
    series: str | None
    trade_type: str
    auction: bool
    quantity: Decimal
    price: Decimal
    value: Decimal
    trade_id: str | None
    order_id: str | None
    import_batch_id: str | None

    @classmethod
    def from_domain(cls, t: Trade) -> "TradeResponse":
        s = t.snapshot
        return cls(
            id=t.id,
            account_id=t.account_id,
            symbol=s.symbol,
            isin=s.isin,
            trade_date=s.trade_date,
            exchange=s.exchange,
            segment=s.segment,
            series=s.series,
            trade_type=s.trade_type.value,
            auction=s.auction,
            quantity=s.quantity,
            price=s.price,
            value=s.value,
            trade_id=s.trade_id,
            order_id=s.order_id,
            import_batch_id=t.import_batch_id,
        )


class BulkUpdateResponse(BaseModel):
    action: str
    affected_rows: int
