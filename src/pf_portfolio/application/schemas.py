"""Pydantic schemas for pf_portfolio API.

Money in responses is rounded half-up to 2 places; quantities are passed
through unrounded.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from src.pf_common.decimals import round2
from src.pf_portfolio.domain.holdings import Holding
from src.pf_portfolio.domain.ledger_summary import AccountLedgerSummary
from src.pf_portfolio.domain.split import SplitAdjustment


def _round_rate(rate: float | None) -> float | None:
    return round(rate, 2) if rate is not None else None


class HoldingItem(BaseModel):
    account_id: int
    symbol: str
    status: str
    quantity: Decimal
    avg_cost: Decimal
    current_price: Decimal
    investment: Decimal
    current_value: Decimal
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    pnl_percent: Decimal
    total_buy_quantity: Decimal
    total_buy_value: Decimal
    total_sell_quantity: Decimal
    total_sell_value: Decimal
    xirr: float | None

    @classmethod
    def from_domain(cls, h: Holding) -> "HoldingItem":
        return cls(
            account_id=h.account_id,
            symbol=h.symbol,
            status=h.status.value,
            quantity=h.quantity,
            avg_cost=round2(h.avg_cost),
            current_price=round2(h.current_price),
            investment=round2(h.investment),
            current_value=round2(h.current_value),
            realized_pnl=round2(h.realized_pnl),
            unrealized_pnl=round2(h.unrealized_pnl),
            total_pnl=round2(h.total_pnl),
            pnl_percent=round2(h.pnl_percent),
            total_buy_quantity=h.total_buy_quantity,
            total_buy_value=round2(h.total_buy_value),
            total_sell_quantity=h.total_sell_quantity,
            total_sell_value=round2(h.total_sell_value),
            xirr=_round_rate(h.xirr),
        )


class PortfolioStatsResponse(BaseModel):
    account_id: str
    account_name: str
    total_investment: Decimal
    current_value: Decimal
    total_pnl: Decimal
    total_pnl_percent: Decimal
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_sold_value: Decimal
    total_sold_cost: Decimal
    total_invested_from_ledger: Decimal
    xirr: float | None
    holdings_count: int
    active_holdings_count: int
    sold_holdings_count: int
    zero_price_symbols: list[str]
    holdings: list[HoldingItem]


class CategoryTotalsItem(BaseModel):
    debit: Decimal
    credit: Decimal
    count: int


class LedgerSummaryItem(BaseModel):
    account_id: int
    account_name: str
    total_debit: Decimal
    total_credit: Decimal
    net_cash_flow: Decimal
    invested_value: Decimal
    entry_count: int
    uncategorized_count: int
    categories: dict[str, CategoryTotalsItem]

    @classmethod
    def from_domain(cls, s: AccountLedgerSummary) -> "LedgerSummaryItem":
        return cls(
            account_id=s.account_id,
            account_name=s.account_name,
            total_debit=round2(s.total_debit),
            total_credit=round2(s.total_credit),
            net_cash_flow=round2(s.net_cash_flow),
            invested_value=round2(s.invested_value),
            entry_count=s.entry_count,
            uncategorized_count=s.uncategorized_count,
            categories={
                category.value: CategoryTotalsItem(
                    debit=round2(totals.debit), credit=round2(totals.credit), count=totals.count
                )
                for category, totals in s.categories.items()
            },
        )


class LedgerSummaryResponse(BaseModel):
    from_date: date | None
    to_date: date | None
    accounts: list[LedgerSummaryItem]


class SplitRequest(BaseModel):
    account_id: int
    symbol: str = Field(..., min_length=1)
    split_date: date
    ratio: str = Field(..., description='"old:new", e.g. "1:5"')
    preview: bool = False


class SplitAdjustmentItem(BaseModel):
    trade_id: int
    trade_date: date
    trade_type: str
    old_quantity: Decimal
    new_quantity: Decimal
    old_price: Decimal
    new_price: Decimal

    @classmethod
    def from_domain(cls, a: SplitAdjustment) -> "SplitAdjustmentItem":
        return cls(
            trade_id=a.trade_id,
            trade_date=a.trade_date,
            trade_type=a.trade_type,
            old_quantity=a.old_quantity,
            new_quantity=a.new_quantity,
            old_price=a.old_price,
            new_price=a.new_price,
        )


class SplitResponse(BaseModel):
    account_id: int
    symbol: str
    ratio: str
    split_date: date
    preview: bool
    affected_count: int
    adjustments: list[SplitAdjustmentItem]


class SymbolListResponse(BaseModel):
    symbols: list[str]
