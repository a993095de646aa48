"""Cash-flow extraction for XIRR.

Sign convention is the investor's: money leaving the investor is negative,
money coming back (or the value they could liquidate today) is positive.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from src.pf_common.enums import TradeType
from src.pf_import.domain.models import LedgerEntry, Trade


@dataclass(frozen=True)
class CashFlow:
    date: date
    amount: float


def portfolio_cash_flows(
    entries: Iterable[LedgerEntry], current_value: Decimal, as_of: date
) -> list[CashFlow]:
    """Ledger credit - debit per entry, plus today's holdings value as a final inflow."""
    flows = [
        CashFlow(entry.posting_date, float(entry.credit - entry.debit))
        for entry in entries
        if entry.credit != entry.debit
    ]
    if current_value > 0:
        flows.append(CashFlow(as_of, float(current_value)))
    flows.sort(key=lambda f: f.date)
    return flows


def symbol_cash_flows(
    trades: Iterable[Trade],
    current_price: Decimal,
    current_quantity: Decimal,
    as_of: date,
) -> list[CashFlow]:
    """Buys out, sells in, plus the remaining position marked at current_price."""
    flows = []
    for trade in trades:
        value = float(trade.quantity * trade.price)
        amount = -value if trade.trade_type == TradeType.BUY else value
        flows.append(CashFlow(trade.trade_date, amount))
    if current_quantity > 0:
        flows.append(CashFlow(as_of, float(current_quantity * current_price)))
    flows.sort(key=lambda f: f.date)
    return flows
