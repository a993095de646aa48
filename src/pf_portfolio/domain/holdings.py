"""Holdings aggregation — derive positions from the full trade history.

Positions are recomputed on every request; nothing here is persisted.

Running average cost:
  buy   qty += q, cost += q * price
  sell  qty -= q, cost -= q * avg_cost, realized += q * (price - avg_cost)
Once the position is flat (or oversold) the cost basis resets to zero.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from src.pf_common.decimals import safe_percent
from src.pf_common.enums import HoldingStatus, TradeType
from src.pf_import.domain.models import Trade

_ZERO = Decimal(0)


@dataclass
class Holding:
    account_id: int
    symbol: str
    quantity: Decimal = _ZERO
    cost_basis: Decimal = _ZERO
    current_price: Decimal = _ZERO
    total_buy_quantity: Decimal = _ZERO
    total_buy_value: Decimal = _ZERO
    total_sell_quantity: Decimal = _ZERO
    total_sell_value: Decimal = _ZERO
    sold_cost: Decimal = _ZERO
    realized_pnl: Decimal = _ZERO
    xirr: float | None = None

    @property
    def status(self) -> HoldingStatus:
        return HoldingStatus.ACTIVE if self.quantity > 0 else HoldingStatus.SOLD

    @property
    def avg_cost(self) -> Decimal:
        if self.quantity <= 0:
            return _ZERO
        return self.cost_basis / self.quantity

    @property
    def investment(self) -> Decimal:
        """Cost of the shares still held."""
        return self.cost_basis if self.quantity > 0 else _ZERO

    @property
    def current_value(self) -> Decimal:
        return self.quantity * self.current_price if self.quantity > 0 else _ZERO

    @property
    def unrealized_pnl(self) -> Decimal:
        return self.current_value - self.investment

    @property
    def total_pnl(self) -> Decimal:
        return self.realized_pnl + self.unrealized_pnl

    @property
    def pnl_percent(self) -> Decimal:
        return safe_percent(self.total_pnl, self.investment)

    def apply(self, trade: Trade) -> None:
        quantity, price = trade.quantity, trade.price
        if trade.trade_type == TradeType.BUY:
            self.total_buy_quantity += quantity
            self.total_buy_value += quantity * price
            # Units that only cover an oversold position carry no cost basis
            covering = min(quantity, max(-self.quantity, _ZERO))
            self.cost_basis += (quantity - covering) * price
            self.quantity += quantity
            return

        # Units sold beyond the held quantity carry no cost; their proceeds are realized in full
        avg = self.avg_cost
        held = max(self.quantity, _ZERO)
        removed = min(quantity, held) * avg
        self.total_sell_quantity += quantity
        self.total_sell_value += quantity * price
        self.sold_cost += removed
        self.realized_pnl += quantity * price - removed
        self.cost_basis -= removed
        self.quantity -= quantity
        if self.quantity <= 0:
            self.cost_basis = _ZERO


def aggregate_holdings(
    trades: Iterable[Trade],
    prices: Mapping[str, Decimal],
    include_closed: bool = False,
) -> list[Holding]:
    """Fold trades into one Holding per (account_id, symbol).

    Closed positions (net quantity <= 0) are dropped unless include_closed.
    """
    grouped: dict[tuple[int, str], list[Trade]] = defaultdict(list)
    for trade in trades:
        grouped[(trade.account_id, trade.symbol)].append(trade)

    holdings = []
    for (account_id, symbol), history in grouped.items():
        holding = Holding(account_id=account_id, symbol=symbol)
        for trade in sorted(history, key=lambda t: (t.trade_date, t.id)):
            holding.apply(trade)
        holding.current_price = prices.get(symbol, _ZERO)
        if holding.status == HoldingStatus.SOLD and not include_closed:
            continue
        holdings.append(holding)

    holdings.sort(key=lambda h: (h.status != HoldingStatus.ACTIVE, h.symbol, h.account_id))
    return holdings
