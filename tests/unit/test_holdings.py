"""Tests for holdings aggregation — running average cost and P&L."""

from datetime import date, timedelta
from decimal import Decimal

from src.pf_common.enums import HoldingStatus, TradeType
from src.pf_import.domain.models import Trade, TradeSnapshot
from src.pf_portfolio.domain.holdings import aggregate_holdings

D0 = date(2024, 1, 1)
_pk = iter(range(1, 10_000))


def _trade(
    trade_type: TradeType, qty: str, price: str, day: int = 0,
    symbol: str = "INFY", account_id: int = 1,
) -> Trade:
    return Trade(
        id=next(_pk),
        account_id=account_id,
        snapshot=TradeSnapshot(
            symbol, D0 + timedelta(days=day), trade_type, Decimal(qty), Decimal(price)
        ),
    )


class TestAggregateHoldings:
    def test_partial_sell_scenario(self) -> None:
        trades = [
            _trade(TradeType.BUY, "100", "10", 0),
            _trade(TradeType.SELL, "40", "15", 5),
        ]

        [h] = aggregate_holdings(trades, {"INFY": Decimal(12)})

        assert h.quantity == Decimal(60)
        assert h.avg_cost == Decimal(10)
        assert h.investment == Decimal(600)
        assert h.current_value == Decimal(720)
        assert h.unrealized_pnl == Decimal(120)
        assert h.realized_pnl == Decimal(200)
        assert h.total_pnl == Decimal(320)
        assert h.pnl_percent == Decimal(320) / Decimal(600) * 100
        assert h.status == HoldingStatus.ACTIVE
        assert h.sold_cost == Decimal(400)

    def test_average_cost_tracks_remaining_shares(self) -> None:
        trades = [
            _trade(TradeType.BUY, "10", "100", 0),
            _trade(TradeType.BUY, "10", "200", 1),
            _trade(TradeType.SELL, "10", "180", 2),
            _trade(TradeType.BUY, "10", "120", 3),
        ]

        [h] = aggregate_holdings(trades, {"INFY": Decimal(150)})

        # avg 150 after two buys; sell keeps avg; new buy averages (1500 + 1200) / 20
        assert h.quantity == Decimal(20)
        assert h.avg_cost == Decimal(135)
        assert h.realized_pnl == Decimal(300)

    def test_trades_are_folded_in_date_order(self) -> None:
        trades = [
            _trade(TradeType.SELL, "5", "20", 10),
            _trade(TradeType.BUY, "10", "10", 0),
        ]
        [h] = aggregate_holdings(trades, {"INFY": Decimal(10)})
        assert h.quantity == Decimal(5)
        assert h.realized_pnl == Decimal(50)

    def test_position_netting_to_zero_is_sold(self) -> None:
        trades = [
            _trade(TradeType.BUY, "10", "10", 0),
            _trade(TradeType.SELL, "4", "12", 1),
            _trade(TradeType.SELL, "6", "9", 2),
        ]

        assert aggregate_holdings(trades, {}) == []
        [h] = aggregate_holdings(trades, {}, include_closed=True)

        assert h.quantity == Decimal(0)
        assert h.status == HoldingStatus.SOLD
        assert h.avg_cost == Decimal(0)
        assert h.investment == Decimal(0)
        assert h.unrealized_pnl == Decimal(0)
        assert h.realized_pnl == Decimal(2)
        assert h.pnl_percent == Decimal(0)

    def test_net_quantity_is_buys_minus_sells_even_when_oversold(self) -> None:
        trades = [
            _trade(TradeType.BUY, "5", "10", 0),
            _trade(TradeType.SELL, "8", "10", 1),
            _trade(TradeType.BUY, "4", "20", 2),
        ]

        [h] = aggregate_holdings(trades, {"INFY": Decimal(20)}, include_closed=True)

        assert h.quantity == Decimal(1)
        assert h.total_buy_quantity - h.total_sell_quantity == h.quantity
        # only the one share above zero carries cost
        assert h.avg_cost == Decimal(20)

    def test_oversold_units_are_realized_without_cost(self) -> None:
        trades = [
            _trade(TradeType.BUY, "10", "100", 0),
            _trade(TradeType.SELL, "15", "120", 1),
        ]

        [h] = aggregate_holdings(trades, {}, include_closed=True)

        # cost is charged for the 10 held units only
        assert h.sold_cost == Decimal(1000)
        assert h.realized_pnl == Decimal(1800) - Decimal(1000)
        assert h.quantity == Decimal(-5)
        assert h.investment == Decimal(0)

    def test_grouped_per_account_and_symbol(self) -> None:
        trades = [
            _trade(TradeType.BUY, "1", "10", symbol="INFY", account_id=1),
            _trade(TradeType.BUY, "2", "10", symbol="INFY", account_id=2),
            _trade(TradeType.BUY, "3", "10", symbol="TCS", account_id=1),
        ]

        holdings = aggregate_holdings(trades, {})

        assert {(h.account_id, h.symbol, h.quantity) for h in holdings} == {
            (1, "INFY", Decimal(1)),
            (2, "INFY", Decimal(2)),
            (1, "TCS", Decimal(3)),
        }

    def test_missing_price_values_position_at_zero(self) -> None:
        [h] = aggregate_holdings([_trade(TradeType.BUY, "10", "10")], {})
        assert h.current_price == Decimal(0)
        assert h.current_value == Decimal(0)
        assert h.unrealized_pnl == Decimal(-100)

    def test_active_holdings_listed_before_sold(self) -> None:
        trades = [
            _trade(TradeType.BUY, "1", "10", symbol="AAA"),
            _trade(TradeType.SELL, "1", "10", 1, symbol="AAA"),
            _trade(TradeType.BUY, "1", "10", symbol="ZZZ"),
        ]
        holdings = aggregate_holdings(trades, {}, include_closed=True)
        assert [h.symbol for h in holdings] == ["ZZZ", "AAA"]
