"""PortfolioService — valuation read model.

Everything is recomputed from stored trades and ledger rows on each call:
  1. trades + ledger for the scope (one account, or all of the user's)
  2. one price per distinct symbol, under an overall deadline
  3. holdings fold, per-symbol XIRR, portfolio XIRR from ledger flows
Prices that cannot be fetched count as 0; an XIRR that cannot be solved is None.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pf_account.application.service import AccountApplicationService
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.datetime_utils import utc_today
from src.pf_common.decimals import round2, safe_percent
from src.pf_common.enums import HoldingStatus
from src.pf_common.errors import InvalidAccountIdError
from src.pf_import.domain.models import Trade
from src.pf_portfolio.application.schemas import (
    HoldingItem,
    LedgerSummaryItem,
    LedgerSummaryResponse,
    PortfolioStatsResponse,
)
from src.pf_portfolio.domain.cashflows import portfolio_cash_flows, symbol_cash_flows
from src.pf_portfolio.domain.holdings import aggregate_holdings
from src.pf_portfolio.domain.ledger_summary import summarize_ledger
from src.pf_portfolio.domain.repository import PortfolioRepositoryProtocol
from src.pf_portfolio.domain.xirr import xirr
from src.pf_portfolio.infrastructure.persistence import PortfolioRepository
from src.pf_portfolio.infrastructure.price_client import PriceProvider

logger = logging.getLogger(__name__)

CONSOLIDATED = "consolidated"


def parse_account_scope(raw: str | None) -> int | None:
    """'consolidated' (or nothing) -> None, '42' -> 42."""
    if raw is None or raw.strip().lower() in ("", CONSOLIDATED):
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidAccountIdError(raw) from None


class PortfolioService:
    def __init__(
        self,
        price_provider: PriceProvider,
        repo: PortfolioRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._prices = price_provider
        self._repo: PortfolioRepositoryProtocol = repo or PortfolioRepository()
        self._account_repo: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._accounts = AccountApplicationService(self._account_repo)

    async def get_stats(
        self, db: AsyncSession, user_id: str, account_id: int | None
    ) -> PortfolioStatsResponse:
        if account_id is None:
            account_name = "All Accounts"
        else:
            account_name = (await self._accounts.require_account(db, user_id, account_id)).name

        trades = await self._repo.list_trades(db, user_id, account_id)
        ledger = await self._repo.list_ledger(db, user_id, account_id)
        prices = await self._fetch_prices({t.symbol for t in trades})

        as_of = utc_today()
        holdings = aggregate_holdings(trades, prices, include_closed=True)
        history: dict[tuple[int, str], list[Trade]] = defaultdict(list)
        for trade in trades:
            history[(trade.account_id, trade.symbol)].append(trade)
        for holding in holdings:
            flows = symbol_cash_flows(
                history[(holding.account_id, holding.symbol)],
                holding.current_price,
                holding.quantity,
                as_of,
            )
            holding.xirr = xirr(flows, settings.XIRR_MAX_ITERATIONS)

        active = [h for h in holdings if h.status == HoldingStatus.ACTIVE]
        zero_price_symbols = sorted({h.symbol for h in active if h.current_price <= 0})
        if zero_price_symbols:
            logger.warning(
                "No market price for %d symbols, valued at 0: %s",
                len(zero_price_symbols),
                ", ".join(zero_price_symbols),
            )

        total_investment = sum((h.investment for h in active), Decimal(0))
        current_value = sum((h.current_value for h in active), Decimal(0))
        realized = sum((h.realized_pnl for h in holdings), Decimal(0))
        unrealized = sum((h.unrealized_pnl for h in active), Decimal(0))
        total_pnl = realized + unrealized
        portfolio_xirr = xirr(
            portfolio_cash_flows(ledger, current_value, as_of), settings.XIRR_MAX_ITERATIONS
        )

        return PortfolioStatsResponse(
            account_id=str(account_id) if account_id is not None else CONSOLIDATED,
            account_name=account_name,
            total_investment=round2(total_investment),
            current_value=round2(current_value),
            total_pnl=round2(total_pnl),
            total_pnl_percent=round2(safe_percent(total_pnl, total_investment)),
            realized_pnl=round2(realized),
            unrealized_pnl=round2(unrealized),
            total_sold_value=round2(sum((h.total_sell_value for h in holdings), Decimal(0))),
            total_sold_cost=round2(sum((h.sold_cost for h in holdings), Decimal(0))),
            total_invested_from_ledger=round2(sum((e.debit for e in ledger), Decimal(0))),
            xirr=round(portfolio_xirr, 2) if portfolio_xirr is not None else None,
            holdings_count=len(holdings),
            active_holdings_count=len(active),
            sold_holdings_count=len(holdings) - len(active),
            zero_price_symbols=zero_price_symbols,
            holdings=[HoldingItem.from_domain(h) for h in holdings],
        )

    async def get_ledger_summary(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> LedgerSummaryResponse:
        if account_id is None:
            accounts = await self._account_repo.list_for_user(db, user_id)
        else:
            accounts = [await self._accounts.require_account(db, user_id, account_id)]

        entries = await self._repo.list_ledger(db, user_id, account_id, from_date, to_date)
        summaries = summarize_ledger(entries, {a.id: a.name for a in accounts})
        return LedgerSummaryResponse(
            from_date=from_date,
            to_date=to_date,
            accounts=[LedgerSummaryItem.from_domain(s) for s in summaries],
        )

    async def _fetch_prices(self, symbols: Iterable[str]) -> dict[str, Decimal]:
        symbols = sorted(set(symbols))
        if not symbols:
            return {}
        try:
            return await asyncio.wait_for(
                self._prices.get_prices(symbols), timeout=settings.VALUATION_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Price lookup for %d symbols exceeded %.1fs, valuing all at 0",
                len(symbols),
                settings.VALUATION_TIMEOUT_SECONDS,
            )
            return {}
