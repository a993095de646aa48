"""SplitService — retroactive stock split adjustment of stored trades.

Only trades strictly before the split date are touched. Preview computes the
same adjustments and writes nothing.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.service import AccountApplicationService
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_portfolio.application.schemas import (
    SplitAdjustmentItem,
    SplitResponse,
    SymbolListResponse,
)
from src.pf_portfolio.domain.repository import PortfolioRepositoryProtocol
from src.pf_portfolio.domain.split import parse_ratio, plan_split
from src.pf_portfolio.infrastructure.persistence import PortfolioRepository

logger = logging.getLogger(__name__)


class SplitService:
    def __init__(
        self,
        repo: PortfolioRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._repo: PortfolioRepositoryProtocol = repo or PortfolioRepository()
        self._accounts = AccountApplicationService(account_repo or AccountRepository())

    async def apply_split(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int,
        symbol: str,
        split_date: date,
        ratio: str,
        preview: bool = False,
    ) -> SplitResponse:
        parsed = parse_ratio(ratio)
        await self._accounts.require_account(db, user_id, account_id)
        symbol = symbol.strip().upper()

        trades = await self._repo.list_trades(
            db, user_id, account_id, symbol=symbol, before=split_date
        )
        adjustments = plan_split(trades, parsed)

        if not preview and adjustments:
            try:
                for adj in adjustments:
                    await self._repo.update_trade_quantity_price(
                        db, account_id, adj.trade_id, adj.new_quantity, adj.new_price
                    )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            logger.info(
                "Applied %s split to %d %s trades before %s (account %d)",
                parsed, len(adjustments), symbol, split_date, account_id,
            )

        return SplitResponse(
            account_id=account_id,
            symbol=symbol,
            ratio=str(parsed),
            split_date=split_date,
            preview=preview,
            affected_count=len(adjustments),
            adjustments=[SplitAdjustmentItem.from_domain(a) for a in adjustments],
        )

    async def list_symbols(
        self, db: AsyncSession, user_id: str, account_id: int | None
    ) -> SymbolListResponse:
        if account_id is not None:
            await self._accounts.require_account(db, user_id, account_id)
        symbols = await self._repo.list_symbols(db, user_id, account_id)
        return SymbolListResponse(symbols=symbols)
