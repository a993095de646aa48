"""Repository Protocol for valuation reads and split writes."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_import.domain.models import LedgerEntry, Trade


class PortfolioRepositoryProtocol(Protocol):
    async def list_trades(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        symbol: str | None = None,
        before: date | None = None,
    ) -> list[Trade]: ...

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[LedgerEntry]: ...

    async def list_symbols(
        self, db: AsyncSession, user_id: str, account_id: int | None
    ) -> list[str]: ...

    async def update_trade_quantity_price(
        self,
        db: AsyncSession,
        account_id: int,
        trade_row_id: int,
        quantity: Decimal,
        price: Decimal,
    ) -> int: ...
