"""ImportRepository Protocol — lookups and inserts the reconciliation pipeline needs."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_import.domain.models import LedgerEntry, LedgerSnapshot, Trade, TradeSnapshot


class ImportRepositoryProtocol(Protocol):
    async def find_trade(
        self, db: AsyncSession, account_id: int, trade_id: str
    ) -> Trade | None: ...

    async def insert_trade(
        self, db: AsyncSession, account_id: int, row: TradeSnapshot, batch_id: str
    ) -> int: ...

    async def find_ledger_exact(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot
    ) -> LedgerEntry | None: ...

    async def find_ledger_partial(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot
    ) -> LedgerEntry | None: ...

    async def insert_ledger(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot, batch_id: str
    ) -> int: ...
