"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_import.domain.models import Trade, TradeSnapshot


class TradeRepositoryProtocol(Protocol):
    async def get_for_user(
        self, db: AsyncSession, user_id: str, trade_pk: int
    ) -> Trade | None: ...

    async def insert_manual(
        self, db: AsyncSession, account_id: int, row: TradeSnapshot
    ) -> Trade: ...

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        trade_pk: int,
        symbol: str | None,
        quantity: Decimal | None,
        price: Decimal | None,
    ) -> Trade | None: ...

    async def update_many(
        self,
        db: AsyncSession,
        user_id: str,
        trade_pks: list[int],
        symbol: str | None,
        quantity: Decimal | None,
        price: Decimal | None,
    ) -> int: ...

    async def delete(self, db: AsyncSession, user_id: str, trade_pk: int) -> bool: ...

    async def rename_symbol(
        self,
        db: AsyncSession,
        user_id: str,
        old_symbol: str,
        new_symbol: str,
        account_id: int | None,
    ) -> int: ...
