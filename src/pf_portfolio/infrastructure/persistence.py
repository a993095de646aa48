"""PortfolioRepository — owner-scoped reads over trades and ledger.

`account_id=None` means every account of the user (consolidated view).
Ownership is enforced with a sub-select on accounts, so the shared
TRADE_COLUMNS / LEDGER_COLUMNS lists stay unqualified.

Transaction ownership: The CALLER (SplitService) commits.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_import.domain.models import LedgerEntry, Trade
from src.pf_import.infrastructure.persistence import (
    LEDGER_COLUMNS,
    TRADE_COLUMNS,
    row_to_ledger,
    row_to_trade,
)

_OWNED = "account_id IN (SELECT id FROM accounts WHERE user_id = :user_id)"

_LIST_TRADES_SQL = text(f"""
    SELECT {TRADE_COLUMNS}
    FROM trades
    WHERE {_OWNED}
      AND (CAST(:account_id AS BIGINT) IS NULL OR account_id = :account_id)
      AND (CAST(:symbol AS TEXT) IS NULL OR symbol = :symbol)
      AND (CAST(:before AS DATE) IS NULL OR trade_date < :before)
    ORDER BY trade_date, id
""")

_LIST_LEDGER_SQL = text(f"""
    SELECT {LEDGER_COLUMNS}
    FROM ledger
    WHERE {_OWNED}
      AND (CAST(:account_id AS BIGINT) IS NULL OR account_id = :account_id)
      AND (CAST(:from_date AS DATE) IS NULL OR posting_date >= :from_date)
      AND (CAST(:to_date AS DATE) IS NULL OR posting_date <= :to_date)
    ORDER BY posting_date, id
""")

_LIST_SYMBOLS_SQL = text(f"""
    SELECT DISTINCT symbol
    FROM trades
    WHERE {_OWNED}
      AND (CAST(:account_id AS BIGINT) IS NULL OR account_id = :account_id)
    ORDER BY symbol
""")

_UPDATE_TRADE_SQL = text("""
    UPDATE trades
    SET quantity = :quantity, price = :price
    WHERE id = :row_id AND account_id = :account_id
""")


class PortfolioRepository:
    async def list_trades(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        symbol: str | None = None,
        before: date | None = None,
    ) -> list[Trade]:
        result = await db.execute(
            _LIST_TRADES_SQL,
            {"user_id": user_id, "account_id": account_id, "symbol": symbol, "before": before},
        )
        return [row_to_trade(r) for r in result.fetchall()]

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "account_id": account_id,
                "from_date": from_date,
                "to_date": to_date,
            },
        )
        return [row_to_ledger(r) for r in result.fetchall()]

    async def list_symbols(
        self, db: AsyncSession, user_id: str, account_id: int | None
    ) -> list[str]:
        result = await db.execute(
            _LIST_SYMBOLS_SQL, {"user_id": user_id, "account_id": account_id}
        )
        return [r.symbol for r in result.fetchall()]

    async def update_trade_quantity_price(
        self,
        db: AsyncSession,
        account_id: int,
        trade_row_id: int,
        quantity: Decimal,
        price: Decimal,
    ) -> int:
        result = await db.execute(
            _UPDATE_TRADE_SQL,
            {
                "row_id": trade_row_id,
                "account_id": account_id,
                "quantity": quantity,
                "price": price,
            },
        )
        return result.rowcount
