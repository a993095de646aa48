"""TradeRepository — owner-scoped maintenance writes over trades.

A NULL edit parameter leaves its column unchanged (COALESCE), so one statement
serves every combination of symbol / quantity / price edits.

Manual trades carry no broker trade_id and no import batch, so the import
pipeline never matches against them.

Transaction ownership: The CALLER (TradeService) commits.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_import.domain.models import Trade, TradeSnapshot
from src.pf_import.infrastructure.persistence import TRADE_COLUMNS, row_to_trade

_OWNED = "account_id IN (SELECT id FROM accounts WHERE user_id = :user_id)"

_EDIT_ASSIGNMENTS = """
    symbol = COALESCE(CAST(:symbol AS VARCHAR), symbol),
    quantity = COALESCE(CAST(:quantity AS NUMERIC), quantity),
    price = COALESCE(CAST(:price AS NUMERIC), price)
"""

_GET_SQL = text(f"""
    SELECT {TRADE_COLUMNS}
    FROM trades
    WHERE id = :trade_pk AND {_OWNED}
""")

_INSERT_MANUAL_SQL = text(f"""
    INSERT INTO trades
        (account_id, symbol, trade_date, exchange, segment, series,
         trade_type, auction, quantity, price)
    VALUES
        (:account_id, :symbol, :trade_date, :exchange, :segment, :series,
         :trade_type, FALSE, :quantity, :price)
    RETURNING {TRADE_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE trades
    SET {_EDIT_ASSIGNMENTS}
    WHERE id = :trade_pk AND {_OWNED}
    RETURNING {TRADE_COLUMNS}
""")

_UPDATE_MANY_SQL = text(f"""
    UPDATE trades
    SET {_EDIT_ASSIGNMENTS}
    WHERE id = ANY(CAST(:trade_pks AS BIGINT[])) AND {_OWNED}
""")

_DELETE_SQL = text(f"""
    DELETE FROM trades
    WHERE id = :trade_pk AND {_OWNED}
""")

_RENAME_SQL = text(f"""
    UPDATE trades
    SET symbol = :new_symbol
    WHERE symbol = :old_symbol
      AND {_OWNED}
      AND (CAST(:account_id AS BIGINT) IS NULL OR account_id = :account_id)
""")


class TradeRepository:
    async def get_for_user(
        self, db: AsyncSession, user_id: str, trade_pk: int
    ) -> Trade | None:
        result = await db.execute(_GET_SQL, {"trade_pk": trade_pk, "user_id": user_id})
        row = result.fetchone()
        return row_to_trade(row) if row else None

    async def insert_manual(
        self, db: AsyncSession, account_id: int, row: TradeSnapshot
    ) -> Trade:
        result = await db.execute(
            _INSERT_MANUAL_SQL,
            {
                "account_id": account_id,
                "symbol": row.symbol,
                "trade_date": row.trade_date,
                "exchange": row.exchange,
                "segment": row.segment,
                "series": row.series,
                "trade_type": row.trade_type.value,
                "quantity": row.quantity,
                "price": row.price,
            },
        )
        return row_to_trade(result.fetchone())

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        trade_pk: int,
        symbol: str | None,
        quantity: Decimal | None,
        price: Decimal | None,
    ) -> Trade | None:
        result = await db.execute(
            _UPDATE_SQL,
            {
                "trade_pk": trade_pk,
                "user_id": user_id,
                "symbol": symbol,
                "quantity": quantity,
                "price": price,
            },
        )
        row = result.fetchone()
        return row_to_trade(row) if row else None

    async def update_many(
        self,
        db: AsyncSession,
        user_id: str,
        trade_pks: list[int],
        symbol: str | None,
        quantity: Decimal | None,
        price: Decimal | None,
    ) -> int:
        result = await db.execute(
            _UPDATE_MANY_SQL,
            {
                "trade_pks": trade_pks,
                "user_id": user_id,
                "symbol": symbol,
                "quantity": quantity,
                "price": price,
            },
        )
        return int(result.rowcount or 0)

    async def delete(self, db: AsyncSession, user_id: str, trade_pk: int) -> bool:
        result = await db.execute(_DELETE_SQL, {"trade_pk": trade_pk, "user_id": user_id})
        return bool(result.rowcount)

    async def rename_symbol(
        self,
        db: AsyncSession,
        user_id: str,
        old_symbol: str,
        new_symbol: str,
        account_id: int | None,
    ) -> int:
        result = await db.execute(
            _RENAME_SQL,
            {
                "user_id": user_id,
                "old_symbol": old_symbol,
                "new_symbol": new_symbol,
                "account_id": account_id,
            },
        )
        return int(result.rowcount or 0)
