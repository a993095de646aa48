"""ImportRepository — raw SQL over trades and ledger.

Natural keys:
  trades  (account_id, trade_id)            — partial unique index when trade_id IS NOT NULL
  ledger  (account_id, posting_date, particular[, debit, credit])

`particular` is compared with IS NOT DISTINCT FROM so a blank particular
matches another blank one.

Transaction ownership: The CALLER (ImportService) opens a SAVEPOINT per row
and commits the batch.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import TradeType
from src.pf_import.domain.models import LedgerEntry, LedgerSnapshot, Trade, TradeSnapshot

TRADE_COLUMNS = """
    id, account_id, symbol, isin, trade_date, exchange, segment, series,
    trade_type, auction, quantity, price, trade_id, order_id,
    order_execution_time, import_batch_id, import_date
"""

LEDGER_COLUMNS = """
    id, account_id, particular, posting_date, cost_center, voucher_type,
    debit, credit, net_balance, import_batch_id, import_date
"""

_FIND_TRADE_SQL = text(f"""
    SELECT {TRADE_COLUMNS}
    FROM trades
    WHERE account_id = :account_id AND trade_id = :trade_id
    ORDER BY id
    LIMIT 1
""")

_INSERT_TRADE_SQL = text("""
    INSERT INTO trades
        (account_id, symbol, isin, trade_date, exchange, segment, series,
         trade_type, auction, quantity, price, trade_id, order_id,
         order_execution_time, import_batch_id, import_date)
    VALUES
        (:account_id, :symbol, :isin, :trade_date, :exchange, :segment, :series,
         :trade_type, :auction, :quantity, :price, :trade_id, :order_id,
         :order_execution_time, :import_batch_id, NOW())
    RETURNING id
""")

_FIND_LEDGER_EXACT_SQL = text(f"""
    SELECT {LEDGER_COLUMNS}
    FROM ledger
    WHERE account_id = :account_id
      AND posting_date = :posting_date
      AND particular IS NOT DISTINCT FROM CAST(:particular AS TEXT)
      AND debit = :debit
      AND credit = :credit
    ORDER BY id
    LIMIT 1
""")

_FIND_LEDGER_PARTIAL_SQL = text(f"""
    SELECT {LEDGER_COLUMNS}
    FROM ledger
    WHERE account_id = :account_id
      AND posting_date = :posting_date
      AND particular IS NOT DISTINCT FROM CAST(:particular AS TEXT)
    ORDER BY id
    LIMIT 1
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger
        (account_id, particular, posting_date, cost_center, voucher_type,
         debit, credit, net_balance, import_batch_id, import_date)
    VALUES
        (:account_id, :particular, :posting_date, :cost_center, :voucher_type,
         :debit, :credit, :net_balance, :import_batch_id, NOW())
    RETURNING id
""")


def row_to_trade(row: Any) -> Trade:
    return Trade(
        id=row.id,
        account_id=row.account_id,
        snapshot=TradeSnapshot(
            symbol=row.symbol,
            trade_date=row.trade_date,
            trade_type=TradeType(row.trade_type),
            quantity=row.quantity,
            price=row.price,
            isin=row.isin,
            exchange=row.exchange,
            segment=row.segment,
            series=row.series,
            auction=bool(row.auction),
            trade_id=row.trade_id,
            order_id=row.order_id,
            order_execution_time=row.order_execution_time,
        ),
        import_batch_id=row.import_batch_id,
        import_date=row.import_date,
    )


def row_to_ledger(row: Any) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        account_id=row.account_id,
        snapshot=LedgerSnapshot(
            posting_date=row.posting_date,
            debit=row.debit,
            credit=row.credit,
            particular=row.particular,
            cost_center=row.cost_center,
            voucher_type=row.voucher_type,
            net_balance=row.net_balance,
        ),
        import_batch_id=row.import_batch_id,
        import_date=row.import_date,
    )


class ImportRepository:
    async def find_trade(
        self, db: AsyncSession, account_id: int, trade_id: str
    ) -> Trade | None:
        result = await db.execute(
            _FIND_TRADE_SQL, {"account_id": account_id, "trade_id": trade_id}
        )
        row = result.fetchone()
        return row_to_trade(row) if row else None

    async def insert_trade(
        self, db: AsyncSession, account_id: int, row: TradeSnapshot, batch_id: str
    ) -> int:
        result = await db.execute(
            _INSERT_TRADE_SQL,
            {
                "account_id": account_id,
                "symbol": row.symbol,
                "isin": row.isin,
                "trade_date": row.trade_date,
                "exchange": row.exchange,
                "segment": row.segment,
                "series": row.series,
                "trade_type": row.trade_type.value,
                "auction": row.auction,
                "quantity": row.quantity,
                "price": row.price,
                "trade_id": row.trade_id,
                "order_id": row.order_id,
                "order_execution_time": row.order_execution_time,
                "import_batch_id": batch_id,
            },
        )
        trade_pk: int = result.scalar_one()
        return trade_pk

    async def find_ledger_exact(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot
    ) -> LedgerEntry | None:
        result = await db.execute(
            _FIND_LEDGER_EXACT_SQL,
            {
                "account_id": account_id,
                "posting_date": row.posting_date,
                "particular": row.particular,
                "debit": row.debit,
                "credit": row.credit,
            },
        )
        found = result.fetchone()
        return row_to_ledger(found) if found else None

    async def find_ledger_partial(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot
    ) -> LedgerEntry | None:
        result = await db.execute(
            _FIND_LEDGER_PARTIAL_SQL,
            {
                "account_id": account_id,
                "posting_date": row.posting_date,
                "particular": row.particular,
            },
        )
        found = result.fetchone()
        return row_to_ledger(found) if found else None

    async def insert_ledger(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot, batch_id: str
    ) -> int:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "account_id": account_id,
                "particular": row.particular,
                "posting_date": row.posting_date,
                "cost_center": row.cost_center,
                "voucher_type": row.voucher_type,
                "debit": row.debit,
                "credit": row.credit,
                "net_balance": row.net_balance,
                "import_batch_id": batch_id,
            },
        )
        entry_pk: int = result.scalar_one()
        return entry_pk
