"""AccountRepository — concrete implementation of AccountRepositoryProtocol.

Every read is scoped by owner (user_id): an account that belongs to someone
else is indistinguishable from a missing one.

Transaction ownership: The CALLER (application service) commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account
from src.pf_common.enums import ImportType

_COLUMNS = """
    id, user_id, name, broker_id,
    last_tradebook_sync, last_ledger_sync,
    tradebook_records_count, ledger_records_count,
    created_at, updated_at
"""

_GET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM accounts
    WHERE id = :account_id AND user_id = :user_id
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
    ORDER BY name
""")

_INSERT_SQL = text(f"""
    INSERT INTO accounts (user_id, name, broker_id)
    VALUES (:user_id, :name, :broker_id)
    RETURNING {_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE accounts
    SET name = :name, broker_id = :broker_id
    WHERE id = :account_id AND user_id = :user_id
    RETURNING {_COLUMNS}
""")

# trades / ledger / import_conflicts go with it via ON DELETE CASCADE
_DELETE_SQL = text("""
    DELETE FROM accounts
    WHERE id = :account_id AND user_id = :user_id
""")

_SYNC_TRADEBOOK_SQL = text("""
    UPDATE accounts
    SET last_tradebook_sync = NOW(),
        tradebook_records_count = tradebook_records_count + :imported
    WHERE id = :account_id
""")

_SYNC_LEDGER_SQL = text("""
    UPDATE accounts
    SET last_ledger_sync = NOW(),
        ledger_records_count = ledger_records_count + :imported
    WHERE id = :account_id
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        broker_id=row.broker_id,  # type: ignore[attr-defined]
        last_tradebook_sync=row.last_tradebook_sync,  # type: ignore[attr-defined]
        last_ledger_sync=row.last_ledger_sync,  # type: ignore[attr-defined]
        tradebook_records_count=row.tradebook_records_count,  # type: ignore[attr-defined]
        ledger_records_count=row.ledger_records_count,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    async def get_for_user(
        self, db: AsyncSession, user_id: str, account_id: int
    ) -> Account | None:
        result = await db.execute(_GET_SQL, {"account_id": account_id, "user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[Account]:
        result = await db.execute(_LIST_SQL, {"user_id": user_id})
        return [_row_to_account(r) for r in result.fetchall()]

    async def create(
        self, db: AsyncSession, user_id: str, name: str, broker_id: str | None
    ) -> Account:
        result = await db.execute(
            _INSERT_SQL, {"user_id": user_id, "name": name, "broker_id": broker_id}
        )
        return _row_to_account(result.fetchone())

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int,
        name: str,
        broker_id: str | None,
    ) -> Account | None:
        result = await db.execute(
            _UPDATE_SQL,
            {"account_id": account_id, "user_id": user_id, "name": name, "broker_id": broker_id},
        )
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def delete(self, db: AsyncSession, user_id: str, account_id: int) -> bool:
        result = await db.execute(_DELETE_SQL, {"account_id": account_id, "user_id": user_id})
        return bool(result.rowcount)

    async def record_sync(
        self, db: AsyncSession, account_id: int, import_type: ImportType, imported: int
    ) -> None:
        sql = _SYNC_TRADEBOOK_SQL if import_type == ImportType.TRADEBOOK else _SYNC_LEDGER_SQL
        await db.execute(sql, {"account_id": account_id, "imported": imported})
