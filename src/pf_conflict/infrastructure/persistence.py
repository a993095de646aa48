"""ConflictRepository — raw SQL over import_conflicts.

Snapshots are stored as tagged JSONB ({"kind": "trade" | "ledger", ...}).
Row updates address trades / ledger by primary key and owning account; the
caller inspects the returned rowcount.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import ConflictStatus, ConflictType, ImportType
from src.pf_conflict.domain.models import ImportConflict, RowUpdate
from src.pf_import.domain.models import snapshot_from_json

_INSERT_SQL = text("""
    INSERT INTO import_conflicts
        (account_id, import_type, conflict_type, target_row_id,
         existing_data, new_data, conflict_field, status)
    VALUES
        (:account_id, :import_type, :conflict_type, :target_row_id,
         CAST(:existing_data AS JSONB), CAST(:new_data AS JSONB),
         :conflict_field, :status)
    RETURNING id
""")

_SELECT_COLUMNS = """
    ic.id, ic.account_id, ic.import_type, ic.conflict_type, ic.target_row_id,
    ic.existing_data, ic.new_data, ic.conflict_field, ic.status,
    ic.resolved_at, ic.resolved_by, ic.created_at, a.name AS account_name
"""

_LIST_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM import_conflicts ic
    JOIN accounts a ON a.id = ic.account_id
    WHERE a.user_id = :user_id
      AND (CAST(:account_id AS BIGINT) IS NULL OR ic.account_id = :account_id)
      AND (CAST(:status AS TEXT) IS NULL OR ic.status = :status)
    ORDER BY ic.created_at DESC, ic.id DESC
""")

_GET_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM import_conflicts ic
    JOIN accounts a ON a.id = ic.account_id
    WHERE ic.id = :conflict_id AND a.user_id = :user_id
    FOR UPDATE OF ic
""")

_RESOLVE_SQL = text("""
    UPDATE import_conflicts
    SET status = :status, resolved_at = NOW(), resolved_by = :resolved_by
    WHERE id = :conflict_id
""")

_DELETE_SQL = text("""
    DELETE FROM import_conflicts ic
    USING accounts a
    WHERE ic.id = :conflict_id AND a.id = ic.account_id AND a.user_id = :user_id
""")

# Columns a resolution may write, per target table
_UPDATABLE: dict[ImportType, tuple[str, frozenset[str]]] = {
    ImportType.TRADEBOOK: (
        "trades",
        frozenset({
            "quantity", "price", "symbol", "isin", "exchange",
            "segment", "series", "trade_type", "auction",
        }),
    ),
    ImportType.LEDGER: (
        "ledger",
        frozenset({"debit", "credit", "net_balance", "particular"}),
    ),
}


def _load_json(raw: Any) -> dict[str, Any]:
    # asyncpg hands JSONB back as str when the statement carries no type info
    return raw if isinstance(raw, dict) else json.loads(raw)


def _row_to_conflict(row: Any) -> ImportConflict:
    return ImportConflict(
        id=row.id,
        account_id=row.account_id,
        import_type=ImportType(row.import_type),
        conflict_type=ConflictType(row.conflict_type),
        target_row_id=row.target_row_id,
        existing_data=snapshot_from_json(_load_json(row.existing_data)),
        new_data=snapshot_from_json(_load_json(row.new_data)),
        conflict_field=row.conflict_field,
        status=ConflictStatus(row.status),
        resolved_at=row.resolved_at,
        resolved_by=row.resolved_by,
        created_at=row.created_at,
        account_name=row.account_name,
    )


def build_update_sql(update: RowUpdate) -> str:
    table, allowed = _UPDATABLE[update.import_type]
    unknown = set(update.values) - allowed
    if unknown:
        raise ValueError(f"Columns not updatable on {table}: {sorted(unknown)}")
    assignments = ", ".join(f"{col} = :{col}" for col in sorted(update.values))
    return f"UPDATE {table} SET {assignments} WHERE id = :row_id AND account_id = :account_id"


class ConflictRepository:
    async def create(self, db: AsyncSession, conflict: ImportConflict) -> int:
        result = await db.execute(
            _INSERT_SQL,
            {
                "account_id": conflict.account_id,
                "import_type": conflict.import_type.value,
                "conflict_type": conflict.conflict_type.value,
                "target_row_id": conflict.target_row_id,
                "existing_data": json.dumps(conflict.existing_data.to_json()),
                "new_data": json.dumps(conflict.new_data.to_json()),
                "conflict_field": conflict.conflict_field,
                "status": conflict.status.value,
            },
        )
        conflict_id: int = result.scalar_one()
        return conflict_id

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        status: ConflictStatus | None,
    ) -> list[ImportConflict]:
        result = await db.execute(
            _LIST_SQL,
            {
                "user_id": user_id,
                "account_id": account_id,
                "status": status.value if status else None,
            },
        )
        return [_row_to_conflict(r) for r in result.fetchall()]

    async def get_for_update(
        self, db: AsyncSession, user_id: str, conflict_id: int
    ) -> ImportConflict | None:
        result = await db.execute(
            _GET_FOR_UPDATE_SQL, {"conflict_id": conflict_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_conflict(row) if row else None

    async def apply_row_update(
        self, db: AsyncSession, account_id: int, update: RowUpdate
    ) -> int:
        params: dict[str, object] = dict(update.values)
        params["row_id"] = update.row_id
        params["account_id"] = account_id
        result = await db.execute(text(build_update_sql(update)), params)
        return int(result.rowcount)

    async def mark_resolved(
        self, db: AsyncSession, conflict_id: int, status: ConflictStatus, resolved_by: str
    ) -> None:
        await db.execute(
            _RESOLVE_SQL,
            {"conflict_id": conflict_id, "status": status.value, "resolved_by": resolved_by},
        )

    async def delete(self, db: AsyncSession, user_id: str, conflict_id: int) -> bool:
        result = await db.execute(_DELETE_SQL, {"conflict_id": conflict_id, "user_id": user_id})
        return bool(result.rowcount)
