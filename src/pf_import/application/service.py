"""ImportService — conflict-aware CSV ingestion for tradebook and ledger files.

Each row ends in exactly one outcome: inserted, skipped (exact duplicate) or
conflict queued. A stored row is never overwritten by an import.

Flow per call:
  1. resolve the account (ownership)        — AccountNotFoundError aborts
  2. read the CSV                            — InvalidCsvError aborts
  3. take the per-account import lock        — ImportInProgressError aborts
  4. rows, strictly in file order, each inside its own SAVEPOINT
  5. account sync metadata (only when something was inserted), one COMMIT
"""

import logging
from collections.abc import Awaitable, Callable
from contextlib import AbstractAsyncContextManager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.service import AccountApplicationService
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.enums import ConflictType, ImportType
from src.pf_common.errors import RowValidationError
from src.pf_common.id_generator import generate_batch_id
from src.pf_conflict.domain.models import ImportConflict
from src.pf_conflict.domain.repository import ConflictRepositoryProtocol
from src.pf_conflict.infrastructure.persistence import ConflictRepository
from src.pf_import.application.schemas import ImportResponse
from src.pf_import.domain.csv_rows import (
    LEDGER_COLUMNS,
    LEDGER_REQUIRED,
    TRADEBOOK_COLUMNS,
    TRADEBOOK_REQUIRED,
    parse_ledger_row,
    parse_trade_row,
    read_csv,
)
from src.pf_import.domain.models import (
    ImportResult,
    LedgerSnapshot,
    RowOutcome,
    TradeSnapshot,
)
from src.pf_import.domain.repository import ImportRepositoryProtocol
from src.pf_import.infrastructure.import_lock import account_import_lock
from src.pf_import.infrastructure.persistence import ImportRepository

logger = logging.getLogger(__name__)

LockFactory = Callable[[int], AbstractAsyncContextManager[None]]


class ImportService:
    def __init__(
        self,
        repo: ImportRepositoryProtocol | None = None,
        conflict_repo: ConflictRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        lock_factory: LockFactory | None = None,
    ) -> None:
        self._repo: ImportRepositoryProtocol = repo or ImportRepository()
        self._conflicts: ConflictRepositoryProtocol = conflict_repo or ConflictRepository()
        self._account_repo: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._accounts = AccountApplicationService(self._account_repo)
        self._lock: LockFactory = lock_factory or account_import_lock

    async def import_trades(
        self, db: AsyncSession, user_id: str, account_id: int, content: bytes
    ) -> ImportResponse:
        await self._accounts.require_account(db, user_id, account_id)
        rows = read_csv(content, TRADEBOOK_COLUMNS, TRADEBOOK_REQUIRED)
        result = await self._run_batch(
            db, account_id, ImportType.TRADEBOOK, rows, self._import_trade_row
        )
        return ImportResponse.from_result(result)

    async def import_ledger(
        self, db: AsyncSession, user_id: str, account_id: int, content: bytes
    ) -> ImportResponse:
        await self._accounts.require_account(db, user_id, account_id)
        rows = read_csv(content, LEDGER_COLUMNS, LEDGER_REQUIRED)
        result = await self._run_batch(
            db, account_id, ImportType.LEDGER, rows, self._import_ledger_row
        )
        return ImportResponse.from_result(result)

    async def _run_batch(
        self,
        db: AsyncSession,
        account_id: int,
        import_type: ImportType,
        rows: list[dict[str, str]],
        handle_row: Callable[[AsyncSession, int, dict[str, str], str], Awaitable[RowOutcome]],
    ) -> ImportResult:
        result = ImportResult(
            batch_id=generate_batch_id(import_type),
            import_type=import_type,
            total=len(rows),
        )
        async with self._lock(account_id):
            try:
                for line_no, raw in enumerate(rows, start=1):
                    try:
                        outcome = await handle_row(db, account_id, raw, result.batch_id)
                    except RowValidationError as exc:
                        result.errors.append(f"Row {line_no}: {exc}")
                        continue
                    except SQLAlchemyError as exc:
                        logger.warning(
                            "Row %d of batch %s failed: %s", line_no, result.batch_id, exc
                        )
                        result.errors.append(
                            f"Row {line_no}: error importing {_describe(raw)}: "
                            f"{exc.__class__.__name__}"
                        )
                        continue
                    logger.debug("Row %d of batch %s: %s", line_no, result.batch_id, outcome.value)
                    result.record(outcome)

                if result.imported > 0:
                    await self._account_repo.record_sync(
                        db, account_id, import_type, result.imported
                    )
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            "Import %s for account %d: %d rows, %d imported, %d skipped, %d conflicts, %d errors",
            result.batch_id,
            account_id,
            result.total,
            result.imported,
            result.skipped,
            result.conflicts,
            len(result.errors),
        )
        return result

    async def _import_trade_row(
        self, db: AsyncSession, account_id: int, raw: dict[str, str], batch_id: str
    ) -> RowOutcome:
        row = parse_trade_row(raw)
        async with db.begin_nested():
            return await self._reconcile_trade(db, account_id, row, batch_id)

    async def _import_ledger_row(
        self, db: AsyncSession, account_id: int, raw: dict[str, str], batch_id: str
    ) -> RowOutcome:
        row = parse_ledger_row(raw)
        async with db.begin_nested():
            return await self._reconcile_ledger(db, account_id, row, batch_id)

    async def _reconcile_trade(
        self, db: AsyncSession, account_id: int, row: TradeSnapshot, batch_id: str
    ) -> RowOutcome:
        # Without a broker trade_id there is no natural key to match on
        existing = (
            await self._repo.find_trade(db, account_id, row.trade_id) if row.trade_id else None
        )
        if existing is None:
            await self._repo.insert_trade(db, account_id, row, batch_id)
            return RowOutcome.INSERTED

        differing = existing.snapshot.differing_fields(row)
        if not differing:
            return RowOutcome.SKIPPED_DUPLICATE

        await self._conflicts.create(
            db,
            ImportConflict(
                account_id=account_id,
                import_type=ImportType.TRADEBOOK,
                conflict_type=ConflictType.DUPLICATE_TRADE_ID,
                target_row_id=existing.id,
                existing_data=existing.snapshot,
                new_data=row,
                conflict_field=",".join(differing),
            ),
        )
        return RowOutcome.CONFLICT_QUEUED

    async def _reconcile_ledger(
        self, db: AsyncSession, account_id: int, row: LedgerSnapshot, batch_id: str
    ) -> RowOutcome:
        if await self._repo.find_ledger_exact(db, account_id, row) is not None:
            return RowOutcome.SKIPPED_DUPLICATE

        existing = await self._repo.find_ledger_partial(db, account_id, row)
        if existing is None:
            await self._repo.insert_ledger(db, account_id, row, batch_id)
            return RowOutcome.INSERTED

        await self._conflicts.create(
            db,
            ImportConflict(
                account_id=account_id,
                import_type=ImportType.LEDGER,
                conflict_type=ConflictType.DUPLICATE_ENTRY_DIFFERENT_AMOUNT,
                target_row_id=existing.id,
                existing_data=existing.snapshot,
                new_data=row,
                conflict_field="debit,credit",
            ),
        )
        return RowOutcome.CONFLICT_QUEUED


def _describe(raw: dict[str, Any]) -> str:
    if raw.get("trade_id"):
        return f"trade {raw['trade_id']}"
    if raw.get("posting_date"):
        return f"entry on {raw['posting_date']}"
    return "row"
