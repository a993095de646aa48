"""Unit tests for ImportService — reconciliation outcomes per row."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.pf_account.domain.models import Account
from src.pf_common.enums import ConflictType, ImportType, TradeType
from src.pf_common.errors import AccountNotFoundError, ImportInProgressError, InvalidCsvError
from src.pf_import.application.service import ImportService
from src.pf_import.domain.models import LedgerEntry, LedgerSnapshot, Trade, TradeSnapshot

HEADER = b"symbol,trade_date,trade_type,quantity,price,trade_id\n"


def _numeric(value: Decimal | None, places: str) -> Decimal | None:
    """What a NUMERIC(18, n) column hands back after INSERT."""
    if value is None:
        return None
    return value.quantize(Decimal(places), rounding=ROUND_HALF_UP)


class _InMemoryImportRepo:
    """Behaves like ImportRepository against a single in-process table per kind.

    Inserted amounts are rounded to the column scales, as PostgreSQL stores them.
    """

    def __init__(self) -> None:
        self.trades: list[Trade] = []
        self.ledger: list[LedgerEntry] = []

    async def find_trade(self, db, account_id, trade_id):  # type: ignore[no-untyped-def]
        return next(
            (t for t in self.trades
             if t.account_id == account_id and t.snapshot.trade_id == trade_id),
            None,
        )

    async def insert_trade(self, db, account_id, row, batch_id):  # type: ignore[no-untyped-def]
        row = replace(
            row, quantity=_numeric(row.quantity, "0.000001"), price=_numeric(row.price, "0.0001")
        )
        trade = Trade(id=len(self.trades) + 1, account_id=account_id, snapshot=row,
                      import_batch_id=batch_id)
        self.trades.append(trade)
        return trade.id

    async def find_ledger_exact(self, db, account_id, row):  # type: ignore[no-untyped-def]
        return next(
            (e for e in await self._same_key(account_id, row) if e.snapshot.same_amounts(row)),
            None,
        )

    async def find_ledger_partial(self, db, account_id, row):  # type: ignore[no-untyped-def]
        return next(iter(await self._same_key(account_id, row)), None)

    async def insert_ledger(self, db, account_id, row, batch_id):  # type: ignore[no-untyped-def]
        row = replace(
            row,
            debit=_numeric(row.debit, "0.0001"),
            credit=_numeric(row.credit, "0.0001"),
            net_balance=_numeric(row.net_balance, "0.0001"),
        )
        entry = LedgerEntry(id=len(self.ledger) + 1, account_id=account_id, snapshot=row,
                            import_batch_id=batch_id)
        self.ledger.append(entry)
        return entry.id

    async def _same_key(self, account_id: int, row: LedgerSnapshot) -> list[LedgerEntry]:
        return [
            e for e in self.ledger
            if e.account_id == account_id
            and e.snapshot.posting_date == row.posting_date
            and e.snapshot.particular == row.particular
        ]


@asynccontextmanager
async def _no_lock(account_id: int) -> AsyncIterator[None]:
    yield


def _make_db() -> AsyncMock:
    db = AsyncMock()
    db.begin_nested = MagicMock()
    return db


def _make_service(
    repo: _InMemoryImportRepo | None = None,
) -> tuple[ImportService, _InMemoryImportRepo, AsyncMock, AsyncMock]:
    repo = repo or _InMemoryImportRepo()
    conflict_repo = AsyncMock()
    account_repo = AsyncMock()
    account_repo.get_for_user.return_value = Account(id=1, user_id="user-1", name="Main")
    svc = ImportService(
        repo=repo, conflict_repo=conflict_repo, account_repo=account_repo, lock_factory=_no_lock
    )
    return svc, repo, conflict_repo, account_repo


class TestTradebookImport:
    async def test_fresh_import_inserts_every_row(self) -> None:
        svc, repo, conflicts, accounts = _make_service()
        db = _make_db()
        csv = HEADER + b"INFY,2024-01-01,buy,10,100,T1\nTCS,2024-01-02,buy,5,200,T2\n"

        result = await svc.import_trades(db, "user-1", 1, csv)

        assert (result.imported, result.skipped, result.conflicts, result.total) == (2, 0, 0, 2)
        assert result.errors == []
        assert result.batch_id.startswith("tb_")
        assert all(t.import_batch_id == result.batch_id for t in repo.trades)
        accounts.record_sync.assert_awaited_once_with(db, 1, ImportType.TRADEBOOK, 2)
        db.commit.assert_awaited_once()
        conflicts.create.assert_not_awaited()

    async def test_reimport_is_idempotent(self) -> None:
        svc, repo, conflicts, accounts = _make_service()
        csv = HEADER + (
            b"INFY,2024-01-01,buy,10,100,T1\n"
            b"TCS,2024-01-02,buy,5,200,T2\n"
            b"INFY,2024-02-01,sell,4,120,T3\n"
        )
        await svc.import_trades(_make_db(), "user-1", 1, csv)
        accounts.record_sync.reset_mock()

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert (result.imported, result.skipped, result.conflicts) == (0, 3, 0)
        assert len(repo.trades) == 3
        accounts.record_sync.assert_not_awaited()
        conflicts.create.assert_not_awaited()

    async def test_reimport_beyond_column_scale_is_idempotent(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        csv = HEADER + b"INFY,2024-01-01,buy,10.1234567,1523.45678,T1\n"
        await svc.import_trades(_make_db(), "user-1", 1, csv)

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert (result.imported, result.skipped, result.conflicts) == (0, 1, 0)
        assert repo.trades[0].price == Decimal("1523.4568")
        assert repo.trades[0].quantity == Decimal("10.123457")
        conflicts.create.assert_not_awaited()

    async def test_changed_quantity_queues_conflict_and_keeps_stored_row(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        await svc.import_trades(
            _make_db(), "user-1", 1, HEADER + b"INFY,2024-01-01,buy,10,100,T1\n"
        )

        result = await svc.import_trades(
            _make_db(), "user-1", 1, HEADER + b"INFY,2024-01-01,buy,12,100,T1\n"
        )

        assert (result.imported, result.skipped, result.conflicts) == (0, 0, 1)
        assert "1 conflicts need review" in result.message
        assert repo.trades[0].quantity == Decimal("10")
        conflict = conflicts.create.call_args.args[1]
        assert conflict.conflict_type == ConflictType.DUPLICATE_TRADE_ID
        assert conflict.target_row_id == 1
        assert conflict.conflict_field == "quantity"
        assert conflict.existing_data.quantity == Decimal("10")
        assert conflict.new_data.quantity == Decimal("12")

    async def test_duplicate_inside_one_file_sees_earlier_row(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        csv = HEADER + b"INFY,2024-01-01,buy,10,100,T1\nINFY,2024-01-01,buy,10,100,T1\n"

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert (result.imported, result.skipped) == (1, 1)
        assert len(repo.trades) == 1

    async def test_rows_without_trade_id_are_always_inserted(self) -> None:
        svc, repo, _, _ = _make_service()
        csv = HEADER + b"INFY,2024-01-01,buy,10,100,\nINFY,2024-01-01,buy,10,100,\n"

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert result.imported == 2

    async def test_bad_rows_are_reported_and_skipped(self) -> None:
        svc, repo, _, _ = _make_service()
        csv = HEADER + (
            b"INFY,2024-01-01,buy,10,100,T1\n"
            b",2024-01-01,buy,10,100,T2\n"
            b"TCS,2024-01-01,buy,0,100,T3\n"
        )

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert result.imported == 1
        assert result.total == 3
        assert len(result.errors) == 2
        assert result.errors[0].startswith("Row 2:")
        assert result.errors[1].startswith("Row 3:")

    async def test_database_error_on_one_row_does_not_abort_batch(self) -> None:
        repo = _InMemoryImportRepo()
        original_insert = repo.insert_trade
        calls = {"n": 0}

        async def flaky_insert(db, account_id, row, batch_id):  # type: ignore[no-untyped-def]
            calls["n"] += 1
            if calls["n"] == 1:
                raise IntegrityError("INSERT", {}, Exception("unique violation"))
            return await original_insert(db, account_id, row, batch_id)

        repo.insert_trade = flaky_insert  # type: ignore[method-assign]
        svc, _, _, _ = _make_service(repo)
        csv = HEADER + b"INFY,2024-01-01,buy,10,100,T1\nTCS,2024-01-02,buy,5,200,T2\n"

        result = await svc.import_trades(_make_db(), "user-1", 1, csv)

        assert result.imported == 1
        assert result.errors == ["Row 1: error importing trade T1: IntegrityError"]

    async def test_unknown_account_raises_before_reading(self) -> None:
        svc, _, _, accounts = _make_service()
        accounts.get_for_user.return_value = None

        with pytest.raises(AccountNotFoundError):
            await svc.import_trades(_make_db(), "user-1", 99, b"garbage")

    async def test_invalid_csv_raises(self) -> None:
        svc, _, _, _ = _make_service()
        with pytest.raises(InvalidCsvError):
            await svc.import_trades(_make_db(), "user-1", 1, b"")

    async def test_lock_contention_raises_and_writes_nothing(self) -> None:
        @asynccontextmanager
        async def busy(account_id: int) -> AsyncIterator[None]:
            raise ImportInProgressError(account_id)
            yield  # pragma: no cover

        repo = _InMemoryImportRepo()
        account_repo = AsyncMock()
        account_repo.get_for_user.return_value = Account(id=1, user_id="user-1", name="Main")
        svc = ImportService(
            repo=repo, conflict_repo=AsyncMock(), account_repo=account_repo, lock_factory=busy
        )
        db = _make_db()

        with pytest.raises(ImportInProgressError):
            await svc.import_trades(db, "user-1", 1, HEADER + b"INFY,2024-01-01,buy,1,1,T1\n")
        assert repo.trades == []
        db.commit.assert_not_awaited()

    async def test_commit_failure_rolls_back(self) -> None:
        svc, _, _, _ = _make_service()
        db = _make_db()
        db.commit.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            await svc.import_trades(db, "user-1", 1, HEADER + b"INFY,2024-01-01,buy,1,1,T1\n")
        db.rollback.assert_awaited_once()


LEDGER_HEADER = b"particular,posting_date,voucher_type,debit,credit,net_balance\n"


class TestLedgerImport:
    async def test_exact_duplicate_is_skipped(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        csv = LEDGER_HEADER + b"Funds added,2024-01-01,Bank Receipts,0,5000,5000\n"
        await svc.import_ledger(_make_db(), "user-1", 1, csv)

        result = await svc.import_ledger(_make_db(), "user-1", 1, csv)

        assert (result.imported, result.skipped, result.conflicts) == (0, 1, 0)
        assert "ledger entries" in result.message
        assert len(repo.ledger) == 1

    async def test_reimport_beyond_column_scale_is_skipped(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        csv = LEDGER_HEADER + b"Charges,2024-01-01,Book Voucher,100.12345,0,-100.12345\n"
        await svc.import_ledger(_make_db(), "user-1", 1, csv)

        result = await svc.import_ledger(_make_db(), "user-1", 1, csv)

        assert (result.imported, result.skipped, result.conflicts) == (0, 1, 0)
        assert repo.ledger[0].debit == Decimal("100.1235")
        conflicts.create.assert_not_awaited()

    async def test_different_amount_queues_conflict(self) -> None:
        svc, repo, conflicts, _ = _make_service()
        await svc.import_ledger(
            _make_db(), "user-1", 1,
            LEDGER_HEADER + b"Funds added,2024-01-01,Bank Receipts,0,5000,5000\n",
        )

        result = await svc.import_ledger(
            _make_db(), "user-1", 1,
            LEDGER_HEADER + b"Funds added,2024-01-01,Bank Receipts,0,5500,5500\n",
        )

        assert result.conflicts == 1
        assert repo.ledger[0].credit == Decimal("5000")
        conflict = conflicts.create.call_args.args[1]
        assert conflict.import_type == ImportType.LEDGER
        assert conflict.conflict_type == ConflictType.DUPLICATE_ENTRY_DIFFERENT_AMOUNT
        assert conflict.conflict_field == "debit,credit"

    async def test_blank_particular_matches_blank(self) -> None:
        svc, repo, _, _ = _make_service()
        csv = LEDGER_HEADER + b",2024-01-01,Journal Entry,10,0,\n"
        await svc.import_ledger(_make_db(), "user-1", 1, csv)

        result = await svc.import_ledger(_make_db(), "user-1", 1, csv)

        assert result.skipped == 1
        assert repo.ledger[0].snapshot.particular is None

    async def test_record_sync_uses_ledger_counter(self) -> None:
        svc, _, _, accounts = _make_service()
        db = _make_db()

        result = await svc.import_ledger(
            db, "user-1", 1, LEDGER_HEADER + b"Charges,2024-01-01,Book Voucher,20,0,\n"
        )

        assert result.batch_id.startswith("lg_")
        accounts.record_sync.assert_awaited_once_with(db, 1, ImportType.LEDGER, 1)


class TestSnapshotComparison:
    def test_only_compared_fields_count(self) -> None:
        base = TradeSnapshot("INFY", date(2024, 1, 1), TradeType.BUY, Decimal(1), Decimal(10))
        other = TradeSnapshot(
            "INFY", date(2024, 1, 1), TradeType.BUY, Decimal(1), Decimal(10), exchange="BSE"
        )
        assert base.differing_fields(other) == []

    def test_price_and_symbol_reported_in_order(self) -> None:
        base = TradeSnapshot("INFY", date(2024, 1, 1), TradeType.BUY, Decimal(1), Decimal(10))
        other = TradeSnapshot("TCS", date(2024, 1, 1), TradeType.BUY, Decimal(1), Decimal(11))
        assert base.differing_fields(other) == ["price", "symbol"]
