"""Unit tests for ConflictService using a mock repository."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.pf_common.enums import ConflictStatus, ConflictType, ImportType, TradeType
from src.pf_common.errors import (
    ConflictAlreadyResolvedError,
    ConflictNotFoundError,
    ConflictTargetMissingError,
    InvalidConflictActionError,
    ManualEditRequiredError,
)
from src.pf_conflict.application.service import ConflictService
from src.pf_conflict.domain.models import ImportConflict
from src.pf_import.domain.models import TradeSnapshot


def _make_conflict(status: ConflictStatus = ConflictStatus.PENDING) -> ImportConflict:
    return ImportConflict(
        id=7,
        account_id=1,
        import_type=ImportType.TRADEBOOK,
        conflict_type=ConflictType.DUPLICATE_TRADE_ID,
        target_row_id=42,
        existing_data=TradeSnapshot(
            "INFY", date(2024, 1, 1), TradeType.BUY, Decimal(10), Decimal(100), trade_id="T1"
        ),
        new_data=TradeSnapshot(
            "INFY", date(2024, 1, 1), TradeType.BUY, Decimal(12), Decimal(100), trade_id="T1"
        ),
        conflict_field="quantity",
        status=status,
        account_name="Main",
    )


def _make_service(conflict: ImportConflict | None) -> tuple[ConflictService, AsyncMock]:
    repo = AsyncMock()
    repo.get_for_update.return_value = conflict
    repo.apply_row_update.return_value = 1
    return ConflictService(repo=repo), repo


class TestResolve:
    async def test_use_new_updates_row_and_closes_conflict(self) -> None:
        svc, repo = _make_service(_make_conflict())
        db = AsyncMock()

        result = await svc.resolve(db, "user-1", 7, "use_new")

        assert result.status == "resolved_use_new"
        assert result.updated_row_id == 42
        update = repo.apply_row_update.call_args.args[2]
        assert update.values["quantity"] == Decimal(12)
        repo.mark_resolved.assert_awaited_once_with(
            db, 7, ConflictStatus.RESOLVED_USE_NEW, "user-1"
        )
        db.commit.assert_awaited_once()

    async def test_keep_existing_never_touches_row(self) -> None:
        svc, repo = _make_service(_make_conflict())
        db = AsyncMock()

        result = await svc.resolve(db, "user-1", 7, "keep_existing", resolved_by="admin")

        assert result.status == "resolved_keep_existing"
        assert result.updated_row_id is None
        repo.apply_row_update.assert_not_awaited()
        repo.mark_resolved.assert_awaited_once_with(
            db, 7, ConflictStatus.RESOLVED_KEEP_EXISTING, "admin"
        )

    async def test_invalid_action_rejected_before_any_read(self) -> None:
        svc, repo = _make_service(_make_conflict())
        db = AsyncMock()

        with pytest.raises(InvalidConflictActionError):
            await svc.resolve(db, "user-1", 7, "delete_everything")
        repo.get_for_update.assert_not_awaited()
        db.rollback.assert_not_awaited()

    async def test_manual_edit_without_payload_leaves_conflict_pending(self) -> None:
        svc, repo = _make_service(_make_conflict())
        db = AsyncMock()

        with pytest.raises(ManualEditRequiredError):
            await svc.resolve(db, "user-1", 7, "manual_edit")
        repo.mark_resolved.assert_not_awaited()
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_already_resolved(self) -> None:
        svc, repo = _make_service(_make_conflict(ConflictStatus.IGNORED))

        with pytest.raises(ConflictAlreadyResolvedError):
            await svc.resolve(AsyncMock(), "user-1", 7, "use_new")
        repo.apply_row_update.assert_not_awaited()

    async def test_missing_conflict(self) -> None:
        svc, _ = _make_service(None)
        with pytest.raises(ConflictNotFoundError):
            await svc.resolve(AsyncMock(), "user-1", 7, "ignore")

    async def test_target_row_gone(self) -> None:
        svc, repo = _make_service(_make_conflict())
        repo.apply_row_update.return_value = 0
        db = AsyncMock()

        with pytest.raises(ConflictTargetMissingError):
            await svc.resolve(db, "user-1", 7, "use_new")
        repo.mark_resolved.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestListAndDelete:
    async def test_list_defaults_to_pending(self) -> None:
        svc, repo = _make_service(None)
        repo.list_for_user.return_value = [_make_conflict()]
        db = AsyncMock()

        result = await svc.list_conflicts(db, "user-1")

        repo.list_for_user.assert_awaited_once_with(db, "user-1", None, ConflictStatus.PENDING)
        assert result.total == 1
        item = result.items[0]
        assert item.account_name == "Main"
        assert item.existing_data["kind"] == "trade"
        assert item.new_data["quantity"] == "12"

    async def test_delete_commits(self) -> None:
        svc, repo = _make_service(None)
        repo.delete.return_value = True
        db = AsyncMock()

        await svc.delete(db, "user-1", 7)
        db.commit.assert_awaited_once()

    async def test_delete_missing_raises(self) -> None:
        svc, repo = _make_service(None)
        repo.delete.return_value = False
        db = AsyncMock()

        with pytest.raises(ConflictNotFoundError):
            await svc.delete(db, "user-1", 7)
        db.rollback.assert_awaited_once()
