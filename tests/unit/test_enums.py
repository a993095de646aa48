"""Tests for pf_common.enums — values must match DB CHECK constraints."""

from src.pf_common.enums import (
    ConflictAction,
    ConflictStatus,
    ConflictType,
    HoldingStatus,
    ImportType,
    LedgerCategory,
    TradeType,
)


class TestAllEnumsAreStr:
    """All enums inherit from (str, Enum) for JSON serialization."""

    def test_trade_type_is_str(self) -> None:
        assert isinstance(TradeType.BUY, str)
        assert TradeType.BUY == "buy"

    def test_conflict_status_is_str(self) -> None:
        assert isinstance(ConflictStatus.PENDING, str)
        assert ConflictStatus.PENDING == "pending"


class TestEnumValues:
    def test_trade_type(self) -> None:
        assert {t.value for t in TradeType} == {"buy", "sell"}

    def test_import_type(self) -> None:
        assert {t.value for t in ImportType} == {"tradebook", "ledger"}

    def test_conflict_type(self) -> None:
        assert {t.value for t in ConflictType} == {
            "duplicate_trade_id",
            "duplicate_entry_different_amount",
        }

    def test_conflict_status(self) -> None:
        assert {s.value for s in ConflictStatus} == {
            "pending",
            "resolved_keep_existing",
            "resolved_use_new",
            "resolved_manual",
            "ignored",
        }

    def test_every_action_has_a_status(self) -> None:
        assert len(ConflictAction) == len(ConflictStatus) - 1

    def test_holding_status(self) -> None:
        assert {s.value for s in HoldingStatus} == {"active", "sold"}

    def test_ledger_categories(self) -> None:
        assert [c.value for c in LedgerCategory] == [
            "feesAndCharges",
            "fundsAdded",
            "internalAdjustment",
            "fundsWithdrawn",
            "dematMovement",
        ]
