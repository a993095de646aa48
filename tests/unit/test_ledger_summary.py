"""Tests for ledger categorization and the per-account roll-up."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from src.pf_common.enums import LedgerCategory
from src.pf_import.domain.models import LedgerEntry, LedgerSnapshot
from src.pf_portfolio.domain.ledger_summary import categorize, summarize_ledger


def _entry(voucher_type: str | None, debit: str = "0", credit: str = "0",
           account_id: int = 1) -> LedgerEntry:
    return LedgerEntry(
        id=1,
        account_id=account_id,
        snapshot=LedgerSnapshot(
            date(2024, 1, 1), Decimal(debit), Decimal(credit), voucher_type=voucher_type
        ),
    )


class TestCategorize:
    @pytest.mark.parametrize(
        "voucher_type,expected",
        [
            ("Book Voucher", LedgerCategory.FEES_AND_CHARGES),
            ("Bank Receipt - NEFT", LedgerCategory.FUNDS_ADDED),
            ("bank receipts", LedgerCategory.FUNDS_ADDED),
            ("Journal Entry", LedgerCategory.INTERNAL_ADJUSTMENT),
            ("Bank Payments", LedgerCategory.FUNDS_WITHDRAWN),
            ("Delivery Voucher", LedgerCategory.DEMAT_MOVEMENT),
        ],
    )
    def test_known_voucher_types(self, voucher_type: str, expected: LedgerCategory) -> None:
        assert categorize(voucher_type) == expected

    def test_first_match_wins(self) -> None:
        assert categorize("Journal for Bank Payment") == LedgerCategory.INTERNAL_ADJUSTMENT

    @pytest.mark.parametrize("voucher_type", [None, "", "Opening Balance"])
    def test_unmatched(self, voucher_type: str | None) -> None:
        assert categorize(voucher_type) is None


class TestSummarizeLedger:
    def test_bank_receipt_lands_in_funds_added_only(self) -> None:
        [summary] = summarize_ledger(
            [_entry("Bank Receipt - NEFT", debit="10000")], {1: "Main"}
        )

        assert summary.categories[LedgerCategory.FUNDS_ADDED].debit == Decimal(10000)
        others = [c for c in LedgerCategory if c != LedgerCategory.FUNDS_ADDED]
        assert all(summary.categories[c].count == 0 for c in others)
        assert summary.invested_value == Decimal(10000)

    def test_invested_value_formula(self) -> None:
        entries = [
            _entry("Bank Receipts", debit="10000"),
            _entry("Bank Payments", credit="2000"),
            _entry("Book Voucher", debit="150", credit="50"),
            _entry("Journal Entry", debit="30", credit="10"),
            _entry("Delivery Voucher", debit="999"),
        ]

        [s] = summarize_ledger(entries, {1: "Main"})

        # 10000 - 2000 - (150 - 50) - (30 - 10)
        assert s.invested_value == Decimal(7880)
        assert s.total_debit == Decimal(11179)
        assert s.total_credit == Decimal(2060)
        assert s.net_cash_flow == Decimal(2060) - Decimal(11179)
        assert s.entry_count == 5
        assert s.uncategorized_count == 0

    def test_uncategorized_counted_in_totals_and_logged(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        entries = [_entry("Opening Balance", credit="500"), _entry("Bank Receipts", debit="100")]

        with caplog.at_level(logging.WARNING):
            [s] = summarize_ledger(entries, {1: "Main"})

        assert s.total_credit == Decimal(500)
        assert s.uncategorized_count == 1
        assert "Opening Balance" in caplog.text

    def test_one_summary_per_account(self) -> None:
        entries = [_entry("Bank Receipts", debit="100", account_id=2)]

        summaries = summarize_ledger(entries, {1: "Alpha", 2: "Beta"})

        assert [(s.account_name, s.entry_count) for s in summaries] == [("Alpha", 0), ("Beta", 1)]
