"""Ledger categorization and per-account roll-up.

Voucher types are bucketed by case-insensitive substring, first match wins,
in the order of _CATEGORY_RULES.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from src.pf_common.enums import LedgerCategory
from src.pf_import.domain.models import LedgerEntry

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)

_CATEGORY_RULES: tuple[tuple[str, LedgerCategory], ...] = (
    ("book", LedgerCategory.FEES_AND_CHARGES),
    ("bank receipt", LedgerCategory.FUNDS_ADDED),
    ("journal", LedgerCategory.INTERNAL_ADJUSTMENT),
    ("bank payment", LedgerCategory.FUNDS_WITHDRAWN),
    ("delivery", LedgerCategory.DEMAT_MOVEMENT),
)


def categorize(voucher_type: str | None) -> LedgerCategory | None:
    if not voucher_type:
        return None
    lowered = voucher_type.lower()
    for needle, category in _CATEGORY_RULES:
        if needle in lowered:
            return category
    return None


@dataclass
class CategoryTotals:
    debit: Decimal = _ZERO
    credit: Decimal = _ZERO
    count: int = 0


@dataclass
class AccountLedgerSummary:
    account_id: int
    account_name: str
    total_debit: Decimal = _ZERO
    total_credit: Decimal = _ZERO
    entry_count: int = 0
    uncategorized_count: int = 0
    categories: dict[LedgerCategory, CategoryTotals] = field(
        default_factory=lambda: {c: CategoryTotals() for c in LedgerCategory}
    )

    @property
    def net_cash_flow(self) -> Decimal:
        return self.total_credit - self.total_debit

    @property
    def invested_value(self) -> Decimal:
        fees = self.categories[LedgerCategory.FEES_AND_CHARGES]
        internal = self.categories[LedgerCategory.INTERNAL_ADJUSTMENT]
        return (
            self.categories[LedgerCategory.FUNDS_ADDED].debit
            - self.categories[LedgerCategory.FUNDS_WITHDRAWN].credit
            - (fees.debit - fees.credit)
            - (internal.debit - internal.credit)
        )

    def add(self, entry: LedgerEntry) -> LedgerCategory | None:
        self.total_debit += entry.debit
        self.total_credit += entry.credit
        self.entry_count += 1
        category = categorize(entry.voucher_type)
        if category is None:
            self.uncategorized_count += 1
            return None
        bucket = self.categories[category]
        bucket.debit += entry.debit
        bucket.credit += entry.credit
        bucket.count += 1
        return category


def summarize_ledger(
    entries: Iterable[LedgerEntry], account_names: Mapping[int, str]
) -> list[AccountLedgerSummary]:
    """Roll up entries per account. Accounts without entries still get a zero summary."""
    summaries = {
        account_id: AccountLedgerSummary(account_id=account_id, account_name=name)
        for account_id, name in account_names.items()
    }
    unmatched: dict[int, set[str]] = defaultdict(set)

    for entry in entries:
        summary = summaries.get(entry.account_id)
        if summary is None:
            summary = summaries[entry.account_id] = AccountLedgerSummary(
                account_id=entry.account_id, account_name=str(entry.account_id)
            )
        if summary.add(entry) is None:
            unmatched[entry.account_id].add(entry.voucher_type or "<blank>")

    for account_id, voucher_types in unmatched.items():
        logger.warning(
            "Account %d: %d ledger entries with unrecognised voucher types %s",
            account_id,
            summaries[account_id].uncategorized_count,
            sorted(voucher_types),
        )

    return sorted(summaries.values(), key=lambda s: s.account_name)
