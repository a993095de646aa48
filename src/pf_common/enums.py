"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class ImportType(str, Enum):
    TRADEBOOK = "tradebook"
    LEDGER = "ledger"


class ConflictType(str, Enum):
    DUPLICATE_TRADE_ID = "duplicate_trade_id"
    DUPLICATE_ENTRY_DIFFERENT_AMOUNT = "duplicate_entry_different_amount"


class ConflictStatus(str, Enum):
    PENDING = "pending"
    RESOLVED_KEEP_EXISTING = "resolved_keep_existing"
    RESOLVED_USE_NEW = "resolved_use_new"
    RESOLVED_MANUAL = "resolved_manual"
    IGNORED = "ignored"


class ConflictAction(str, Enum):
    KEEP_EXISTING = "keep_existing"
    USE_NEW = "use_new"
    MANUAL_EDIT = "manual_edit"
    IGNORE = "ignore"


class HoldingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"


class LedgerCategory(str, Enum):
    FEES_AND_CHARGES = "feesAndCharges"        # Book Voucher
    FUNDS_ADDED = "fundsAdded"                 # Bank Receipts
    INTERNAL_ADJUSTMENT = "internalAdjustment"  # Journal Entry
    FUNDS_WITHDRAWN = "fundsWithdrawn"         # Bank Payments
    DEMAT_MOVEMENT = "dematMovement"           # Delivery Voucher


class BulkTradeAction(str, Enum):
    RENAME_SYMBOL = "rename_symbol"
    UPDATE_TRADES = "update_trades"
