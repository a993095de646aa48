"""Conflict resolution state machine.

    pending ──keep_existing──▶ resolved_keep_existing
            ──use_new────────▶ resolved_use_new
            ──manual_edit────▶ resolved_manual
            ──ignore─────────▶ ignored

Every non-pending status is terminal.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from src.pf_common.decimals import to_amount_scale, to_quantity_scale
from src.pf_common.enums import ConflictAction, ConflictStatus, ImportType
from src.pf_common.errors import (
    ConflictAlreadyResolvedError,
    InvalidConflictActionError,
    InvalidManualEditError,
    ManualEditRequiredError,
)
from src.pf_conflict.domain.models import ImportConflict, RowUpdate
from src.pf_import.domain.models import LedgerSnapshot, TradeSnapshot

_TARGET_STATUS: dict[ConflictAction, ConflictStatus] = {
    ConflictAction.KEEP_EXISTING: ConflictStatus.RESOLVED_KEEP_EXISTING,
    ConflictAction.USE_NEW: ConflictStatus.RESOLVED_USE_NEW,
    ConflictAction.MANUAL_EDIT: ConflictStatus.RESOLVED_MANUAL,
    ConflictAction.IGNORE: ConflictStatus.IGNORED,
}


class ManualTradeEdit(BaseModel):
    quantity: Decimal = Field(..., gt=0)
    price: Decimal = Field(..., gt=0)
    symbol: str = Field(..., min_length=1, max_length=64)


class ManualLedgerEdit(BaseModel):
    debit: Decimal = Field(Decimal(0), ge=0)
    credit: Decimal = Field(Decimal(0), ge=0)
    net_balance: Decimal | None = None


def parse_action(raw: str) -> ConflictAction:
    try:
        return ConflictAction(raw)
    except ValueError:
        raise InvalidConflictActionError(raw) from None


def next_status(conflict: ImportConflict, action: ConflictAction) -> ConflictStatus:
    if conflict.status != ConflictStatus.PENDING:
        raise ConflictAlreadyResolvedError(conflict.id or 0, conflict.status.value)
    return _TARGET_STATUS[action]


def plan_row_update(
    conflict: ImportConflict,
    action: ConflictAction,
    edited_data: dict[str, Any] | None = None,
) -> RowUpdate | None:
    """Return the row write an action implies, or None when it only closes the conflict."""
    if action in (ConflictAction.KEEP_EXISTING, ConflictAction.IGNORE):
        return None
    if action == ConflictAction.USE_NEW:
        return _use_new(conflict)
    if not edited_data:
        raise ManualEditRequiredError()
    return _manual_edit(conflict, edited_data)


def _use_new(conflict: ImportConflict) -> RowUpdate:
    new = conflict.new_data
    if isinstance(new, TradeSnapshot):
        values: dict[str, object] = {
            "quantity": new.quantity,
            "price": new.price,
            "symbol": new.symbol,
            "isin": new.isin,
            "exchange": new.exchange,
            "segment": new.segment,
            "series": new.series,
            "trade_type": new.trade_type.value,
            "auction": new.auction,
        }
        return RowUpdate(ImportType.TRADEBOOK, conflict.target_row_id, values)
    if isinstance(new, LedgerSnapshot):
        values = {
            "debit": new.debit,
            "credit": new.credit,
            "net_balance": new.net_balance,
            "particular": new.particular,
        }
        return RowUpdate(ImportType.LEDGER, conflict.target_row_id, values)
    raise TypeError(f"Unsupported snapshot type: {type(new).__name__}")


def _manual_edit(conflict: ImportConflict, edited_data: dict[str, Any]) -> RowUpdate:
    existing = conflict.existing_data
    try:
        if isinstance(existing, TradeSnapshot):
            trade_edit = ManualTradeEdit.model_validate(edited_data)
            return RowUpdate(
                ImportType.TRADEBOOK,
                conflict.target_row_id,
                {
                    "quantity": to_quantity_scale(trade_edit.quantity),
                    "price": to_amount_scale(trade_edit.price),
                    "symbol": trade_edit.symbol.strip().upper(),
                },
            )
        if isinstance(existing, LedgerSnapshot):
            ledger_edit = ManualLedgerEdit.model_validate(edited_data)
            return RowUpdate(
                ImportType.LEDGER,
                conflict.target_row_id,
                {
                    "debit": to_amount_scale(ledger_edit.debit),
                    "credit": to_amount_scale(ledger_edit.credit),
                    "net_balance": (
                        to_amount_scale(ledger_edit.net_balance)
                        if ledger_edit.net_balance is not None
                        else None
                    ),
                },
            )
    except ValidationError as exc:
        raise InvalidManualEditError(_first_error(exc)) from None
    raise TypeError(f"Unsupported snapshot type: {type(existing).__name__}")


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    location = ".".join(str(p) for p in err.get("loc", ()))
    return f"{location}: {err.get('msg', 'invalid value')}"
