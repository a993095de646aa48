"""TradeService — manual maintenance of stored trades.

Covers what a broker import cannot: trades entered by hand, corrections to a
single row, and symbol renames after a corporate action. Every write is
scoped to the caller's accounts and committed in one transaction.

Quantity and price are rounded to their column scale before writing, the same
as imported rows.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.service import AccountApplicationService
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.decimals import to_amount_scale, to_quantity_scale
from src.pf_common.enums import BulkTradeAction
from src.pf_common.errors import (
    EmptyTradeUpdateError,
    InvalidBulkUpdateError,
    TradeNotFoundError,
)
from src.pf_import.domain.models import TradeSnapshot
from src.pf_trade.application.schemas import (
    BulkUpdateRequest,
    BulkUpdateResponse,
    CreateTradeRequest,
    TradeEdit,
    TradeResponse,
)
from src.pf_trade.domain.repository import TradeRepositoryProtocol
from src.pf_trade.infrastructure.persistence import TradeRepository

logger = logging.getLogger(__name__)


def _scaled(edit: TradeEdit) -> TradeEdit:
    if edit.symbol is None and edit.quantity is None and edit.price is None:
        raise EmptyTradeUpdateError()
    return TradeEdit(
        symbol=edit.symbol,
        quantity=to_quantity_scale(edit.quantity) if edit.quantity is not None else None,
        price=to_amount_scale(edit.price) if edit.price is not None else None,
    )


class TradeService:
    def __init__(
        self,
        repo: TradeRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._repo: TradeRepositoryProtocol = repo or TradeRepository()
        self._accounts = AccountApplicationService(account_repo or AccountRepository())

    async def create_trade(
        self, db: AsyncSession, user_id: str, body: CreateTradeRequest
    ) -> TradeResponse:
        await self._accounts.require_account(db, user_id, body.account_id)
        snapshot = TradeSnapshot(
            symbol=body.symbol,
            trade_date=body.trade_date,
            trade_type=body.trade_type,
            quantity=to_quantity_scale(body.quantity),
            price=to_amount_scale(body.price),
            exchange=body.exchange or None,
            segment=body.segment or None,
            series=body.series or None,
        )
        try:
            trade = await self._repo.insert_manual(db, body.account_id, snapshot)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Manual %s trade %d added to account %d: %s %s @ %s",
            snapshot.trade_type.value, trade.id, body.account_id,
            snapshot.symbol, snapshot.quantity, snapshot.price,
        )
        return TradeResponse.from_domain(trade)

    async def get_trade(self, db: AsyncSession, user_id: str, trade_pk: int) -> TradeResponse:
        trade = await self._repo.get_for_user(db, user_id, trade_pk)
        if trade is None:
            raise TradeNotFoundError(trade_pk)
        return TradeResponse.from_domain(trade)

    async def update_trade(
        self, db: AsyncSession, user_id: str, trade_pk: int, edit: TradeEdit
    ) -> TradeResponse:
        edit = _scaled(edit)
        try:
            trade = await self._repo.update(
                db, user_id, trade_pk, edit.symbol, edit.quantity, edit.price
            )
            if trade is None:
                raise TradeNotFoundError(trade_pk)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return TradeResponse.from_domain(trade)

    async def delete_trade(self, db: AsyncSession, user_id: str, trade_pk: int) -> None:
        try:
            deleted = await self._repo.delete(db, user_id, trade_pk)
            if not deleted:
                raise TradeNotFoundError(trade_pk)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Trade %d deleted", trade_pk)

    async def bulk_update(
        self, db: AsyncSession, user_id: str, body: BulkUpdateRequest
    ) -> BulkUpdateResponse:
        if body.action == BulkTradeAction.RENAME_SYMBOL:
            if not body.old_symbol or not body.new_symbol:
                raise InvalidBulkUpdateError("old_symbol and new_symbol are required")
            if body.account_id is not None:
                await self._accounts.require_account(db, user_id, body.account_id)
        else:
            if not body.trade_ids:
                raise InvalidBulkUpdateError("trade_ids are required")
            if body.updates is None:
                raise InvalidBulkUpdateError("updates are required")
            edit = _scaled(body.updates)

        try:
            if body.action == BulkTradeAction.RENAME_SYMBOL:
                affected = await self._repo.rename_symbol(
                    db, user_id, body.old_symbol, body.new_symbol, body.account_id
                )
            else:
                affected = await self._repo.update_many(
                    db, user_id, body.trade_ids, edit.symbol, edit.quantity, edit.price
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Bulk %s updated %d trades", body.action.value, affected)
        return BulkUpdateResponse(action=body.action.value, affected_rows=affected)
