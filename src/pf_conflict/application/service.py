"""ConflictService — list, resolve and delete import conflicts.

resolve() runs the state machine inside one transaction: the conflict row is
locked (SELECT ... FOR UPDATE), the target trade/ledger row is rewritten by
primary key, and the conflict is closed. Either all of it commits or none.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import ConflictStatus
from src.pf_common.errors import ConflictNotFoundError, ConflictTargetMissingError
from src.pf_conflict.application.schemas import (
    ConflictItem,
    ConflictListResponse,
    ResolveConflictResponse,
)
from src.pf_conflict.domain.repository import ConflictRepositoryProtocol
from src.pf_conflict.domain.state_machine import next_status, parse_action, plan_row_update
from src.pf_conflict.infrastructure.persistence import ConflictRepository

logger = logging.getLogger(__name__)


class ConflictService:
    def __init__(self, repo: ConflictRepositoryProtocol | None = None) -> None:
        self._repo: ConflictRepositoryProtocol = repo or ConflictRepository()

    async def list_conflicts(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None = None,
        status: ConflictStatus | None = ConflictStatus.PENDING,
    ) -> ConflictListResponse:
        conflicts = await self._repo.list_for_user(db, user_id, account_id, status)
        items = [ConflictItem.from_domain(c) for c in conflicts]
        return ConflictListResponse(items=items, total=len(items))

    async def resolve(
        self,
        db: AsyncSession,
        user_id: str,
        conflict_id: int,
        action: str,
        edited_data: dict[str, Any] | None = None,
        resolved_by: str | None = None,
    ) -> ResolveConflictResponse:
        parsed_action = parse_action(action)
        try:
            conflict = await self._repo.get_for_update(db, user_id, conflict_id)
            if conflict is None:
                raise ConflictNotFoundError(conflict_id)
            status = next_status(conflict, parsed_action)
            update = plan_row_update(conflict, parsed_action, edited_data)
            if update is not None:
                affected = await self._repo.apply_row_update(db, conflict.account_id, update)
                if affected == 0:
                    raise ConflictTargetMissingError(conflict_id)
            await self._repo.mark_resolved(db, conflict_id, status, resolved_by or user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "Conflict %d resolved: action=%s status=%s row=%s",
            conflict_id,
            parsed_action.value,
            status.value,
            update.row_id if update else None,
        )
        return ResolveConflictResponse(
            conflict_id=conflict_id,
            status=status.value,
            updated_row_id=update.row_id if update else None,
        )

    async def delete(self, db: AsyncSession, user_id: str, conflict_id: int) -> None:
        try:
            deleted = await self._repo.delete(db, user_id, conflict_id)
            if not deleted:
                raise ConflictNotFoundError(conflict_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
