"""ConflictRepository Protocol — interface contract for persistence layer."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_common.enums import ConflictStatus
from src.pf_conflict.domain.models import ImportConflict, RowUpdate


class ConflictRepositoryProtocol(Protocol):
    async def create(self, db: AsyncSession, conflict: ImportConflict) -> int: ...

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int | None,
        status: ConflictStatus | None,
    ) -> list[ImportConflict]: ...

    async def get_for_update(
        self, db: AsyncSession, user_id: str, conflict_id: int
    ) -> ImportConflict | None: ...

    async def apply_row_update(
        self, db: AsyncSession, account_id: int, update: RowUpdate
    ) -> int: ...

    async def mark_resolved(
        self, db: AsyncSession, conflict_id: int, status: ConflictStatus, resolved_by: str
    ) -> None: ...

    async def delete(self, db: AsyncSession, user_id: str, conflict_id: int) -> bool: ...
