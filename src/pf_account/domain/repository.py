"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.domain.models import Account
from src.pf_common.enums import ImportType


class AccountRepositoryProtocol(Protocol):
    async def get_for_user(
        self, db: AsyncSession, user_id: str, account_id: int
    ) -> Account | None: ...

    async def list_for_user(self, db: AsyncSession, user_id: str) -> list[Account]: ...

    async def create(
        self, db: AsyncSession, user_id: str, name: str, broker_id: str | None
    ) -> Account: ...

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        account_id: int,
        name: str,
        broker_id: str | None,
    ) -> Account | None: ...

    async def delete(self, db: AsyncSession, user_id: str, account_id: int) -> bool: ...

    async def record_sync(
        self, db: AsyncSession, account_id: int, import_type: ImportType, imported: int
    ) -> None: ...
