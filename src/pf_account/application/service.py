"""AccountApplicationService — thin composition layer.

`require_account` is the ownership precondition every import, conflict and
valuation operation runs before touching account data.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.pf_account.application.schemas import AccountListResponse, AccountResponse
from src.pf_account.domain.models import Account
from src.pf_account.domain.repository import AccountRepositoryProtocol
from src.pf_account.infrastructure.persistence import AccountRepository
from src.pf_common.errors import AccountNotFoundError


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def require_account(
        self, db: AsyncSession, user_id: str, account_id: int
    ) -> Account:
        account = await self._repo.get_for_user(db, user_id, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def list_accounts(self, db: AsyncSession, user_id: str) -> AccountListResponse:
        accounts = await self._repo.list_for_user(db, user_id)
        return AccountListResponse(items=[AccountResponse.from_domain(a) for a in accounts])

    async def create_account(
        self, db: AsyncSession, user_id: str, name: str, broker_id: str | None
    ) -> AccountResponse:
        try:
            account = await self._repo.create(db, user_id, name, broker_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AccountResponse.from_domain(account)

    async def delete_account(self, db: AsyncSession, user_id: str, account_id: int) -> None:
        try:
            deleted = await self._repo.delete(db, user_id, account_id)
            if not deleted:
                raise AccountNotFoundError(account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def get_account(self, db: AsyncSession, user_id: str, account_id: int) -> AccountResponse:
        return AccountResponse.from_domain(await self.require_account(db, user_id, account_id))

    async def update_account(
        self, db: AsyncSession, user_id: str, account_id: int, name: str, broker_id: str | None
    ) -> AccountResponse:
        try:
            account = await self._repo.update(db, user_id, account_id, name, broker_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AccountResponse.from_domain(account)
