"""Pydantic schemas for pf_account API."""

from pydantic import BaseModel, Field

from src.pf_account.domain.models import Account


class CreateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    broker_id: str | None = Field(None, max_length=64, description="Broker client code")


class UpdateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    broker_id: str | None = Field(None, max_length=64, description="Broker client code")


class AccountResponse(BaseModel):
    id: int
    name: str
    broker_id: str | None
    last_tradebook_sync: str | None
    last_ledger_sync: str | None
    tradebook_records_count: int
    ledger_records_count: int

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            broker_id=account.broker_id,
            last_tradebook_sync=(
                account.last_tradebook_sync.isoformat() if account.last_tradebook_sync else None
            ),
            last_ledger_sync=(
                account.last_ledger_sync.isoformat() if account.last_ledger_sync else None
            ),
            tradebook_records_count=account.tradebook_records_count,
            ledger_records_count=account.ledger_records_count,
        )


class AccountListResponse(BaseModel):
    items: list[AccountResponse]
