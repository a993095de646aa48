"""Domain models for pf_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    id: int                          # BIGSERIAL
    user_id: str
    name: str
    broker_id: str | None = None
    last_tradebook_sync: datetime | None = None
    last_ledger_sync: datetime | None = None
    tradebook_records_count: int = 0   # cumulative rows imported, never decremented
    ledger_records_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
