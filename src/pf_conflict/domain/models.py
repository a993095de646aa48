"""Domain models for pf_conflict — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.pf_common.enums import ConflictStatus, ConflictType, ImportType
from src.pf_import.domain.models import Snapshot


@dataclass
class ImportConflict:
    account_id: int
    import_type: ImportType
    conflict_type: ConflictType
    target_row_id: int               # trades.id / ledger.id resolved at detection time
    existing_data: Snapshot
    new_data: Snapshot
    conflict_field: str | None = None  # comma-separated differing columns
    status: ConflictStatus = ConflictStatus.PENDING
    id: int | None = None            # None until persisted
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    created_at: datetime | None = None
    account_name: str | None = None  # joined for listings only


@dataclass(frozen=True)
class RowUpdate:
    """Column values to write to one trades or ledger row, addressed by primary key."""

    import_type: ImportType
    row_id: int
    values: dict[str, object]
