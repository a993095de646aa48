"""Pydantic schemas for pf_conflict API."""

from typing import Any

from pydantic import BaseModel, Field

from src.pf_conflict.domain.models import ImportConflict


class ResolveConflictRequest(BaseModel):
    # Kept as a plain string so an unknown token maps to InvalidConflictActionError
    action: str = Field(..., description="keep_existing | use_new | manual_edit | ignore")
    edited_data: dict[str, Any] | None = Field(
        None, description="Replacement values, required for manual_edit"
    )


class ConflictItem(BaseModel):
    id: int
    account_id: int
    account_name: str
    import_type: str
    conflict_type: str
    target_row_id: int
    conflict_field: str | None
    status: str
    existing_data: dict[str, Any]
    new_data: dict[str, Any]
    resolved_at: str | None
    resolved_by: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, c: ImportConflict) -> "ConflictItem":
        return cls(
            id=c.id or 0,
            account_id=c.account_id,
            account_name=c.account_name or "Unknown",
            import_type=c.import_type.value,
            conflict_type=c.conflict_type.value,
            target_row_id=c.target_row_id,
            conflict_field=c.conflict_field,
            status=c.status.value,
            existing_data=c.existing_data.to_json(),
            new_data=c.new_data.to_json(),
            resolved_at=c.resolved_at.isoformat() if c.resolved_at else None,
            resolved_by=c.resolved_by,
            created_at=c.created_at.isoformat() if c.created_at else None,
        )


class ConflictListResponse(BaseModel):
    items: list[ConflictItem]
    total: int


class ResolveConflictResponse(BaseModel):
    conflict_id: int
    status: str
    updated_row_id: int | None
