"""Pydantic schemas for pf_import API."""

from pydantic import BaseModel

from src.pf_common.enums import ImportType
from src.pf_import.domain.models import ImportResult


class ImportResponse(BaseModel):
    batch_id: str
    import_type: str
    imported: int
    skipped: int
    conflicts: int
    total: int
    errors: list[str]
    message: str

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResponse":
        noun = "trades" if result.import_type == ImportType.TRADEBOOK else "ledger entries"
        message = f"Imported {result.imported} out of {result.total} {noun}"
        if result.conflicts:
            message += f", {result.conflicts} conflicts need review"
        return cls(
            batch_id=result.batch_id,
            import_type=result.import_type.value,
            imported=result.imported,
            skipped=result.skipped,
            conflicts=result.conflicts,
            total=result.total,
            errors=result.errors,
            message=message,
        )
