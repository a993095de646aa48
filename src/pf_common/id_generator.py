"""Import batch identifiers.

A batch id groups every row inserted by one CSV upload:
  tb_<24 hex>  tradebook batch
  lg_<24 hex>  ledger batch
"""

import uuid

from src.pf_common.enums import ImportType

_PREFIX = {
    ImportType.TRADEBOOK: "tb",
    ImportType.LEDGER: "lg",
}


def generate_batch_id(import_type: ImportType) -> str:
    """Generate a unique batch id for one import call."""
    return f"{_PREFIX[import_type]}_{uuid.uuid4().hex[:24]}"
