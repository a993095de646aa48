"""006: create import_conflicts table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE import_conflicts (
            id                  BIGSERIAL       PRIMARY KEY,
            account_id          BIGINT          NOT NULL
                REFERENCES accounts (id) ON DELETE CASCADE,
            import_type         VARCHAR(16)     NOT NULL,
            conflict_type       VARCHAR(64)     NOT NULL,
            target_row_id       BIGINT          NOT NULL,
            existing_data       JSONB           NOT NULL,
            new_data            JSONB           NOT NULL,
            conflict_field      VARCHAR(255),
            status              VARCHAR(32)     NOT NULL DEFAULT 'pending',
            resolved_at         TIMESTAMPTZ,
            resolved_by         VARCHAR(64),
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_import_conflicts_import_type
                CHECK (import_type IN ('tradebook', 'ledger')),
            CONSTRAINT ck_import_conflicts_conflict_type
                CHECK (conflict_type IN ('duplicate_trade_id', 'duplicate_entry_different_amount')),
            CONSTRAINT ck_import_conflicts_status
                CHECK (status IN ('pending', 'resolved_keep_existing', 'resolved_use_new',
                                  'resolved_manual', 'ignored')),
            CONSTRAINT ck_import_conflicts_resolved_at
                CHECK ((status = 'pending') = (resolved_at IS NULL))
        );
    """)
    op.execute("""
        CREATE INDEX idx_import_conflicts_account_status
            ON import_conflicts (account_id, status, created_at DESC);
    """)
    op.execute(
        "COMMENT ON TABLE import_conflicts IS "
        "'Re-imported rows that disagree with a stored row, awaiting resolution';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS import_conflicts CASCADE;")
