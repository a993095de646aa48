"""005: create ledger table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger (
            id                  BIGSERIAL       PRIMARY KEY,
            account_id          BIGINT          NOT NULL
                REFERENCES accounts (id) ON DELETE CASCADE,
            particular          TEXT,
            posting_date        DATE            NOT NULL,
            cost_center         VARCHAR(128),
            voucher_type        VARCHAR(128),
            debit               NUMERIC(18, 4)  NOT NULL DEFAULT 0,
            credit              NUMERIC(18, 4)  NOT NULL DEFAULT 0,
            net_balance         NUMERIC(18, 4),
            import_batch_id     VARCHAR(32),
            import_date         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_debit_gte_0    CHECK (debit >= 0),
            CONSTRAINT ck_ledger_credit_gte_0   CHECK (credit >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_account_posting ON ledger (account_id, posting_date);")
    op.execute("COMMENT ON TABLE ledger IS 'Cash ledger entries imported from broker ledger CSVs';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger CASCADE;")
