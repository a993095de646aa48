"""003: create accounts table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id                          BIGSERIAL       PRIMARY KEY,
            user_id                     UUID            NOT NULL
                REFERENCES users (id) ON DELETE CASCADE,
            name                        VARCHAR(128)    NOT NULL,
            broker_id                   VARCHAR(64),
            last_tradebook_sync         TIMESTAMPTZ,
            last_ledger_sync            TIMESTAMPTZ,
            tradebook_records_count     INTEGER         NOT NULL DEFAULT 0,
            ledger_records_count        INTEGER         NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_name_not_blank   CHECK (LENGTH(TRIM(name)) > 0)
        );
    """)
    op.execute("CREATE INDEX idx_accounts_user_id ON accounts (user_id);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Broker accounts; owner of trades, ledger and import_conflicts';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
