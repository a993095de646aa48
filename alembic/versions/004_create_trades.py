"""004: create trades table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE trades (
            id                      BIGSERIAL       PRIMARY KEY,
            account_id              BIGINT          NOT NULL
                REFERENCES accounts (id) ON DELETE CASCADE,
            symbol                  VARCHAR(64)     NOT NULL,
            isin                    VARCHAR(32),
            trade_date              DATE            NOT NULL,
            exchange                VARCHAR(16),
            segment                 VARCHAR(16),
            series                  VARCHAR(16),
            trade_type              VARCHAR(4)      NOT NULL,
            auction                 BOOLEAN         NOT NULL DEFAULT FALSE,
            quantity                NUMERIC(18, 6)  NOT NULL,
            price                   NUMERIC(18, 4)  NOT NULL,
            trade_id                VARCHAR(64),
            order_id                VARCHAR(64),
            order_execution_time    TIMESTAMP,
            import_batch_id         VARCHAR(32),
            import_date             TIMESTAMPTZ,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_trades_trade_type     CHECK (trade_type IN ('buy', 'sell')),
            CONSTRAINT ck_trades_quantity_gt_0  CHECK (quantity > 0),
            CONSTRAINT ck_trades_price_gt_0     CHECK (price > 0),
            CONSTRAINT ck_trades_symbol_upper   CHECK (symbol = UPPER(symbol))
        );
    """)
    # Broker trade ids are unique per account; rows without one are never matched
    op.execute("""
        CREATE UNIQUE INDEX uq_trades_account_trade_id
            ON trades (account_id, trade_id)
            WHERE trade_id IS NOT NULL;
    """)
    op.execute("CREATE INDEX idx_trades_account_symbol_date ON trades (account_id, symbol, trade_date);")
    op.execute("COMMENT ON TABLE trades IS 'Executed trades imported from broker tradebook CSVs';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS trades CASCADE;")
