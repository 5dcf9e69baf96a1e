"""008: create settlement_records table

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settlement_records (
            id                   BIGSERIAL    PRIMARY KEY,
            transaction_id       VARCHAR(64)  NOT NULL REFERENCES cross_project_transactions(id),
            lender_project_id    VARCHAR(64)  NOT NULL,
            borrower_project_id  VARCHAR(64)  NOT NULL,
            settlement_amount    BIGINT       NOT NULL,
            settlement_type      VARCHAR(20)  NOT NULL,
            reference            VARCHAR(100),
            notes                VARCHAR(500),
            settled_at           TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settlement_records_amount_gt_0 CHECK (settlement_amount > 0),
            CONSTRAINT ck_settlement_records_type CHECK (
                settlement_type IN ('AUTO', 'AUTO_PARTIAL', 'MANUAL')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_settlement_records_txn ON settlement_records (transaction_id, id);"
    )
    op.execute("""
        CREATE TRIGGER trg_settlement_records_append_only
            BEFORE UPDATE OR DELETE ON settlement_records
            FOR EACH ROW EXECUTE FUNCTION fn_reject_modification();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settlement_records CASCADE;")
