"""007: create cross_project_transactions table

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE cross_project_transactions (
            id                   VARCHAR(64)  PRIMARY KEY,
            lender_project_id    VARCHAR(64)  NOT NULL REFERENCES projects(id),
            borrower_project_id  VARCHAR(64)  NOT NULL REFERENCES projects(id),
            amount               BIGINT       NOT NULL,
            settled_amount       BIGINT       NOT NULL DEFAULT 0,
            expense_id           VARCHAR(64)  NOT NULL REFERENCES expenses(id),
            expense_type         VARCHAR(20)  NOT NULL,
            description          VARCHAR(600) NOT NULL,
            txn_date             DATE         NOT NULL,
            status               VARCHAR(20)  NOT NULL DEFAULT 'ACTIVE',
            version              BIGINT       NOT NULL DEFAULT 0,
            last_settlement_at   TIMESTAMPTZ,
            settled_at           TIMESTAMPTZ,
            created_at           TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_cpt_amount_gt_0        CHECK (amount > 0),
            CONSTRAINT ck_cpt_not_self           CHECK (lender_project_id <> borrower_project_id),
            CONSTRAINT ck_cpt_settled_bounds     CHECK (settled_amount >= 0 AND settled_amount <= amount),
            CONSTRAINT ck_cpt_status             CHECK (status IN ('ACTIVE', 'SETTLED')),
            CONSTRAINT ck_cpt_status_consistent  CHECK (
                (status = 'SETTLED') = (settled_amount = amount)
            )
        );
    """)
    # FIFO settlement scans a borrower's ACTIVE loans oldest first
    op.execute("""
        CREATE INDEX idx_cpt_borrower_active
            ON cross_project_transactions (borrower_project_id, txn_date, id)
            WHERE status = 'ACTIVE';
    """)
    op.execute("CREATE INDEX idx_cpt_lender ON cross_project_transactions (lender_project_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS cross_project_transactions CASCADE;")
