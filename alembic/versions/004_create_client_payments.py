"""004: create client_payments table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE client_payments (
            id                VARCHAR(64)  PRIMARY KEY,
            project_id        VARCHAR(64)  NOT NULL,
            amount            BIGINT       NOT NULL,
            payment_date      DATE         NOT NULL,
            received_by       VARCHAR(200),
            payer             VARCHAR(200),
            method            VARCHAR(30),
            notes             VARCHAR(500),
            is_multi_project  BOOLEAN      NOT NULL DEFAULT FALSE,
            is_allocated      BOOLEAN      NOT NULL DEFAULT FALSE,
            allocation_date   DATE,
            allocation_notes  VARCHAR(500),
            created_at        TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_client_payments_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_client_payments_method CHECK (
                method IS NULL OR method IN ('CASH', 'BANK_TRANSFER', 'CHEQUE', 'UPI', 'OTHER')
            )
        );
    """)
    op.execute("CREATE INDEX idx_client_payments_project ON client_payments (project_id);")
    # project_id is 'MULTI_PROJECT' for split payments, so no FK to projects


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS client_payments CASCADE;")
