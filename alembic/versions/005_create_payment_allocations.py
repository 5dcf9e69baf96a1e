"""005: create payment_allocations table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_allocations (
            id               VARCHAR(64)  PRIMARY KEY,
            payment_id       VARCHAR(64)  NOT NULL REFERENCES client_payments(id),
            project_id       VARCHAR(64)  NOT NULL REFERENCES projects(id),
            amount           BIGINT       NOT NULL,
            description      VARCHAR(500) NOT NULL,
            allocation_date  DATE         NOT NULL,
            created_at       TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_payment_allocations_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_payment_allocations_payment ON payment_allocations (payment_id);")
    op.execute("CREATE INDEX idx_payment_allocations_project ON payment_allocations (project_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_allocations CASCADE;")
