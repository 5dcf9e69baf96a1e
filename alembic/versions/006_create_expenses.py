"""006: create expenses table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE expenses (
            id                      VARCHAR(64)  PRIMARY KEY,
            project_id              VARCHAR(64)  NOT NULL REFERENCES projects(id),
            expense_type            VARCHAR(20)  NOT NULL,
            description             VARCHAR(500) NOT NULL,
            category                VARCHAR(100),
            amount                  BIGINT       NOT NULL,
            expense_date            DATE         NOT NULL,
            paid_via_cross_project  BOOLEAN      NOT NULL DEFAULT FALSE,
            payment_sources         JSONB        NOT NULL DEFAULT '[]'::jsonb,
            created_at              TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_expenses_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_expenses_type CHECK (expense_type IN ('MATERIAL', 'LABOUR', 'EXPENSE'))
        );
    """)
    op.execute("CREATE INDEX idx_expenses_project ON expenses (project_id, expense_date);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS expenses CASCADE;")
