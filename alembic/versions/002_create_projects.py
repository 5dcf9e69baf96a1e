"""002: create projects table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE projects (
            id          VARCHAR(64)  PRIMARY KEY,
            name        VARCHAR(200) NOT NULL,
            created_at  TIMESTAMPTZ  NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("COMMENT ON TABLE projects IS 'Construction projects sharing one bank account';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS projects CASCADE;")
