"""003: create project_wallets table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE project_wallets (
            id                    UUID        PRIMARY KEY DEFAULT gen_random_uuid(),
            project_id            VARCHAR(64) NOT NULL REFERENCES projects(id),
            virtual_balance       BIGINT      NOT NULL DEFAULT 0,
            advance_received      BIGINT      NOT NULL DEFAULT 0,
            pending_dues          BIGINT      NOT NULL DEFAULT 0,
            total_loans_given     BIGINT      NOT NULL DEFAULT 0,
            total_loans_received  BIGINT      NOT NULL DEFAULT 0,
            version               BIGINT      NOT NULL DEFAULT 0,
            created_at            TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            last_updated          TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_project_wallets_project_id     UNIQUE (project_id),
            CONSTRAINT ck_project_wallets_given_gte_0    CHECK (total_loans_given >= 0),
            CONSTRAINT ck_project_wallets_received_gte_0 CHECK (total_loans_received >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_project_wallets_last_updated
            BEFORE UPDATE ON project_wallets
            FOR EACH ROW EXECUTE FUNCTION fn_touch_last_updated();
    """)
    op.execute(
        "COMMENT ON TABLE project_wallets IS "
        "'Virtual wallet per project — all amounts in paise';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS project_wallets CASCADE;")
