"""ORM models must mirror the tables the Alembic migrations create."""

from src.sf_allocation.infrastructure.db_models import ClientPaymentORM, PaymentAllocationORM
from src.sf_common.database import Base
from src.sf_loan.infrastructure.db_models import (
    CrossProjectTransactionORM,
    ExpenseORM,
    SettlementRecordORM,
)
from src.sf_project.infrastructure.db_models import ProjectORM
from src.sf_wallet.infrastructure.db_models import ProjectWalletORM


def _columns(model: type) -> set[str]:
    return set(model.__table__.columns.keys())  # type: ignore[attr-defined]


class TestTables:
    def test_all_ledger_tables_registered(self) -> None:
        assert set(Base.metadata.tables) >= {
            "projects",
            "project_wallets",
            "client_payments",
            "payment_allocations",
            "expenses",
            "cross_project_transactions",
            "settlement_records",
        }

    def test_project_columns(self) -> None:
        assert _columns(ProjectORM) == {"id", "name", "created_at"}

    def test_wallet_columns(self) -> None:
        assert _columns(ProjectWalletORM) == {
            "id",
            "project_id",
            "virtual_balance",
            "advance_received",
            "pending_dues",
            "total_loans_given",
            "total_loans_received",
            "version",
            "created_at",
            "last_updated",
        }

    def test_allocation_columns(self) -> None:
        assert "allocation_notes" in _columns(ClientPaymentORM)
        assert {"payment_id", "project_id", "amount"} <= _columns(PaymentAllocationORM)

    def test_loan_columns(self) -> None:
        assert {"payment_sources", "paid_via_cross_project"} <= _columns(ExpenseORM)
        assert {
            "lender_project_id",
            "borrower_project_id",
            "amount",
            "settled_amount",
            "txn_date",
            "status",
            "version",
        } <= _columns(CrossProjectTransactionORM)

    def test_settlement_records_are_append_only(self) -> None:
        # No updated_at: rows are never modified once written
        assert "updated_at" not in _columns(SettlementRecordORM)
        assert "settlement_type" in _columns(SettlementRecordORM)
