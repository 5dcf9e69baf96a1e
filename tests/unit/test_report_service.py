"""Unit tests for the Financial Reporter (summaries and overall fund status)."""

from datetime import date

import pytest

from src.sf_allocation.domain.models import AllocationLine
from src.sf_common.errors import ProjectNotFoundError
from src.sf_common.money import rupees
from src.sf_loan.domain.models import ExpenseDetails, Loan, PaymentSource
from src.sf_report.domain.summary import FundStatus, summarize_project


async def _build_fleet(ledger) -> str:
    """A funded with ₹50,000 and lends ₹20,000 to B; C is idle."""
    for pid, name in [("A", "Green Villa"), ("B", "Lake View"), ("C", "Hill Top")]:
        ledger.add_project(pid, name)
    await ledger.allocator.allocate_payment(
        ledger.db,
        total_amount=rupees(50_000),
        allocations=[AllocationLine("A", rupees(50_000))],
        payment_date=date(2024, 4, 1),
    )
    result = await ledger.expenses.record_cross_project_expense(
        ledger.db,
        beneficiary_project_id="B",
        payment_sources=[PaymentSource("A", rupees(20_000))],
        expense_details=ExpenseDetails("Bricks", rupees(20_000), date(2024, 5, 1)),
    )
    return result.loans[0].transaction_id


class TestProjectSummary:
    async def test_lender_summary(self, ledger) -> None:
        await _build_fleet(ledger)

        summary = await ledger.reports.get_project_financial_summary(ledger.db, "A")

        assert summary.project_name == "Green Villa"
        assert summary.virtual_balance_paise == rupees(30_000)
        assert summary.advance_received_paise == rupees(50_000)
        assert summary.active_loans_given_paise == rupees(20_000)
        assert summary.active_loans_received_paise == 0
        assert summary.net_available_balance_paise == rupees(30_000)
        assert summary.total_payments_received_paise == rupees(50_000)
        assert len(summary.loans_given) == 1
        assert summary.loans_received == []

    async def test_borrower_summary(self, ledger) -> None:
        await _build_fleet(ledger)

        summary = await ledger.reports.get_project_financial_summary(ledger.db, "B")

        assert summary.active_loans_received_paise == rupees(20_000)
        assert summary.net_available_balance_paise == -rupees(20_000)
        assert summary.net_available_balance_display == "-₹20,000.00"

    async def test_missing_wallet_reads_as_zero(self, ledger) -> None:
        ledger.add_project("Z")

        summary = await ledger.reports.get_project_financial_summary(ledger.db, "Z")

        assert summary.virtual_balance_paise == 0
        assert summary.total_payments_received_paise == 0
        assert "Z" not in ledger.store.wallets

    async def test_unknown_project(self, ledger) -> None:
        with pytest.raises(ProjectNotFoundError):
            await ledger.reports.get_project_financial_summary(ledger.db, "GHOST")

    async def test_partially_settled_loan_counts_outstanding_only(self, ledger) -> None:
        loan_id = await _build_fleet(ledger)
        await ledger.settlements.settle_cross_project_transaction(
            ledger.db, loan_id, rupees(15_000)
        )

        summary = await ledger.reports.get_project_financial_summary(ledger.db, "A")

        assert summary.active_loans_given_paise == rupees(5_000)


class TestOverallFundStatus:
    async def test_balanced_fleet(self, ledger) -> None:
        await _build_fleet(ledger)

        status = await ledger.reports.get_overall_fund_status(ledger.db)

        assert status.is_balanced
        assert status.total_virtual_balance_paise == rupees(30_000)
        assert status.net_bank_balance_paise == status.total_virtual_balance_paise
        assert status.total_active_loans_paise == rupees(20_000)
        assert [p.project_id for p in status.project_summaries] == ["A", "B", "C"]

    async def test_settled_loans_drop_out(self, ledger) -> None:
        await _build_fleet(ledger)
        await ledger.settlements.auto_settle_loans(ledger.db, "B", rupees(25_000))

        status = await ledger.reports.get_overall_fund_status(ledger.db)

        assert status.is_balanced
        assert status.total_active_loans_paise == 0

    async def test_corrupted_counter_detected(self, ledger) -> None:
        await _build_fleet(ledger)
        ledger.store.wallets["B"].total_loans_received -= 1

        status = await ledger.reports.get_overall_fund_status(ledger.db)

        assert not status.is_balanced


class TestSummaryArithmetic:
    def test_summarize_ignores_settled_loans(self) -> None:
        settled = Loan(
            id="LN-1",
            lender_project_id="A",
            borrower_project_id="B",
            amount=100,
            settled_amount=100,
            expense_id="EX-1",
            expense_type="EXPENSE",
            description="x",
            txn_date=date(2024, 1, 1),
            status="SETTLED",
        )

        summary = summarize_project("A", "A", None, [settled], 0)

        assert summary.active_loans_given == 0
        assert summary.loans_given == []

    def test_empty_fleet_is_balanced(self) -> None:
        status = FundStatus(projects=[])
        assert status.is_balanced
        assert status.total_virtual_balance == 0
