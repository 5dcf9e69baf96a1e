"""Unit tests for CrossProjectExpenseService against the in-memory store."""

from datetime import date

import pytest

from src.sf_allocation.domain.models import AllocationLine
from src.sf_common.errors import AllocationMismatchError, ProjectNotFoundError, ValidationError
from src.sf_common.money import rupees
from src.sf_loan.domain.models import ExpenseDetails, PaymentSource

SPENT_ON = date(2024, 5, 10)


async def _fund(ledger, project_id: str, amount: int) -> None:
    await ledger.allocator.allocate_payment(
        ledger.db,
        total_amount=amount,
        allocations=[AllocationLine(project_id, amount)],
        payment_date=date(2024, 4, 1),
    )


def _details(total: int, description: str = "Cement bags") -> ExpenseDetails:
    return ExpenseDetails(description=description, total_amount=total, expense_date=SPENT_ON)


class TestRecordCrossProjectExpense:
    async def test_scenario_a_creates_loan_and_moves_counters(self, ledger) -> None:
        ledger.add_project("A")
        ledger.add_project("B")
        await _fund(ledger, "A", rupees(50_000))

        result = await ledger.expenses.record_cross_project_expense(
            ledger.db,
            beneficiary_project_id="B",
            payment_sources=[PaymentSource("A", rupees(20_000))],
            expense_details=_details(rupees(20_000)),
            expense_type="MATERIAL",
        )

        assert result.expense.paid_via_cross_project
        assert result.expense.project_id == "B"
        assert len(result.loans) == 1
        loan = result.loans[0]
        assert loan.lender_project_id == "A"
        assert loan.borrower_project_id == "B"
        assert loan.amount_paise == rupees(20_000)
        assert loan.settled_amount_paise == 0
        assert loan.status == "ACTIVE"
        assert loan.description == "Cement bags - Cross-project payment"
        assert loan.txn_date == SPENT_ON.isoformat()

        a, b = ledger.wallet("A"), ledger.wallet("B")
        assert a.virtual_balance == rupees(30_000)
        assert a.total_loans_given == rupees(20_000)
        assert b.total_loans_received == rupees(20_000)
        assert b.virtual_balance == 0

    async def test_self_funded_share_creates_no_loan(self, ledger) -> None:
        ledger.add_project("A")
        ledger.add_project("B")

        result = await ledger.expenses.record_cross_project_expense(
            ledger.db,
            beneficiary_project_id="B",
            payment_sources=[PaymentSource("B", 3_000), PaymentSource("A", 7_000)],
            expense_details=_details(10_000),
        )

        assert [loan.lender_project_id for loan in result.loans] == ["A"]
        assert len(result.expense.payment_sources) == 2
        assert ledger.wallet("B").virtual_balance == 0
        assert ledger.wallet("B").total_loans_received == 7_000

    async def test_multiple_lenders(self, ledger) -> None:
        for pid in ["A", "B", "C"]:
            ledger.add_project(pid)

        result = await ledger.expenses.record_cross_project_expense(
            ledger.db,
            beneficiary_project_id="C",
            payment_sources=[PaymentSource("A", 4_000), PaymentSource("B", 6_000)],
            expense_details=_details(10_000),
            expense_type="LABOUR",
        )

        assert len(result.loans) == 2
        assert ledger.wallet("C").total_loans_received == 10_000
        given = ledger.wallet("A").total_loans_given + ledger.wallet("B").total_loans_given
        assert given == 10_000
        assert ledger.store.lock_calls[-1] == ["A", "B", "C"]

    async def test_source_mismatch_rejected_without_mutation(self, ledger) -> None:
        ledger.add_project("A")
        ledger.add_project("B")

        with pytest.raises(AllocationMismatchError):
            await ledger.expenses.record_cross_project_expense(
                ledger.db,
                beneficiary_project_id="B",
                payment_sources=[PaymentSource("A", 9_999)],
                expense_details=_details(10_000),
            )

        assert ledger.store.expenses == {}
        assert ledger.store.loans == {}
        assert ledger.store.wallets == {}

    async def test_unknown_expense_type_rejected(self, ledger) -> None:
        with pytest.raises(ValidationError, match="expense type"):
            await ledger.expenses.record_cross_project_expense(
                ledger.db,
                beneficiary_project_id="B",
                payment_sources=[PaymentSource("A", 100)],
                expense_details=_details(100),
                expense_type="FUEL",
            )

    async def test_unknown_lender_project(self, ledger) -> None:
        ledger.add_project("B")
        with pytest.raises(ProjectNotFoundError):
            await ledger.expenses.record_cross_project_expense(
                ledger.db,
                beneficiary_project_id="B",
                payment_sources=[PaymentSource("GHOST", 100)],
                expense_details=_details(100),
            )
        assert ledger.store.loans == {}
