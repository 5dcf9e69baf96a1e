"""Tests for sf_loan.domain.settlement — loan creation and wallet postings."""

from datetime import date

import pytest

from src.sf_common.errors import SelfLoanError
from src.sf_loan.application.schemas import CrossProjectExpenseRequest
from src.sf_loan.domain.models import ExpenseRecord, PaymentSource
from src.sf_loan.domain.settlement import loan_postings, open_loan, settlement_postings
from src.sf_loan.infrastructure.db_models import CrossProjectTransactionORM
from src.sf_wallet.domain.models import WalletDelta
from src.sf_wallet.domain.postings import merge_deltas


def _expense(beneficiary: str = "B") -> ExpenseRecord:
    return ExpenseRecord(
        id="EX-1",
        project_id=beneficiary,
        expense_type="LABOUR",
        description="Masonry crew",
        amount=10_000,
        expense_date=date(2024, 5, 3),
    )


class TestOpenLoan:
    def test_new_loan_fields(self) -> None:
        loan = open_loan("LN-1", PaymentSource("A", 10_000), _expense())

        assert loan.lender_project_id == "A"
        assert loan.borrower_project_id == "B"
        assert loan.settled_amount == 0
        assert loan.outstanding == 10_000
        assert loan.is_active
        assert loan.txn_date == date(2024, 5, 3)
        assert loan.expense_type == "LABOUR"
        assert loan.description == "Masonry crew - Cross-project payment"

    def test_self_loan_rejected(self) -> None:
        with pytest.raises(SelfLoanError):
            open_loan("LN-1", PaymentSource("B", 10_000), _expense("B"))

    def test_longest_expense_description_fits_loan_column(self) -> None:
        request = CrossProjectExpenseRequest(
            beneficiary_project_id="B",
            payment_sources=[{"project_id": "A", "amount_paise": 10_000}],
            expense_details={
                "description": "x" * 500,
                "total_amount_paise": 10_000,
                "expense_date": "2024-05-03",
            },
        )
        expense = ExpenseRecord(
            id="EX-1",
            project_id=request.beneficiary_project_id,
            expense_type=request.expense_type.value,
            description=request.expense_details.description,
            amount=request.expense_details.total_amount_paise,
            expense_date=request.expense_details.expense_date,
        )

        loan = open_loan("LN-1", PaymentSource("A", 10_000), expense)

        column = CrossProjectTransactionORM.__table__.c.description  # type: ignore[attr-defined]
        assert len(loan.description) <= column.type.length


class TestPostings:
    def test_open_then_repay_in_full_nets_to_zero(self) -> None:
        loan = open_loan("LN-1", PaymentSource("A", 10_000), _expense())

        merged = merge_deltas(loan_postings(loan) + settlement_postings(loan, 10_000))

        assert merged["A"].is_zero
        assert merged["B"].is_zero

    def test_loan_postings_conserve_loan_counters(self) -> None:
        loan = open_loan("LN-1", PaymentSource("A", 7_500), _expense())

        merged = merge_deltas(loan_postings(loan))

        assert merged["A"] == WalletDelta(virtual_balance=-7_500, total_loans_given=7_500)
        assert merged["B"] == WalletDelta(total_loans_received=7_500)
        given = sum(d.total_loans_given for d in merged.values())
        received = sum(d.total_loans_received for d in merged.values())
        assert given == received
