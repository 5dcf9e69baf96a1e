"""Tests for sf_loan.domain.fifo — FIFO settlement planning."""

from datetime import date

import pytest

from src.sf_common.enums import LoanStatus, SettlementType
from src.sf_loan.domain.fifo import fifo_order, plan_fifo_settlement
from src.sf_loan.domain.models import Loan


def _make_loan(
    loan_id: str,
    amount: int,
    txn_date: date,
    settled: int = 0,
    status: str = LoanStatus.ACTIVE.value,
) -> Loan:
    return Loan(
        id=loan_id,
        lender_project_id="A",
        borrower_project_id="B",
        amount=amount,
        settled_amount=settled,
        expense_id="EX-1",
        expense_type="MATERIAL",
        description="Cement - Cross-project payment",
        txn_date=txn_date,
        status=status,
    )


class TestFifoOrder:
    def test_oldest_first(self) -> None:
        newer = _make_loan("LN-2", 100, date(2024, 2, 1))
        older = _make_loan("LN-1", 100, date(2024, 1, 1))
        assert [loan.id for loan in fifo_order([newer, older])] == ["LN-1", "LN-2"]

    def test_same_date_tie_breaks_on_id(self) -> None:
        second = _make_loan("LN-200", 100, date(2024, 1, 1))
        first = _make_loan("LN-100", 100, date(2024, 1, 1))
        assert [loan.id for loan in fifo_order([second, first])] == ["LN-100", "LN-200"]

    def test_skips_settled_loans(self) -> None:
        done = _make_loan("LN-1", 100, date(2024, 1, 1), 100, LoanStatus.SETTLED.value)
        open_ = _make_loan("LN-2", 100, date(2024, 1, 2))
        assert fifo_order([done, open_]) == [open_]


class TestPlanFifoSettlement:
    def test_no_loans_returns_everything(self) -> None:
        steps, remaining = plan_fifo_settlement([], 5_000)
        assert steps == []
        assert remaining == 5_000

    def test_zero_available_plans_nothing(self) -> None:
        steps, remaining = plan_fifo_settlement([_make_loan("LN-1", 100, date(2024, 1, 1))], 0)
        assert steps == []
        assert remaining == 0

    def test_negative_available_raises(self) -> None:
        with pytest.raises(ValueError):
            plan_fifo_settlement([], -1)

    def test_partial_on_single_loan(self) -> None:
        loan = _make_loan("LN-1", 20_000, date(2024, 1, 1))

        steps, remaining = plan_fifo_settlement([loan], 15_000)

        assert len(steps) == 1
        assert steps[0].amount == 15_000
        assert steps[0].settlement_type is SettlementType.AUTO_PARTIAL
        assert not steps[0].fully_settles
        assert remaining == 0

    def test_full_settlement_with_surplus(self) -> None:
        loan = _make_loan("LN-1", 20_000, date(2024, 1, 1), settled=15_000)

        steps, remaining = plan_fifo_settlement([loan], 10_000)

        assert steps[0].amount == 5_000
        assert steps[0].settlement_type is SettlementType.AUTO
        assert steps[0].fully_settles
        assert remaining == 5_000

    def test_older_loan_settled_before_newer(self) -> None:
        older = _make_loan("LN-9", 3_000, date(2024, 1, 1))
        newer = _make_loan("LN-1", 4_000, date(2024, 3, 1))

        steps, remaining = plan_fifo_settlement([newer, older], 5_000)

        assert [(s.loan.id, s.amount, s.settlement_type) for s in steps] == [
            ("LN-9", 3_000, SettlementType.AUTO),
            ("LN-1", 2_000, SettlementType.AUTO_PARTIAL),
        ]
        assert remaining == 0

    def test_stops_after_partial(self) -> None:
        loans = [
            _make_loan("LN-1", 1_000, date(2024, 1, 1)),
            _make_loan("LN-2", 1_000, date(2024, 1, 2)),
            _make_loan("LN-3", 1_000, date(2024, 1, 3)),
        ]

        steps, _ = plan_fifo_settlement(loans, 1_500)

        assert [s.loan.id for s in steps] == ["LN-1", "LN-2"]

    def test_total_planned_never_exceeds_available(self) -> None:
        loans = [_make_loan(f"LN-{i}", 700 + i, date(2024, 1, i + 1)) for i in range(5)]
        for available in [0, 1, 700, 1_401, 3_000, 10_000]:
            steps, remaining = plan_fifo_settlement(loans, available)
            assert sum(s.amount for s in steps) + remaining == available
            assert all(s.amount <= s.loan.outstanding for s in steps)
