"""FIFO settlement planning — pure functions, no I/O.

Given a borrower's outstanding loans and the income available to repay them,
decide which loans receive how much:

  - loans are repaid oldest first: txn_date ascending, then loan id ascending
  - a loan is settled in full while funds cover its outstanding balance
  - the first loan the funds cannot cover gets everything left (partial
    settlement) and planning stops there; later loans are not touched
  - whatever exceeds the total outstanding debt is returned as surplus
"""

from dataclasses import dataclass

from src.sf_common.enums import SettlementType
from src.sf_loan.domain.models import Loan


@dataclass(frozen=True)
class SettlementStep:
    loan: Loan
    amount: int
    settlement_type: SettlementType

    @property
    def fully_settles(self) -> bool:
        return self.amount == self.loan.outstanding


def fifo_order(loans: list[Loan]) -> list[Loan]:
    """Active loans with something outstanding, oldest debt first."""
    candidates = [loan for loan in loans if loan.is_active and loan.outstanding > 0]
    return sorted(candidates, key=lambda loan: (loan.txn_date, loan.id))


def plan_fifo_settlement(
    loans: list[Loan], available: int
) -> tuple[list[SettlementStep], int]:
    """Return (steps, remaining). `remaining` is the unspent surplus."""
    if available < 0:
        raise ValueError(f"Available amount must not be negative, got {available}")
    steps: list[SettlementStep] = []
    remaining = available
    for loan in fifo_order(loans):
        if remaining <= 0:
            break
        outstanding = loan.outstanding
        if remaining >= outstanding:
            steps.append(SettlementStep(loan, outstanding, SettlementType.AUTO))
            remaining -= outstanding
        else:
            steps.append(SettlementStep(loan, remaining, SettlementType.AUTO_PARTIAL))
            remaining = 0
            break
    return steps, remaining
