"""Domain models for sf_loan — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import date, datetime

from src.sf_common.enums import LoanStatus


@dataclass(frozen=True)
class PaymentSource:
    """A project that paid part of an expense."""

    project_id: str
    amount: int                      # paise


@dataclass(frozen=True)
class ExpenseDetails:
    description: str
    total_amount: int                # paise
    expense_date: date
    category: str | None = None


@dataclass
class ExpenseRecord:
    id: str
    project_id: str                  # beneficiary
    expense_type: str                # ExpenseType value
    description: str
    amount: int                      # paise
    expense_date: date
    category: str | None = None
    paid_via_cross_project: bool = False
    payment_sources: list[PaymentSource] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass
class Loan:
    """A cross-project transaction: lender's funds paid the borrower's expense."""

    id: str
    lender_project_id: str
    borrower_project_id: str
    amount: int                      # paise, principal, never changes
    settled_amount: int              # paise, 0 <= settled_amount <= amount
    expense_id: str
    expense_type: str
    description: str
    txn_date: date                   # FIFO key
    status: str = LoanStatus.ACTIVE.value
    version: int = 0
    last_settlement_at: datetime | None = None
    settled_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def outstanding(self) -> int:
        return self.amount - self.settled_amount

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE


@dataclass
class SettlementRecord:
    id: int                          # BIGSERIAL
    transaction_id: str
    lender_project_id: str
    borrower_project_id: str
    settlement_amount: int           # paise, > 0
    settlement_type: str             # SettlementType value
    reference: str | None = None
    notes: str | None = None
    settled_at: datetime | None = None
