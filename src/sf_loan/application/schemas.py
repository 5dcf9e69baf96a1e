"""Pydantic schemas for cross-project expenses, loans and settlements."""

from datetime import date

from pydantic import BaseModel, Field

from src.sf_common.enums import ExpenseType, SettlementType
from src.sf_common.money import MAX_AMOUNT_PAISE, paise_to_display
from src.sf_loan.domain.models import ExpenseRecord, Loan, PaymentSource, SettlementRecord
from src.sf_wallet.application.schemas import BalanceResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PaymentSourceIn(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=64)
    amount_paise: int = Field(..., gt=0, le=MAX_AMOUNT_PAISE)

    def to_domain(self) -> PaymentSource:
        return PaymentSource(project_id=self.project_id, amount=self.amount_paise)


class ExpenseDetailsIn(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    category: str | None = Field(None, max_length=100)
    total_amount_paise: int = Field(..., gt=0, le=MAX_AMOUNT_PAISE)
    expense_date: date


class CrossProjectExpenseRequest(BaseModel):
    beneficiary_project_id: str = Field(..., min_length=1, max_length=64)
    expense_type: ExpenseType = ExpenseType.EXPENSE
    payment_sources: list[PaymentSourceIn] = Field(..., min_length=1)
    expense_details: ExpenseDetailsIn


class AutoSettleRequest(BaseModel):
    borrower_project_id: str = Field(..., min_length=1, max_length=64)
    available_amount_paise: int = Field(
        ..., ge=0, le=MAX_AMOUNT_PAISE, description="Income available for repayment"
    )


class ManualSettleRequest(BaseModel):
    settlement_amount_paise: int = Field(..., gt=0, le=MAX_AMOUNT_PAISE)
    settlement_type: SettlementType = SettlementType.MANUAL
    reference: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PaymentSourceOut(BaseModel):
    project_id: str
    amount_paise: int


class ExpenseResponse(BaseModel):
    expense_id: str
    project_id: str
    expense_type: str
    description: str
    category: str | None
    amount_paise: int
    amount_display: str
    expense_date: str
    paid_via_cross_project: bool
    payment_sources: list[PaymentSourceOut]

    @classmethod
    def from_domain(cls, e: ExpenseRecord) -> "ExpenseResponse":
        return cls(
            expense_id=e.id,
            project_id=e.project_id,
            expense_type=e.expense_type,
            description=e.description,
            category=e.category,
            amount_paise=e.amount,
            amount_display=paise_to_display(e.amount),
            expense_date=e.expense_date.isoformat(),
            paid_via_cross_project=e.paid_via_cross_project,
            payment_sources=[
                PaymentSourceOut(project_id=s.project_id, amount_paise=s.amount)
                for s in e.payment_sources
            ],
        )


class LoanResponse(BaseModel):
    transaction_id: str
    lender_project_id: str
    borrower_project_id: str
    amount_paise: int
    settled_amount_paise: int
    outstanding_paise: int
    outstanding_display: str
    expense_id: str
    expense_type: str
    description: str
    txn_date: str
    status: str
    last_settlement_at: str | None
    settled_at: str | None

    @classmethod
    def from_domain(cls, loan: Loan) -> "LoanResponse":
        return cls(
            transaction_id=loan.id,
            lender_project_id=loan.lender_project_id,
            borrower_project_id=loan.borrower_project_id,
            amount_paise=loan.amount,
            settled_amount_paise=loan.settled_amount,
            outstanding_paise=loan.outstanding,
            outstanding_display=paise_to_display(loan.outstanding),
            expense_id=loan.expense_id,
            expense_type=loan.expense_type,
            description=loan.description,
            txn_date=loan.txn_date.isoformat(),
            status=loan.status,
            last_settlement_at=(
                loan.last_settlement_at.isoformat() if loan.last_settlement_at else None
            ),
            settled_at=loan.settled_at.isoformat() if loan.settled_at else None,
        )


class CrossProjectExpenseResponse(BaseModel):
    expense: ExpenseResponse
    loans: list[LoanResponse]
    balances: list[BalanceResponse]


class SettlementResponse(BaseModel):
    settlement_id: int
    transaction_id: str
    lender_project_id: str
    borrower_project_id: str
    settlement_amount_paise: int
    settlement_amount_display: str
    settlement_type: str
    reference: str | None
    notes: str | None
    settled_at: str | None

    @classmethod
    def from_domain(cls, r: SettlementRecord) -> "SettlementResponse":
        return cls(
            settlement_id=r.id,
            transaction_id=r.transaction_id,
            lender_project_id=r.lender_project_id,
            borrower_project_id=r.borrower_project_id,
            settlement_amount_paise=r.settlement_amount,
            settlement_amount_display=paise_to_display(r.settlement_amount),
            settlement_type=r.settlement_type,
            reference=r.reference,
            notes=r.notes,
            settled_at=r.settled_at.isoformat() if r.settled_at else None,
        )


class SettledLoanItem(BaseModel):
    transaction_id: str
    lender_project_id: str
    settlement_amount_paise: int
    settlement_type: str
    remaining_balance_paise: int
    fully_settled: bool


class AutoSettleResponse(BaseModel):
    borrower_project_id: str
    settled_loans: list[SettledLoanItem]
    remaining_amount_paise: int
    remaining_amount_display: str
    balances: list[BalanceResponse]


class ManualSettleResponse(BaseModel):
    transaction_id: str
    settlement_amount_paise: int
    remaining_balance_paise: int
    fully_settled: bool
    settlement: SettlementResponse
    balances: list[BalanceResponse]


class LoanListResponse(BaseModel):
    items: list[LoanResponse]
    total_outstanding_paise: int
    total_outstanding_display: str


class SettlementListResponse(BaseModel):
    transaction_id: str
    items: list[SettlementResponse]
    total_settled_paise: int
