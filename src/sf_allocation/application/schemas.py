"""Pydantic schemas for client payments and the Payment Allocator."""

from datetime import date

from pydantic import BaseModel, Field

from src.sf_allocation.domain.models import AllocationLine, ClientPayment, PaymentAllocation
from src.sf_common.enums import PaymentMethod
from src.sf_common.money import MAX_AMOUNT_PAISE, paise_to_display
from src.sf_wallet.application.schemas import BalanceResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AllocationLineIn(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=64)
    amount_paise: int = Field(
        ..., gt=0, le=MAX_AMOUNT_PAISE, description="Share of the payment in paise"
    )
    description: str | None = Field(None, max_length=500)

    def to_domain(self) -> AllocationLine:
        return AllocationLine(
            project_id=self.project_id,
            amount=self.amount_paise,
            description=self.description,
        )


class RecordPaymentRequest(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=64)
    amount_paise: int = Field(..., gt=0, le=MAX_AMOUNT_PAISE)
    payment_date: date
    received_by: str | None = Field(None, max_length=200)
    payer: str | None = Field(None, max_length=200, description="Who the money came from")
    method: PaymentMethod | None = None
    notes: str | None = Field(None, max_length=500)


class AllocatePaymentRequest(BaseModel):
    total_amount_paise: int = Field(..., gt=0, le=MAX_AMOUNT_PAISE)
    allocations: list[AllocationLineIn] = Field(..., min_length=1)
    payment_date: date
    received_by: str | None = Field(None, max_length=200)
    payer: str | None = Field(None, max_length=200)
    method: PaymentMethod | None = None
    notes: str | None = Field(None, max_length=500)


class AllocateExistingPaymentRequest(BaseModel):
    allocations: list[AllocationLineIn] = Field(..., min_length=1)
    allocation_date: date | None = Field(None, description="Defaults to the payment date")
    notes: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PaymentResponse(BaseModel):
    payment_id: str
    project_id: str
    amount_paise: int
    amount_display: str
    payment_date: str
    received_by: str | None
    payer: str | None
    method: str | None
    notes: str | None
    is_multi_project: bool
    is_allocated: bool
    allocation_date: str | None

    @classmethod
    def from_domain(cls, p: ClientPayment) -> "PaymentResponse":
        return cls(
            payment_id=p.id,
            project_id=p.project_id,
            amount_paise=p.amount,
            amount_display=paise_to_display(p.amount),
            payment_date=p.payment_date.isoformat(),
            received_by=p.received_by,
            payer=p.payer,
            method=p.method,
            notes=p.notes,
            is_multi_project=p.is_multi_project,
            is_allocated=p.is_allocated,
            allocation_date=p.allocation_date.isoformat() if p.allocation_date else None,
        )


class AllocationItem(BaseModel):
    allocation_id: str
    payment_id: str
    project_id: str
    amount_paise: int
    amount_display: str
    description: str
    allocation_date: str

    @classmethod
    def from_domain(cls, a: PaymentAllocation) -> "AllocationItem":
        return cls(
            allocation_id=a.id,
            payment_id=a.payment_id,
            project_id=a.project_id,
            amount_paise=a.amount,
            amount_display=paise_to_display(a.amount),
            description=a.description,
            allocation_date=a.allocation_date.isoformat(),
        )


class AllocationResultResponse(BaseModel):
    payment: PaymentResponse
    allocations: list[AllocationItem]
    balances: list[BalanceResponse]


class PaymentDeletionResponse(BaseModel):
    payment_id: str
    reversed_allocations: list[AllocationItem]
    reversed_total_paise: int
    balances: list[BalanceResponse]


class AllocationListResponse(BaseModel):
    project_id: str
    items: list[AllocationItem]
    total_paise: int
    total_display: str
