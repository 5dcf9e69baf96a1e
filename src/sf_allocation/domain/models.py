"""Domain models for sf_allocation — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class ClientPayment:
    id: str
    project_id: str                  # MULTI_PROJECT marker for split payments
    amount: int                      # paise
    payment_date: date
    received_by: str | None = None
    payer: str | None = None
    method: str | None = None
    notes: str | None = None
    is_multi_project: bool = False
    is_allocated: bool = False
    allocation_date: date | None = None
    allocation_notes: str | None = None
    created_at: datetime | None = None


@dataclass
class PaymentAllocation:
    id: str
    payment_id: str
    project_id: str
    amount: int                      # paise, > 0
    description: str
    allocation_date: date
    created_at: datetime | None = None


@dataclass(frozen=True)
class AllocationLine:
    """One requested slice of a payment: how much goes to which project."""

    project_id: str
    amount: int
    description: str | None = None
