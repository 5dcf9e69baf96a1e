"""Repository Protocol for client payments and their allocations."""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_allocation.domain.models import ClientPayment, PaymentAllocation


class AllocationRepositoryProtocol(Protocol):
    async def insert_payment(
        self, db: AsyncSession, payment: ClientPayment
    ) -> ClientPayment: ...

    async def get_payment(
        self, db: AsyncSession, payment_id: str, for_update: bool = False
    ) -> ClientPayment | None: ...

    async def mark_allocated(
        self, db: AsyncSession, payment_id: str, allocation_date: date, notes: str | None
    ) -> ClientPayment: ...

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> None: ...

    async def insert_allocation(
        self, db: AsyncSession, allocation: PaymentAllocation
    ) -> PaymentAllocation: ...

    async def list_allocations_by_payment(
        self, db: AsyncSession, payment_id: str
    ) -> list[PaymentAllocation]: ...

    async def list_allocations_by_project(
        self, db: AsyncSession, project_id: str
    ) -> list[PaymentAllocation]: ...

    async def delete_allocations(self, db: AsyncSession, payment_id: str) -> int: ...
