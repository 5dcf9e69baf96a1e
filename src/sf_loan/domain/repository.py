"""Repository Protocol for expenses, loans and settlement records."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_loan.domain.models import ExpenseRecord, Loan, SettlementRecord


class LoanRepositoryProtocol(Protocol):
    async def insert_expense(
        self, db: AsyncSession, expense: ExpenseRecord
    ) -> ExpenseRecord: ...

    async def insert_loan(self, db: AsyncSession, loan: Loan) -> Loan: ...

    async def get_loan(
        self, db: AsyncSession, loan_id: str, for_update: bool = False
    ) -> Loan | None: ...

    async def lock_active_loans_for_borrower(
        self, db: AsyncSession, borrower_project_id: str
    ) -> list[Loan]:
        """Active loans of the borrower, row-locked, oldest first."""
        ...

    async def apply_settlement(
        self, db: AsyncSession, loan_id: str, amount: int, expected_version: int
    ) -> Loan | None:
        """Add `amount` to settled_amount. None on version conflict or overflow."""
        ...

    async def insert_settlement(
        self, db: AsyncSession, record: SettlementRecord
    ) -> SettlementRecord: ...

    async def list_loans(
        self,
        db: AsyncSession,
        project_id: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> list[Loan]:
        """Loans touching `project_id` on the given side (either side when role is None)."""
        ...

    async def list_settlements(
        self, db: AsyncSession, transaction_id: str
    ) -> list[SettlementRecord]: ...
