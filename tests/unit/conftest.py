"""In-memory repositories conforming to the repository Protocols.

Every fake shares one InMemoryStore so services wired together in a test see
the same projects, wallets, payments and loans, the way they would share one
PostgreSQL database.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from src.sf_allocation.application.service import AllocationApplicationService
from src.sf_allocation.domain.models import ClientPayment, PaymentAllocation
from src.sf_common.enums import LoanRole, LoanStatus
from src.sf_common.errors import PaymentNotFoundError, WalletNotFoundError
from src.sf_loan.application.expense_service import CrossProjectExpenseService
from src.sf_loan.application.settlement_service import SettlementApplicationService
from src.sf_loan.domain.models import ExpenseRecord, Loan, SettlementRecord
from src.sf_project.domain.models import Project
from src.sf_report.application.service import FinancialReportService
from src.sf_wallet.application.service import WalletApplicationService
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta


@dataclass
class InMemoryStore:
    projects: dict[str, Project] = field(default_factory=dict)
    wallets: dict[str, ProjectWallet] = field(default_factory=dict)
    payments: dict[str, ClientPayment] = field(default_factory=dict)
    allocations: list[PaymentAllocation] = field(default_factory=list)
    expenses: dict[str, ExpenseRecord] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)
    settlements: list[SettlementRecord] = field(default_factory=list)
    lock_calls: list[list[str]] = field(default_factory=list)


class FakeProjectRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create_project(self, db: object, project_id: str, name: str) -> Project | None:
        if project_id in self.store.projects:
            return None
        project = Project(id=project_id, name=name, created_at=datetime.now(UTC))
        self.store.projects[project_id] = project
        return project

    async def get_project(self, db: object, project_id: str) -> Project | None:
        return self.store.projects.get(project_id)

    async def list_projects(self, db: object) -> list[Project]:
        return [self.store.projects[pid] for pid in sorted(self.store.projects)]


class FakeWalletRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def ensure_wallet(self, db: object, project_id: str) -> ProjectWallet | None:
        if project_id not in self.store.projects:
            return None
        if project_id not in self.store.wallets:
            self.store.wallets[project_id] = ProjectWallet(
                id=f"wallet-{project_id}",
                project_id=project_id,
                virtual_balance=0,
                advance_received=0,
                pending_dues=0,
                total_loans_given=0,
                total_loans_received=0,
                version=0,
                created_at=datetime.now(UTC),
                last_updated=datetime.now(UTC),
            )
        return replace(self.store.wallets[project_id])

    async def get_wallet(self, db: object, project_id: str) -> ProjectWallet | None:
        wallet = self.store.wallets.get(project_id)
        return replace(wallet) if wallet else None

    async def lock_wallets(self, db: object, project_ids: list[str]) -> dict[str, ProjectWallet]:
        self.store.lock_calls.append(list(project_ids))
        for project_id in project_ids:
            if project_id not in self.store.wallets:
                raise WalletNotFoundError(project_id)
        return {pid: replace(self.store.wallets[pid]) for pid in project_ids}

    async def apply_delta(self, db: object, project_id: str, delta: WalletDelta) -> ProjectWallet:
        wallet = self.store.wallets.get(project_id)
        if wallet is None:
            raise WalletNotFoundError(project_id)
        updated = replace(
            wallet,
            virtual_balance=wallet.virtual_balance + delta.virtual_balance,
            advance_received=wallet.advance_received + delta.advance_received,
            total_loans_given=wallet.total_loans_given + delta.total_loans_given,
            total_loans_received=wallet.total_loans_received + delta.total_loans_received,
            version=wallet.version + 1,
            last_updated=datetime.now(UTC),
        )
        self.store.wallets[project_id] = updated
        return replace(updated)

    async def list_wallets(self, db: object) -> list[ProjectWallet]:
        return [replace(self.store.wallets[pid]) for pid in sorted(self.store.wallets)]


class FakeAllocationRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def insert_payment(self, db: object, payment: ClientPayment) -> ClientPayment:
        self.store.payments[payment.id] = replace(payment, created_at=datetime.now(UTC))
        return replace(self.store.payments[payment.id])

    async def get_payment(
        self, db: object, payment_id: str, for_update: bool = False
    ) -> ClientPayment | None:
        payment = self.store.payments.get(payment_id)
        return replace(payment) if payment else None

    async def mark_allocated(
        self, db: object, payment_id: str, allocation_date: date, notes: str | None
    ) -> ClientPayment:
        payment = self.store.payments.get(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        updated = replace(
            payment, is_allocated=True, allocation_date=allocation_date, allocation_notes=notes
        )
        self.store.payments[payment_id] = updated
        return replace(updated)

    async def delete_payment(self, db: object, payment_id: str) -> None:
        self.store.payments.pop(payment_id, None)

    async def insert_allocation(
        self, db: object, allocation: PaymentAllocation
    ) -> PaymentAllocation:
        self.store.allocations.append(allocation)
        return allocation

    async def list_allocations_by_payment(
        self, db: object, payment_id: str
    ) -> list[PaymentAllocation]:
        return [a for a in self.store.allocations if a.payment_id == payment_id]

    async def list_allocations_by_project(
        self, db: object, project_id: str
    ) -> list[PaymentAllocation]:
        return [a for a in self.store.allocations if a.project_id == project_id]

    async def delete_allocations(self, db: object, payment_id: str) -> int:
        before = len(self.store.allocations)
        self.store.allocations = [
            a for a in self.store.allocations if a.payment_id != payment_id
        ]
        return before - len(self.store.allocations)


class FakeLoanRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def insert_expense(self, db: object, expense: ExpenseRecord) -> ExpenseRecord:
        self.store.expenses[expense.id] = expense
        return expense

    async def insert_loan(self, db: object, loan: Loan) -> Loan:
        self.store.loans[loan.id] = replace(loan)
        return replace(loan)

    async def get_loan(self, db: object, loan_id: str, for_update: bool = False) -> Loan | None:
        loan = self.store.loans.get(loan_id)
        return replace(loan) if loan else None

    async def lock_active_loans_for_borrower(
        self, db: object, borrower_project_id: str
    ) -> list[Loan]:
        loans = [
            replace(loan)
            for loan in self.store.loans.values()
            if loan.borrower_project_id == borrower_project_id and loan.is_active
        ]
        return sorted(loans, key=lambda loan: (loan.txn_date, loan.id))

    async def apply_settlement(
        self, db: object, loan_id: str, amount: int, expected_version: int
    ) -> Loan | None:
        loan = self.store.loans.get(loan_id)
        if (
            loan is None
            or loan.version != expected_version
            or not loan.is_active
            or loan.settled_amount + amount > loan.amount
        ):
            return None
        settled = loan.settled_amount + amount
        now = datetime.now(UTC)
        full = settled == loan.amount
        updated = replace(
            loan,
            settled_amount=settled,
            status=LoanStatus.SETTLED.value if full else loan.status,
            settled_at=now if full else loan.settled_at,
            last_settlement_at=now,
            version=loan.version + 1,
        )
        self.store.loans[loan_id] = updated
        return replace(updated)

    async def insert_settlement(self, db: object, record: SettlementRecord) -> SettlementRecord:
        stored = replace(record, id=len(self.store.settlements) + 1, settled_at=datetime.now(UTC))
        self.store.settlements.append(stored)
        return stored

    async def list_loans(
        self,
        db: object,
        project_id: str | None = None,
        role: str | None = None,
        status: str | None = None,
    ) -> list[Loan]:
        result = []
        for loan in self.store.loans.values():
            if status is not None and loan.status != status:
                continue
            if project_id is not None:
                if role == LoanRole.LENDER and loan.lender_project_id != project_id:
                    continue
                if role == LoanRole.BORROWER and loan.borrower_project_id != project_id:
                    continue
                if role is None and project_id not in (
                    loan.lender_project_id,
                    loan.borrower_project_id,
                ):
                    continue
            result.append(replace(loan))
        return sorted(result, key=lambda loan: (loan.txn_date, loan.id))

    async def list_settlements(self, db: object, transaction_id: str) -> list[SettlementRecord]:
        return [s for s in self.store.settlements if s.transaction_id == transaction_id]


@dataclass
class Ledger:
    """One in-memory fund ledger with every service wired to the same store."""

    store: InMemoryStore
    db: AsyncMock
    project_repo: FakeProjectRepository
    wallet_repo: FakeWalletRepository
    allocation_repo: FakeAllocationRepository
    loan_repo: FakeLoanRepository
    wallets: WalletApplicationService
    allocator: AllocationApplicationService
    expenses: CrossProjectExpenseService
    settlements: SettlementApplicationService
    reports: FinancialReportService

    def add_project(self, project_id: str, name: str | None = None) -> None:
        self.store.projects[project_id] = Project(
            id=project_id, name=name or f"Project {project_id}", created_at=datetime.now(UTC)
        )

    def wallet(self, project_id: str) -> ProjectWallet:
        return self.store.wallets[project_id]


@pytest.fixture
def ledger() -> Ledger:
    store = InMemoryStore()
    project_repo = FakeProjectRepository(store)
    wallet_repo = FakeWalletRepository(store)
    allocation_repo = FakeAllocationRepository(store)
    loan_repo = FakeLoanRepository(store)
    return Ledger(
        store=store,
        db=AsyncMock(),
        project_repo=project_repo,
        wallet_repo=wallet_repo,
        allocation_repo=allocation_repo,
        loan_repo=loan_repo,
        wallets=WalletApplicationService(repo=wallet_repo),
        allocator=AllocationApplicationService(repo=allocation_repo, wallet_repo=wallet_repo),
        expenses=CrossProjectExpenseService(repo=loan_repo, wallet_repo=wallet_repo),
        settlements=SettlementApplicationService(repo=loan_repo, wallet_repo=wallet_repo),
        reports=FinancialReportService(
            project_repo=project_repo,
            wallet_repo=wallet_repo,
            loan_repo=loan_repo,
            allocation_repo=allocation_repo,
        ),
    )
