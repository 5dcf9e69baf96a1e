"""Pure financial-summary arithmetic over wallets and loans."""

from dataclasses import dataclass, field

from src.sf_loan.domain.models import Loan
from src.sf_wallet.domain.models import ProjectWallet


@dataclass
class ProjectFinancialSummary:
    project_id: str
    project_name: str
    virtual_balance: int
    advance_received: int
    pending_dues: int
    total_loans_given: int           # wallet counter
    total_loans_received: int        # wallet counter
    active_loans_given: int          # Σ outstanding, ACTIVE loans as lender
    active_loans_received: int       # Σ outstanding, ACTIVE loans as borrower
    total_payments_received: int     # Σ allocations
    loans_given: list[Loan] = field(default_factory=list)
    loans_received: list[Loan] = field(default_factory=list)

    @property
    def net_available_balance(self) -> int:
        return self.virtual_balance - self.active_loans_received


@dataclass
class FundStatus:
    projects: list[ProjectFinancialSummary]

    @property
    def total_virtual_balance(self) -> int:
        return sum(p.virtual_balance for p in self.projects)

    @property
    def total_active_loans(self) -> int:
        return sum(p.active_loans_given for p in self.projects)

    @property
    def total_active_borrowings(self) -> int:
        return sum(p.active_loans_received for p in self.projects)

    @property
    def net_bank_balance(self) -> int:
        # Every rupee in the bank sits in exactly one project's virtual balance.
        return self.total_virtual_balance

    @property
    def is_balanced(self) -> bool:
        loans_balanced = self.total_active_loans == self.total_active_borrowings
        counters_balanced = sum(p.total_loans_given for p in self.projects) == sum(
            p.total_loans_received for p in self.projects
        )
        return loans_balanced and counters_balanced


def summarize_project(
    project_id: str,
    project_name: str,
    wallet: ProjectWallet | None,
    loans: list[Loan],
    total_payments_received: int,
) -> ProjectFinancialSummary:
    """Build one project's summary. A missing wallet reads as all zeros."""
    active = [loan for loan in loans if loan.is_active]
    given = [loan for loan in active if loan.lender_project_id == project_id]
    received = [loan for loan in active if loan.borrower_project_id == project_id]
    return ProjectFinancialSummary(
        project_id=project_id,
        project_name=project_name,
        virtual_balance=wallet.virtual_balance if wallet else 0,
        advance_received=wallet.advance_received if wallet else 0,
        pending_dues=wallet.pending_dues if wallet else 0,
        total_loans_given=wallet.total_loans_given if wallet else 0,
        total_loans_received=wallet.total_loans_received if wallet else 0,
        active_loans_given=sum(loan.outstanding for loan in given),
        active_loans_received=sum(loan.outstanding for loan in received),
        total_payments_received=total_payments_received,
        loans_given=given,
        loans_received=received,
    )
