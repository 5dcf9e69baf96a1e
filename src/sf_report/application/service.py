"""FinancialReportService — read-only views over wallets, loans and allocations."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_allocation.domain.repository import AllocationRepositoryProtocol
from src.sf_allocation.infrastructure.persistence import AllocationRepository
from src.sf_common.enums import LoanStatus
from src.sf_common.errors import ProjectNotFoundError
from src.sf_common.transaction import store_errors
from src.sf_loan.domain.repository import LoanRepositoryProtocol
from src.sf_loan.infrastructure.persistence import LoanRepository
from src.sf_project.domain.repository import ProjectRepositoryProtocol
from src.sf_project.infrastructure.persistence import ProjectRepository
from src.sf_report.application.schemas import (
    FundStatusResponse,
    InvariantReportResponse,
    ProjectSummaryResponse,
)
from src.sf_report.domain.invariants import verify_fund_invariants
from src.sf_report.domain.summary import FundStatus, summarize_project
from src.sf_wallet.domain.repository import WalletRepositoryProtocol
from src.sf_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class FinancialReportService:
    def __init__(
        self,
        project_repo: ProjectRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
        loan_repo: LoanRepositoryProtocol | None = None,
        allocation_repo: AllocationRepositoryProtocol | None = None,
    ) -> None:
        self._projects: ProjectRepositoryProtocol = project_repo or ProjectRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()
        self._loans: LoanRepositoryProtocol = loan_repo or LoanRepository()
        self._allocations: AllocationRepositoryProtocol = allocation_repo or AllocationRepository()

    async def get_project_financial_summary(
        self, db: AsyncSession, project_id: str
    ) -> ProjectSummaryResponse:
        async with store_errors("get_project_financial_summary"):
            project = await self._projects.get_project(db, project_id)
            if project is None:
                raise ProjectNotFoundError(project_id)
            wallet = await self._wallets.get_wallet(db, project_id)
            loans = await self._loans.list_loans(
                db, project_id=project_id, status=LoanStatus.ACTIVE.value
            )
            allocations = await self._allocations.list_allocations_by_project(db, project_id)
        summary = summarize_project(
            project.id, project.name, wallet, loans, sum(a.amount for a in allocations)
        )
        return ProjectSummaryResponse.from_domain(summary)

    async def get_overall_fund_status(self, db: AsyncSession) -> FundStatusResponse:
        async with store_errors("get_overall_fund_status"):
            projects = await self._projects.list_projects(db)
            wallets = {w.project_id: w for w in await self._wallets.list_wallets(db)}
            active = await self._loans.list_loans(db, status=LoanStatus.ACTIVE.value)
            summaries = []
            for project in projects:
                allocations = await self._allocations.list_allocations_by_project(
                    db, project.id
                )
                summaries.append(
                    summarize_project(
                        project.id,
                        project.name,
                        wallets.get(project.id),
                        active,
                        sum(a.amount for a in allocations),
                    )
                )
        status = FundStatus(projects=summaries)
        if not status.is_balanced:
            logger.error(
                "Fund status unbalanced: active loans given=%d received=%d",
                status.total_active_loans,
                status.total_active_borrowings,
            )
        return FundStatusResponse.from_domain(status)

    async def verify_fund_invariants(self, db: AsyncSession) -> InvariantReportResponse:
        async with store_errors("verify_fund_invariants"):
            violations = await verify_fund_invariants(db)
        return InvariantReportResponse(ok=not violations, violations=violations)
