"""SettlementApplicationService — the Settlement Engine and Loan Ledger reads.

Auto-settlement repays a borrower's loans oldest first (see
src.sf_loan.domain.fifo); manual settlement repays one loan by an explicit
amount. In both cases every loan update, settlement record and wallet delta
commits in one transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.enums import LoanRole, LoanStatus, SettlementType
from src.sf_common.errors import (
    LoanNotFoundError,
    SettlementExceedsOutstandingError,
    ValidationError,
)
from src.sf_common.money import paise_to_display
from src.sf_common.transaction import run_in_transaction, store_errors
from src.sf_loan.application.schemas import (
    AutoSettleResponse,
    LoanListResponse,
    LoanResponse,
    ManualSettleResponse,
    SettledLoanItem,
    SettlementListResponse,
    SettlementResponse,
)
from src.sf_loan.domain.fifo import plan_fifo_settlement
from src.sf_loan.domain.models import Loan, SettlementRecord
from src.sf_loan.domain.repository import LoanRepositoryProtocol
from src.sf_loan.domain.settlement import settle_loan, settlement_postings
from src.sf_loan.infrastructure.persistence import LoanRepository
from src.sf_wallet.application.schemas import BalanceResponse
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta
from src.sf_wallet.domain.postings import ensure_wallets, post_deltas
from src.sf_wallet.domain.repository import WalletRepositoryProtocol
from src.sf_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


def _balances(wallets: dict[str, ProjectWallet]) -> list[BalanceResponse]:
    return [BalanceResponse.from_wallet(wallets[pid]) for pid in sorted(wallets)]


class SettlementApplicationService:
    def __init__(
        self,
        repo: LoanRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._repo: LoanRepositoryProtocol = repo or LoanRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def auto_settle_loans(
        self, db: AsyncSession, borrower_project_id: str, available_amount: int
    ) -> AutoSettleResponse:
        """Spend `available_amount` on the borrower's active loans, oldest first."""
        if isinstance(available_amount, bool) or not isinstance(available_amount, int):
            raise ValidationError(f"Available amount must be paise, got {available_amount!r}")
        if available_amount < 0:
            raise ValidationError(f"Available amount must not be negative, got {available_amount}")

        async def _work() -> tuple[list[SettledLoanItem], int, dict[str, ProjectWallet]]:
            await ensure_wallets(self._wallets, db, [borrower_project_id])
            loans = await self._repo.lock_active_loans_for_borrower(db, borrower_project_id)
            steps, remaining = plan_fifo_settlement(loans, available_amount)
            settled: list[SettledLoanItem] = []
            postings: list[tuple[str, WalletDelta]] = []
            for step in steps:
                updated, _ = await settle_loan(
                    self._repo, db, step.loan, step.amount, step.settlement_type
                )
                settled.append(
                    SettledLoanItem(
                        transaction_id=updated.id,
                        lender_project_id=updated.lender_project_id,
                        settlement_amount_paise=step.amount,
                        settlement_type=step.settlement_type.value,
                        remaining_balance_paise=updated.outstanding,
                        fully_settled=updated.status == LoanStatus.SETTLED,
                    )
                )
                postings.extend(settlement_postings(updated, step.amount))
            wallets: dict[str, ProjectWallet] = {}
            if postings:
                wallets = await post_deltas(self._wallets, db, postings)
            return settled, remaining, wallets

        settled, remaining, wallets = await run_in_transaction(
            db, _work, label="auto_settle_loans"
        )
        logger.info(
            "Auto-settlement for %s: %d loan(s) repaid from %s, %s left over",
            borrower_project_id,
            len(settled),
            paise_to_display(available_amount),
            paise_to_display(remaining),
        )
        return AutoSettleResponse(
            borrower_project_id=borrower_project_id,
            settled_loans=settled,
            remaining_amount_paise=remaining,
            remaining_amount_display=paise_to_display(remaining),
            balances=_balances(wallets),
        )

    async def settle_cross_project_transaction(
        self,
        db: AsyncSession,
        transaction_id: str,
        settlement_amount: int,
        settlement_type: SettlementType = SettlementType.MANUAL,
        reference: str | None = None,
        notes: str | None = None,
    ) -> ManualSettleResponse:
        """Repay `settlement_amount` of one loan. Never exceeds what is outstanding."""
        if isinstance(settlement_amount, bool) or not isinstance(settlement_amount, int):
            raise ValidationError(f"Settlement amount must be paise, got {settlement_amount!r}")

        async def _work() -> tuple[Loan, SettlementRecord, dict[str, ProjectWallet]]:
            loan = await self._repo.get_loan(db, transaction_id, for_update=True)
            if loan is None:
                raise LoanNotFoundError(transaction_id)
            if settlement_amount <= 0 or settlement_amount > loan.outstanding:
                raise SettlementExceedsOutstandingError(settlement_amount, loan.outstanding)
            updated, record = await settle_loan(
                self._repo,
                db,
                loan,
                settlement_amount,
                settlement_type,
                reference=reference,
                notes=notes,
            )
            wallets = await post_deltas(
                self._wallets, db, settlement_postings(updated, settlement_amount)
            )
            return updated, record, wallets

        loan, record, wallets = await run_in_transaction(
            db, _work, label="settle_cross_project_transaction"
        )
        return ManualSettleResponse(
            transaction_id=loan.id,
            settlement_amount_paise=settlement_amount,
            remaining_balance_paise=loan.outstanding,
            fully_settled=loan.status == LoanStatus.SETTLED,
            settlement=SettlementResponse.from_domain(record),
            balances=_balances(wallets),
        )

    async def get_loan(self, db: AsyncSession, transaction_id: str) -> LoanResponse:
        async with store_errors("get_loan"):
            loan = await self._repo.get_loan(db, transaction_id)
        if loan is None:
            raise LoanNotFoundError(transaction_id)
        return LoanResponse.from_domain(loan)

    async def list_loans(
        self,
        db: AsyncSession,
        project_id: str | None = None,
        role: LoanRole | None = None,
        status: LoanStatus | None = None,
    ) -> LoanListResponse:
        async with store_errors("list_loans"):
            loans = await self._repo.list_loans(
                db,
                project_id=project_id,
                role=role.value if role else None,
                status=status.value if status else None,
            )
        outstanding = sum(loan.outstanding for loan in loans if loan.is_active)
        return LoanListResponse(
            items=[LoanResponse.from_domain(loan) for loan in loans],
            total_outstanding_paise=outstanding,
            total_outstanding_display=paise_to_display(outstanding),
        )

    async def list_settlements(
        self, db: AsyncSession, transaction_id: str
    ) -> SettlementListResponse:
        async with store_errors("list_settlements"):
            loan = await self._repo.get_loan(db, transaction_id)
            if loan is None:
                raise LoanNotFoundError(transaction_id)
            records = await self._repo.list_settlements(db, transaction_id)
        return SettlementListResponse(
            transaction_id=transaction_id,
            items=[SettlementResponse.from_domain(r) for r in records],
            total_settled_paise=sum(r.settlement_amount for r in records),
        )
