"""CrossProjectExpenseService — the Cross-Project Expense Recorder.

An expense paid (wholly or partly) from other projects' funds becomes one
expense row plus one loan per foreign payment source. The expense, the loans
and every lender/borrower wallet update commit in a single transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.enums import ExpenseType
from src.sf_common.errors import ValidationError
from src.sf_common.id_generator import generate_prefixed_id
from src.sf_common.money import paise_to_display, require_exact_total
from src.sf_common.transaction import run_in_transaction
from src.sf_loan.application.schemas import (
    CrossProjectExpenseResponse,
    ExpenseResponse,
    LoanResponse,
)
from src.sf_loan.domain.models import ExpenseDetails, ExpenseRecord, Loan, PaymentSource
from src.sf_loan.domain.repository import LoanRepositoryProtocol
from src.sf_loan.domain.settlement import loan_postings, open_loan
from src.sf_loan.infrastructure.persistence import LoanRepository
from src.sf_wallet.application.schemas import BalanceResponse
from src.sf_wallet.domain.models import ProjectWallet, WalletDelta
from src.sf_wallet.domain.postings import ensure_wallets, post_deltas
from src.sf_wallet.domain.repository import WalletRepositoryProtocol
from src.sf_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class CrossProjectExpenseService:
    def __init__(
        self,
        repo: LoanRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._repo: LoanRepositoryProtocol = repo or LoanRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def record_cross_project_expense(
        self,
        db: AsyncSession,
        beneficiary_project_id: str,
        payment_sources: list[PaymentSource],
        expense_details: ExpenseDetails,
        expense_type: ExpenseType | str = ExpenseType.EXPENSE,
    ) -> CrossProjectExpenseResponse:
        """Record the expense against the beneficiary and open the resulting loans.

        A source that is the beneficiary itself paid from its own funds: it is
        kept on the expense but creates no loan and moves no wallet.
        """
        try:
            kind = ExpenseType(expense_type)
        except ValueError as exc:
            raise ValidationError(f"Unknown expense type: {expense_type!r}") from exc
        require_exact_total(
            "payment source", [s.amount for s in payment_sources], expense_details.total_amount
        )

        async def _work() -> tuple[ExpenseRecord, list[Loan], dict[str, ProjectWallet]]:
            await ensure_wallets(
                self._wallets,
                db,
                [beneficiary_project_id] + [s.project_id for s in payment_sources],
            )
            expense = await self._repo.insert_expense(
                db,
                ExpenseRecord(
                    id=generate_prefixed_id("EX"),
                    project_id=beneficiary_project_id,
                    expense_type=kind.value,
                    description=expense_details.description,
                    category=expense_details.category,
                    amount=expense_details.total_amount,
                    expense_date=expense_details.expense_date,
                    paid_via_cross_project=True,
                    payment_sources=list(payment_sources),
                ),
            )
            loans: list[Loan] = []
            postings: list[tuple[str, WalletDelta]] = []
            for source in payment_sources:
                if source.project_id == beneficiary_project_id:
                    continue
                loan = await self._repo.insert_loan(
                    db, open_loan(generate_prefixed_id("LN"), source, expense)
                )
                loans.append(loan)
                postings.extend(loan_postings(loan))
            wallets: dict[str, ProjectWallet] = {}
            if postings:
                wallets = await post_deltas(self._wallets, db, postings)
            return expense, loans, wallets

        expense, loans, wallets = await run_in_transaction(
            db, _work, label="record_cross_project_expense"
        )
        for loan in loans:
            logger.info(
                "Loan %s opened: %s lent %s to %s for expense %s",
                loan.id,
                loan.lender_project_id,
                paise_to_display(loan.amount),
                loan.borrower_project_id,
                expense.id,
            )
        return CrossProjectExpenseResponse(
            expense=ExpenseResponse.from_domain(expense),
            loans=[LoanResponse.from_domain(loan) for loan in loans],
            balances=[BalanceResponse.from_wallet(wallets[pid]) for pid in sorted(wallets)],
        )
