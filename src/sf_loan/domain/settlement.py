"""Loan lifecycle steps shared by the expense recorder and the settlement engine.

Callers run these inside one transaction and post the returned wallet
deltas with `post_deltas` once, after all loan rows are written, so every
affected wallet is locked in a single ordered pass.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.enums import SettlementType
from src.sf_common.errors import ConcurrentModificationError, SelfLoanError
from src.sf_common.money import paise_to_display
from src.sf_loan.domain.models import ExpenseRecord, Loan, PaymentSource, SettlementRecord
from src.sf_loan.domain.repository import LoanRepositoryProtocol
from src.sf_wallet.domain.models import WalletDelta, borrow, lend, repay_borrower, repay_lender

logger = logging.getLogger(__name__)


def open_loan(loan_id: str, source: PaymentSource, expense: ExpenseRecord) -> Loan:
    """A new ACTIVE loan: `source` paid its share of `expense` for the beneficiary."""
    if source.project_id == expense.project_id:
        raise SelfLoanError(source.project_id)
    return Loan(
        id=loan_id,
        lender_project_id=source.project_id,
        borrower_project_id=expense.project_id,
        amount=source.amount,
        settled_amount=0,
        expense_id=expense.id,
        expense_type=expense.expense_type,
        description=f"{expense.description} - Cross-project payment",
        txn_date=expense.expense_date,
    )


def loan_postings(loan: Loan) -> list[tuple[str, WalletDelta]]:
    """Wallet deltas for opening `loan`."""
    return [
        (loan.lender_project_id, lend(loan.amount)),
        (loan.borrower_project_id, borrow(loan.amount)),
    ]


def settlement_postings(loan: Loan, amount: int) -> list[tuple[str, WalletDelta]]:
    """Wallet deltas for repaying `amount` of `loan`."""
    return [
        (loan.lender_project_id, repay_lender(amount)),
        (loan.borrower_project_id, repay_borrower(amount)),
    ]


async def settle_loan(
    repo: LoanRepositoryProtocol,
    db: AsyncSession,
    loan: Loan,
    amount: int,
    settlement_type: SettlementType,
    reference: str | None = None,
    notes: str | None = None,
) -> tuple[Loan, SettlementRecord]:
    """Advance one loan by `amount` and append its audit record.

    The loan row update is guarded by its version, so a concurrent settlement
    of the same loan surfaces as ConcurrentModificationError instead of a
    lost update.
    """
    updated = await repo.apply_settlement(db, loan.id, amount, loan.version)
    if updated is None:
        raise ConcurrentModificationError(f"loan {loan.id} changed during settlement")
    record = await repo.insert_settlement(
        db,
        SettlementRecord(
            id=0,
            transaction_id=loan.id,
            lender_project_id=loan.lender_project_id,
            borrower_project_id=loan.borrower_project_id,
            settlement_amount=amount,
            settlement_type=settlement_type.value,
            reference=reference,
            notes=notes,
        ),
    )
    logger.info(
        "Loan %s %s→%s: %s settled (%s), %s outstanding",
        loan.id,
        loan.lender_project_id,
        loan.borrower_project_id,
        paise_to_display(amount),
        settlement_type.value,
        paise_to_display(updated.outstanding),
    )
    return updated, record
