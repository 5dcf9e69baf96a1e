"""AllocationApplicationService — the Payment Allocator.

Each public mutation is a single transaction: the payment row, every
allocation row and every wallet credit commit together or not at all.
Breakdown validation runs before the transaction starts.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_allocation.application.schemas import (
    AllocationItem,
    AllocationListResponse,
    AllocationResultResponse,
    PaymentDeletionResponse,
    PaymentResponse,
)
from src.sf_allocation.domain.models import AllocationLine, ClientPayment, PaymentAllocation
from src.sf_allocation.domain.repository import AllocationRepositoryProtocol
from src.sf_allocation.infrastructure.persistence import AllocationRepository
from src.sf_common.enums import MULTI_PROJECT
from src.sf_common.errors import (
    PaymentAlreadyAllocatedError,
    PaymentNotFoundError,
    ValidationError,
)
from src.sf_common.id_generator import generate_prefixed_id
from src.sf_common.money import paise_to_display, require_exact_total, validate_amount
from src.sf_common.transaction import run_in_transaction, store_errors
from src.sf_wallet.application.schemas import BalanceResponse
from src.sf_wallet.domain.models import ProjectWallet, credit_advance
from src.sf_wallet.domain.postings import ensure_wallets, post_deltas
from src.sf_wallet.domain.repository import WalletRepositoryProtocol
from src.sf_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_MULTI_PROJECT_NOTE = "Multi-project allocation"
_ALLOCATION_DESCRIPTION = "Client payment allocation"
_EXISTING_ALLOCATION_DESCRIPTION = "Auto-allocated client payment"


def _balances(wallets: dict[str, ProjectWallet]) -> list[BalanceResponse]:
    return [BalanceResponse.from_wallet(wallets[pid]) for pid in sorted(wallets)]


class AllocationApplicationService:
    def __init__(
        self,
        repo: AllocationRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._repo: AllocationRepositoryProtocol = repo or AllocationRepository()
        self._wallets: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def _credit_projects(
        self,
        db: AsyncSession,
        payment_id: str,
        lines: list[AllocationLine],
        allocation_date: date,
        default_description: str,
    ) -> tuple[list[PaymentAllocation], dict[str, ProjectWallet]]:
        await ensure_wallets(self._wallets, db, [line.project_id for line in lines])
        allocations: list[PaymentAllocation] = []
        for line in lines:
            allocation = await self._repo.insert_allocation(
                db,
                PaymentAllocation(
                    id=generate_prefixed_id("AL"),
                    payment_id=payment_id,
                    project_id=line.project_id,
                    amount=line.amount,
                    description=line.description or default_description,
                    allocation_date=allocation_date,
                ),
            )
            allocations.append(allocation)
        wallets = await post_deltas(
            self._wallets, db, [(line.project_id, credit_advance(line.amount)) for line in lines]
        )
        return allocations, wallets

    async def record_client_payment(
        self,
        db: AsyncSession,
        project_id: str,
        amount: int,
        payment_date: date,
        received_by: str | None = None,
        payer: str | None = None,
        method: str | None = None,
        notes: str | None = None,
    ) -> PaymentResponse:
        """Store an unallocated payment, as the dashboard's payment form does."""
        try:
            validate_amount(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        async def _work() -> ClientPayment:
            await ensure_wallets(self._wallets, db, [project_id])
            return await self._repo.insert_payment(
                db,
                ClientPayment(
                    id=generate_prefixed_id("PAY"),
                    project_id=project_id,
                    amount=amount,
                    payment_date=payment_date,
                    received_by=received_by,
                    payer=payer,
                    method=method,
                    notes=notes,
                ),
            )

        payment = await run_in_transaction(db, _work, label="record_client_payment")
        return PaymentResponse.from_domain(payment)

    async def allocate_payment(
        self,
        db: AsyncSession,
        total_amount: int,
        allocations: list[AllocationLine],
        payment_date: date,
        received_by: str | None = None,
        payer: str | None = None,
        method: str | None = None,
        notes: str | None = None,
    ) -> AllocationResultResponse:
        """Record one client payment and split it across project wallets."""
        require_exact_total("allocated", [a.amount for a in allocations], total_amount)

        async def _work() -> tuple[ClientPayment, list[PaymentAllocation], dict[str, ProjectWallet]]:
            payment = await self._repo.insert_payment(
                db,
                ClientPayment(
                    id=generate_prefixed_id("PAY"),
                    project_id=MULTI_PROJECT,
                    amount=total_amount,
                    payment_date=payment_date,
                    received_by=received_by,
                    payer=payer,
                    method=method,
                    notes=notes or _MULTI_PROJECT_NOTE,
                    is_multi_project=True,
                    is_allocated=True,
                    allocation_date=payment_date,
                ),
            )
            rows, wallets = await self._credit_projects(
                db, payment.id, allocations, payment_date, _ALLOCATION_DESCRIPTION
            )
            return payment, rows, wallets

        payment, rows, wallets = await run_in_transaction(db, _work, label="allocate_payment")
        logger.info(
            "Payment %s (%s) allocated across %d project(s)",
            payment.id,
            paise_to_display(total_amount),
            len(rows),
        )
        return AllocationResultResponse(
            payment=PaymentResponse.from_domain(payment),
            allocations=[AllocationItem.from_domain(a) for a in rows],
            balances=_balances(wallets),
        )

    async def allocate_existing_payment(
        self,
        db: AsyncSession,
        payment_id: str,
        allocations: list[AllocationLine],
        allocation_date: date | None = None,
        notes: str | None = None,
    ) -> AllocationResultResponse:
        """Split a payment recorded earlier by a collaborator and mark it allocated."""
        for line in allocations:
            try:
                validate_amount(line.amount)
            except ValueError as exc:
                raise ValidationError(f"Invalid allocated line: {exc}") from exc

        async def _work() -> tuple[ClientPayment, list[PaymentAllocation], dict[str, ProjectWallet]]:
            payment = await self._repo.get_payment(db, payment_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
            if payment.is_allocated:
                raise PaymentAlreadyAllocatedError(payment_id)
            require_exact_total("allocated", [a.amount for a in allocations], payment.amount)
            when = allocation_date or payment.payment_date
            payment = await self._repo.mark_allocated(db, payment_id, when, notes)
            rows, wallets = await self._credit_projects(
                db, payment_id, allocations, when, _EXISTING_ALLOCATION_DESCRIPTION
            )
            return payment, rows, wallets

        payment, rows, wallets = await run_in_transaction(
            db, _work, label="allocate_existing_payment"
        )
        logger.info("Existing payment %s allocated across %d project(s)", payment_id, len(rows))
        return AllocationResultResponse(
            payment=PaymentResponse.from_domain(payment),
            allocations=[AllocationItem.from_domain(a) for a in rows],
            balances=_balances(wallets),
        )

    async def delete_payment(self, db: AsyncSession, payment_id: str) -> PaymentDeletionResponse:
        """Delete a payment and reverse every wallet credit its allocations produced."""

        async def _work() -> tuple[list[PaymentAllocation], dict[str, ProjectWallet]]:
            payment = await self._repo.get_payment(db, payment_id, for_update=True)
            if payment is None:
                raise PaymentNotFoundError(payment_id)
            rows = await self._repo.list_allocations_by_payment(db, payment_id)
            await self._repo.delete_allocations(db, payment_id)
            await self._repo.delete_payment(db, payment_id)
            wallets: dict[str, ProjectWallet] = {}
            if rows:
                wallets = await post_deltas(
                    self._wallets, db, [(a.project_id, -credit_advance(a.amount)) for a in rows]
                )
            return rows, wallets

        rows, wallets = await run_in_transaction(db, _work, label="delete_payment")
        reversed_total = sum(a.amount for a in rows)
        logger.info(
            "Payment %s deleted, %s reversed from %d allocation(s)",
            payment_id,
            paise_to_display(reversed_total),
            len(rows),
        )
        return PaymentDeletionResponse(
            payment_id=payment_id,
            reversed_allocations=[AllocationItem.from_domain(a) for a in rows],
            reversed_total_paise=reversed_total,
            balances=_balances(wallets),
        )

    async def get_payment(self, db: AsyncSession, payment_id: str) -> PaymentResponse:
        async with store_errors("get_payment"):
            payment = await self._repo.get_payment(db, payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return PaymentResponse.from_domain(payment)

    async def list_allocations(
        self, db: AsyncSession, project_id: str
    ) -> AllocationListResponse:
        async with store_errors("list_allocations"):
            rows = await self._repo.list_allocations_by_project(db, project_id)
        total = sum(a.amount for a in rows)
        return AllocationListResponse(
            project_id=project_id,
            items=[AllocationItem.from_domain(a) for a in rows],
            total_paise=total,
            total_display=paise_to_display(total),
        )
