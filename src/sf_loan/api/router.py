"""sf_loan REST API — cross-project expenses, loans and their settlement."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.database import get_db_session
from src.sf_common.enums import LoanRole, LoanStatus
from src.sf_common.response import ApiResponse, success_response
from src.sf_loan.application.expense_service import CrossProjectExpenseService
from src.sf_loan.application.schemas import (
    AutoSettleRequest,
    CrossProjectExpenseRequest,
    ManualSettleRequest,
)
from src.sf_loan.application.settlement_service import SettlementApplicationService
from src.sf_loan.domain.models import ExpenseDetails

expense_router = APIRouter(prefix="/expenses", tags=["expenses"])
router = APIRouter(prefix="/loans", tags=["loans"])

_expense_service = CrossProjectExpenseService()
_settlement_service = SettlementApplicationService()


@expense_router.post("/cross-project")
async def record_cross_project_expense(
    body: CrossProjectExpenseRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    details = body.expense_details
    data = await _expense_service.record_cross_project_expense(
        db,
        beneficiary_project_id=body.beneficiary_project_id,
        payment_sources=[s.to_domain() for s in body.payment_sources],
        expense_details=ExpenseDetails(
            description=details.description,
            total_amount=details.total_amount_paise,
            expense_date=details.expense_date,
            category=details.category,
        ),
        expense_type=body.expense_type,
    )
    return success_response(data.model_dump(), request)


@router.get("")
async def list_loans(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    project_id: str | None = Query(None, min_length=1),
    role: LoanRole | None = Query(None, description="LENDER or BORROWER side of project_id"),
    status: LoanStatus | None = Query(None),
) -> ApiResponse:
    data = await _settlement_service.list_loans(
        db, project_id=project_id, role=role, status=status
    )
    return success_response(data.model_dump(), request)


@router.post("/auto-settle")
async def auto_settle_loans(
    body: AutoSettleRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settlement_service.auto_settle_loans(
        db, body.borrower_project_id, body.available_amount_paise
    )
    return success_response(data.model_dump(), request)


@router.get("/{transaction_id}")
async def get_loan(
    transaction_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settlement_service.get_loan(db, transaction_id)
    return success_response(data.model_dump(), request)


@router.post("/{transaction_id}/settle")
async def settle_cross_project_transaction(
    transaction_id: str,
    body: ManualSettleRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settlement_service.settle_cross_project_transaction(
        db,
        transaction_id=transaction_id,
        settlement_amount=body.settlement_amount_paise,
        settlement_type=body.settlement_type,
        reference=body.reference,
        notes=body.notes,
    )
    return success_response(data.model_dump(), request)


@router.get("/{transaction_id}/settlements")
async def list_settlements(
    transaction_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _settlement_service.list_settlements(db, transaction_id)
    return success_response(data.model_dump(), request)
