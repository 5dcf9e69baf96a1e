"""sf_allocation REST API — client payments and their allocation to projects."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_allocation.application.schemas import (
    AllocateExistingPaymentRequest,
    AllocatePaymentRequest,
    RecordPaymentRequest,
)
from src.sf_allocation.application.service import AllocationApplicationService
from src.sf_common.database import get_db_session
from src.sf_common.response import ApiResponse, success_response

router = APIRouter(prefix="/payments", tags=["payments"])

_service = AllocationApplicationService()


@router.post("")
async def record_client_payment(
    body: RecordPaymentRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_client_payment(
        db,
        project_id=body.project_id,
        amount=body.amount_paise,
        payment_date=body.payment_date,
        received_by=body.received_by,
        payer=body.payer,
        method=body.method.value if body.method else None,
        notes=body.notes,
    )
    return success_response(data.model_dump(), request)


@router.post("/allocate")
async def allocate_payment(
    body: AllocatePaymentRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.allocate_payment(
        db,
        total_amount=body.total_amount_paise,
        allocations=[line.to_domain() for line in body.allocations],
        payment_date=body.payment_date,
        received_by=body.received_by,
        payer=body.payer,
        method=body.method.value if body.method else None,
        notes=body.notes,
    )
    return success_response(data.model_dump(), request)


@router.get("/allocations")
async def list_allocations(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    project_id: str = Query(..., min_length=1, description="Project whose allocations to list"),
) -> ApiResponse:
    data = await _service.list_allocations(db, project_id)
    return success_response(data.model_dump(), request)


@router.get("/{payment_id}")
async def get_payment(
    payment_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_payment(db, payment_id)
    return success_response(data.model_dump(), request)


@router.post("/{payment_id}/allocate")
async def allocate_existing_payment(
    payment_id: str,
    body: AllocateExistingPaymentRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.allocate_existing_payment(
        db,
        payment_id=payment_id,
        allocations=[line.to_domain() for line in body.allocations],
        allocation_date=body.allocation_date,
        notes=body.notes,
    )
    return success_response(data.model_dump(), request)


@router.delete("/{payment_id}")
async def delete_payment(
    payment_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_payment(db, payment_id)
    return success_response(data.model_dump(), request)
