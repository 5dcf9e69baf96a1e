"""sf_report REST API — project summaries, overall fund status, invariant check."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.database import get_db_session
from src.sf_common.response import ApiResponse, success_response
from src.sf_report.application.service import FinancialReportService

router = APIRouter(prefix="/funds", tags=["funds"])

_service = FinancialReportService()


@router.get("/projects/{project_id}/summary")
async def get_project_financial_summary(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_project_financial_summary(db, project_id)
    return success_response(data.model_dump(), request)


@router.get("/status")
async def get_overall_fund_status(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_overall_fund_status(db)
    return success_response(data.model_dump(), request)


@router.get("/invariants")
async def verify_fund_invariants(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.verify_fund_invariants(db)
    return success_response(data.model_dump(), request)
