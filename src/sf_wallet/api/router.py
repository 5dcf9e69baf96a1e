"""sf_wallet REST API — initialize a wallet and read its balance."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.database import get_db_session
from src.sf_common.response import ApiResponse, success_response
from src.sf_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallets", tags=["wallets"])

_service = WalletApplicationService()


@router.post("/{project_id}")
async def initialize_wallet(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.initialize_wallet(db, project_id)
    return success_response(data.model_dump(), request)


@router.get("/{project_id}/balance")
async def get_balance(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, project_id)
    return success_response(data.model_dump(), request)
