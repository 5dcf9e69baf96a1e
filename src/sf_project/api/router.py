"""sf_project REST API — register and list projects."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.database import get_db_session
from src.sf_common.response import ApiResponse, success_response
from src.sf_project.application.schemas import CreateProjectRequest
from src.sf_project.application.service import ProjectApplicationService

router = APIRouter(prefix="/projects", tags=["projects"])

_service = ProjectApplicationService()


@router.post("")
async def create_project(
    body: CreateProjectRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_project(db, body.project_id, body.name)
    return success_response(data.model_dump(), request)


@router.get("")
async def list_projects(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_projects(db)
    return success_response(data.model_dump(), request)


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_project(db, project_id)
    return success_response(data.model_dump(), request)
