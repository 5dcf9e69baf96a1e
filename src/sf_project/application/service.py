"""ProjectApplicationService — registry of projects the ledger tracks.

Full project CRUD lives with the dashboard; the ledger only needs ids and
names to own wallets and to enumerate projects for fleet-wide reports.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_common.errors import ProjectExistsError, ProjectNotFoundError
from src.sf_common.transaction import run_in_transaction, store_errors
from src.sf_project.application.schemas import ProjectListResponse, ProjectResponse
from src.sf_project.domain.repository import ProjectRepositoryProtocol
from src.sf_project.infrastructure.persistence import ProjectRepository


class ProjectApplicationService:
    def __init__(self, repo: ProjectRepositoryProtocol | None = None) -> None:
        self._repo: ProjectRepositoryProtocol = repo or ProjectRepository()

    async def create_project(
        self, db: AsyncSession, project_id: str, name: str
    ) -> ProjectResponse:
        async def _work() -> ProjectResponse:
            project = await self._repo.create_project(db, project_id, name)
            if project is None:
                raise ProjectExistsError(project_id)
            return ProjectResponse.from_domain(project)

        return await run_in_transaction(db, _work, label="create_project", max_retries=0)

    async def get_project(self, db: AsyncSession, project_id: str) -> ProjectResponse:
        async with store_errors("get_project"):
            project = await self._repo.get_project(db, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return ProjectResponse.from_domain(project)

    async def list_projects(self, db: AsyncSession) -> ProjectListResponse:
        async with store_errors("list_projects"):
            projects = await self._repo.list_projects(db)
        items = [ProjectResponse.from_domain(p) for p in projects]
        return ProjectListResponse(items=items, total=len(items))
