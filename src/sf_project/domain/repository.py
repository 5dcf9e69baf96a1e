"""Repository Protocol for the project registry."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_project.domain.models import Project


class ProjectRepositoryProtocol(Protocol):
    async def create_project(
        self, db: AsyncSession, project_id: str, name: str
    ) -> Project | None: ...

    async def get_project(self, db: AsyncSession, project_id: str) -> Project | None: ...

    async def list_projects(self, db: AsyncSession) -> list[Project]: ...
