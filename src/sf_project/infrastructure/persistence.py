"""ProjectRepository — raw SQL over the projects table."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sf_project.domain.models import Project

_INSERT_PROJECT_SQL = text("""
    INSERT INTO projects (id, name)
    VALUES (:id, :name)
    ON CONFLICT (id) DO NOTHING
    RETURNING id, name, created_at
""")

_GET_PROJECT_SQL = text("""
    SELECT id, name, created_at FROM projects WHERE id = :id
""")

_LIST_PROJECTS_SQL = text("""
    SELECT id, name, created_at FROM projects ORDER BY id
""")


def _row_to_project(row: object) -> Project:
    return Project(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class ProjectRepository:
    async def create_project(
        self, db: AsyncSession, project_id: str, name: str
    ) -> Project | None:
        """Insert a project. Returns None when the id is already taken."""
        result = await db.execute(_INSERT_PROJECT_SQL, {"id": project_id, "name": name})
        row = result.fetchone()
        return _row_to_project(row) if row else None

    async def get_project(self, db: AsyncSession, project_id: str) -> Project | None:
        result = await db.execute(_GET_PROJECT_SQL, {"id": project_id})
        row = result.fetchone()
        return _row_to_project(row) if row else None

    async def list_projects(self, db: AsyncSession) -> list[Project]:
        result = await db.execute(_LIST_PROJECTS_SQL)
        return [_row_to_project(row) for row in result.fetchall()]
