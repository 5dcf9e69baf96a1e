"""Pydantic schemas for the project registry API."""

from pydantic import BaseModel, Field

from src.sf_project.domain.models import Project


class CreateProjectRequest(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_\-]+$")
    name: str = Field(..., min_length=1, max_length=200)


class ProjectResponse(BaseModel):
    project_id: str
    name: str
    created_at: str

    @classmethod
    def from_domain(cls, project: Project) -> "ProjectResponse":
        return cls(
            project_id=project.id,
            name=project.name,
            created_at=project.created_at.isoformat() if project.created_at else "",
        )


class ProjectListResponse(BaseModel):
    items: list[ProjectResponse]
    total: int
