"""Project DTO"""

from datetime import datetime

from pydantic import BaseModel, Field

from src.application.use_cases.manage_projects import CreateProjectInput, UpdateProjectInput
from src.domain.entities.project import Project
from src.domain.value_objects.page import Page
from src.interfaces.api.dto.common_dto import PaginationDTO


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="项目名称（唯一）")
    description: str | None = Field(default=None, description="项目描述")

    def to_input(self) -> CreateProjectInput:
        return CreateProjectInput(name=self.name, description=self.description)


class UpdateProjectRequest(BaseModel):
    """更新项目请求（未提供的字段不修改）"""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None

    def to_input(self) -> UpdateProjectInput:
        return UpdateProjectInput(name=self.name, description=self.description)


class ProjectResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            description=project.description,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectListResponse(BaseModel):
    data: list[ProjectResponse]
    pagination: PaginationDTO

    @classmethod
    def from_page(cls, page: Page) -> "ProjectListResponse":
        return cls(
            data=[ProjectResponse.from_entity(project) for project in page.items],
            pagination=PaginationDTO.from_page(page),
        )
