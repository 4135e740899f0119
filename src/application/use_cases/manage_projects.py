"""ManageProjectsUseCase - 项目管理用例

职责：
1. 分页查询、获取项目
2. 创建 / 更新项目（名称全局唯一）
3. 删除项目（级联删除矩阵由持久化层保证）
"""

from dataclasses import dataclass

from src.domain.entities.project import Project, validate_name
from src.domain.exceptions import ConflictError
from src.domain.ports.project_repository import ProjectRepository
from src.domain.value_objects.page import Page


@dataclass
class CreateProjectInput:
    name: str
    description: str | None = None


@dataclass
class UpdateProjectInput:
    """更新项目输入（None 表示不修改）"""

    name: str | None = None
    description: str | None = None


class ManageProjectsUseCase:
    """项目管理用例

    依赖：
    - ProjectRepository: 项目仓储
    """

    def __init__(self, project_repository: ProjectRepository):
        self.project_repository = project_repository

    def list(self, page: int = 1, limit: int = 10, search: str | None = None) -> Page:
        return self.project_repository.list(page=page, limit=limit, search=search)

    def get(self, project_id: str) -> Project:
        """抛出：NotFoundError"""
        return self.project_repository.get_by_id(project_id)

    def create(self, input_data: CreateProjectInput) -> Project:
        """创建项目

        抛出：
            DomainError: 名称非法
            ConflictError: 名称已存在
        """
        project = Project.create(name=input_data.name, description=input_data.description)
        self._ensure_unique_name(project.name)
        self.project_repository.save(project)
        return project

    def update(self, project_id: str, input_data: UpdateProjectInput) -> Project:
        """更新项目

        抛出：
            NotFoundError: 项目不存在
            ConflictError: 新名称与其他项目重复
        """
        project = self.project_repository.get_by_id(project_id)
        if input_data.name is not None:
            self._ensure_unique_name(validate_name(input_data.name), exclude_id=project.id)
        project.update(name=input_data.name, description=input_data.description)
        self.project_repository.save(project)
        return project

    def delete(self, project_id: str) -> None:
        """抛出：NotFoundError"""
        self.project_repository.get_by_id(project_id)
        self.project_repository.delete(project_id)

    def _ensure_unique_name(self, name: str, exclude_id: str | None = None) -> None:
        existing = self.project_repository.find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(f"项目名称已存在: {name}")
