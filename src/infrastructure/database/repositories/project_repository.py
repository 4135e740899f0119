"""SQLAlchemy Project Repository 实现

职责：
1. 转换（Translation）：领域实体 ⇄ ORM 模型
2. 持久化（Persistence）：保存、查询、删除
3. 异常转换：记录不存在 → NotFoundError
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.domain.entities.project import Project
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.page import Page
from src.infrastructure.database.models import ProjectModel
from src.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyProjectRepository:
    """SQLAlchemy Project Repository 实现

    实现领域层定义的 ProjectRepository Port 接口（Protocol，结构化子类型）

    依赖：
    - Session: SQLAlchemy 同步会话（事务由调用者控制）
    """

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: ProjectModel) -> Project:
        return Project(
            id=model.id,
            name=model.name,
            description=model.description,
            created_at=from_db(model.created_at),
            updated_at=from_db(model.updated_at),
        )

    def _to_model(self, entity: Project) -> ProjectModel:
        return ProjectModel(
            id=entity.id,
            name=entity.name,
            description=entity.description,
            created_at=to_db(entity.created_at),
            updated_at=to_db(entity.updated_at),
        )

    # ==================== Repository 方法 ====================

    def save(self, project: Project) -> None:
        """保存 Project（merge 自动判断新增或更新）"""
        self.session.merge(self._to_model(project))

    def get_by_id(self, project_id: str) -> Project:
        """抛出：NotFoundError"""
        project = self.find_by_id(project_id)
        if project is None:
            raise NotFoundError(entity_type="Project", entity_id=project_id)
        return project

    def find_by_id(self, project_id: str) -> Project | None:
        model = self.session.get(ProjectModel, project_id)
        return self._to_entity(model) if model is not None else None

    def find_by_name(self, name: str) -> Project | None:
        stmt = select(ProjectModel).where(ProjectModel.name == name)
        model = self.session.scalars(stmt).first()
        return self._to_entity(model) if model is not None else None

    def list(self, page: int = 1, limit: int = 10, search: str | None = None) -> Page:
        """分页列出项目

        实现策略：
        - search 使用 ILIKE 模糊匹配名称
        - 按 created_at 倒序
        """
        stmt = select(ProjectModel)
        if search:
            stmt = stmt.where(ProjectModel.name.ilike(f"%{search}%"))

        total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        models = self.session.scalars(
            stmt.order_by(ProjectModel.created_at.desc(), ProjectModel.id)
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return Page(
            items=[self._to_entity(model) for model in models],
            total=total,
            page=page,
            limit=limit,
        )

    def exists(self, project_id: str) -> bool:
        stmt = select(ProjectModel.id).where(ProjectModel.id == project_id)
        return self.session.scalar(stmt) is not None

    def delete(self, project_id: str) -> None:
        """删除 Project（幂等；ORM 级联删除矩阵）"""
        model = self.session.get(ProjectModel, project_id)
        if model is not None:
            self.session.delete(model)
