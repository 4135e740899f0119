"""SQLAlchemy Matrix Repository 实现

除 Matrix 自身的持久化外，还负责组装执行/校验用的 MatrixGraph 快照
（节点与连接按创建时间排序，连接条件随连接一并加载）。
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.page import Page
from src.infrastructure.database.models import MatrixModel
from src.infrastructure.database.repositories._time import from_db, to_db
from src.infrastructure.database.repositories.connection_repository import (
    SQLAlchemyConnectionRepository,
)
from src.infrastructure.database.repositories.node_repository import SQLAlchemyNodeRepository


class SQLAlchemyMatrixRepository:
    """SQLAlchemy Matrix Repository 实现（实现 MatrixRepository Port）"""

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: MatrixModel) -> Matrix:
        return Matrix(
            id=model.id,
            project_id=model.project_id,
            name=model.name,
            description=model.description,
            status=MatrixStatus(model.status),
            version=model.version,
            parent_matrix_id=model.parent_matrix_id,
            config=dict(model.config or {}),
            created_at=from_db(model.created_at),
            updated_at=from_db(model.updated_at),
        )

    def _to_model(self, entity: Matrix) -> MatrixModel:
        return MatrixModel(
            id=entity.id,
            project_id=entity.project_id,
            name=entity.name,
            description=entity.description,
            status=entity.status.value,
            version=entity.version,
            parent_matrix_id=entity.parent_matrix_id,
            config=entity.config,
            created_at=to_db(entity.created_at),
            updated_at=to_db(entity.updated_at),
        )

    # ==================== Repository 方法 ====================

    def save(self, matrix: Matrix) -> None:
        self.session.merge(self._to_model(matrix))

    def get_by_id(self, matrix_id: str) -> Matrix:
        """抛出：NotFoundError"""
        matrix = self.find_by_id(matrix_id)
        if matrix is None:
            raise NotFoundError(entity_type="Matrix", entity_id=matrix_id)
        return matrix

    def find_by_id(self, matrix_id: str) -> Matrix | None:
        model = self.session.get(MatrixModel, matrix_id)
        return self._to_entity(model) if model is not None else None

    def list_by_project(
        self,
        project_id: str,
        page: int = 1,
        limit: int = 10,
        status: MatrixStatus | None = None,
        version: int | None = None,
    ) -> Page:
        stmt = select(MatrixModel).where(MatrixModel.project_id == project_id)
        if status is not None:
            stmt = stmt.where(MatrixModel.status == status.value)
        if version is not None:
            stmt = stmt.where(MatrixModel.version == version)

        total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        models = self.session.scalars(
            stmt.order_by(MatrixModel.created_at.desc(), MatrixModel.id)
            .offset((page - 1) * limit)
            .limit(limit)
        ).all()
        return Page(
            items=[self._to_entity(model) for model in models],
            total=total,
            page=page,
            limit=limit,
        )

    def find_child_ids(self, matrix_id: str) -> list[str]:
        stmt = (
            select(MatrixModel.id)
            .where(MatrixModel.parent_matrix_id == matrix_id)
            .order_by(MatrixModel.created_at, MatrixModel.id)
        )
        return list(self.session.scalars(stmt).all())

    def get_graph(self, matrix_id: str) -> MatrixGraph:
        """加载矩阵图

        抛出：
            NotFoundError: 矩阵不存在
        """
        matrix = self.get_by_id(matrix_id)
        return MatrixGraph(
            matrix=matrix,
            nodes=SQLAlchemyNodeRepository(self.session).list_by_matrix(matrix_id),
            connections=SQLAlchemyConnectionRepository(self.session).list_by_matrix(matrix_id),
        )

    def exists(self, matrix_id: str) -> bool:
        stmt = select(MatrixModel.id).where(MatrixModel.id == matrix_id)
        return self.session.scalar(stmt) is not None

    def delete(self, matrix_id: str) -> None:
        """删除 Matrix（幂等；ORM 级联删除节点、连接、执行记录）"""
        model = self.session.get(MatrixModel, matrix_id)
        if model is not None:
            self.session.delete(model)
