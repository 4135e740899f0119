"""SQLAlchemy Connection Repository 实现

聚合根管理：
- Connection 与其 ConnectionCondition 作为一个整体保存
- 条件列表通过 delete-orphan 级联同步（被移除的条件随保存删除）
"""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from src.domain.entities.connection import Connection, ConnectionCondition
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.connection_type import ConnectionType
from src.infrastructure.database.models import ConnectionConditionModel, ConnectionModel
from src.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyConnectionRepository:
    """SQLAlchemy Connection Repository 实现（实现 ConnectionRepository Port）"""

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: ConnectionModel) -> Connection:
        conditions = [
            ConnectionCondition(
                id=condition_model.id,
                connection_id=model.id,
                condition=dict(condition_model.condition or {}),
                created_at=from_db(condition_model.created_at),
                updated_at=from_db(condition_model.updated_at),
            )
            for condition_model in model.conditions
        ]
        return Connection(
            id=model.id,
            matrix_id=model.matrix_id,
            source_id=model.source_id,
            target_id=model.target_id,
            type=ConnectionType(model.type),
            config=dict(model.config or {}),
            conditions=conditions,
            created_at=from_db(model.created_at),
            updated_at=from_db(model.updated_at),
        )

    def _to_model(self, entity: Connection) -> ConnectionModel:
        model = ConnectionModel(
            id=entity.id,
            matrix_id=entity.matrix_id,
            source_id=entity.source_id,
            target_id=entity.target_id,
            type=entity.type.value,
            config=entity.config,
            created_at=to_db(entity.created_at),
            updated_at=to_db(entity.updated_at),
        )
        model.conditions = [
            ConnectionConditionModel(
                id=condition.id,
                connection_id=entity.id,
                condition=condition.condition,
                created_at=to_db(condition.created_at),
                updated_at=to_db(condition.updated_at),
            )
            for condition in entity.conditions
        ]
        return model

    # ==================== Repository 方法 ====================

    def save(self, connection: Connection) -> None:
        """保存连接及其条件（merge 同步条件列表）"""
        self.session.merge(self._to_model(connection))

    def get_by_id(self, connection_id: str) -> Connection:
        """抛出：NotFoundError"""
        connection = self.find_by_id(connection_id)
        if connection is None:
            raise NotFoundError(entity_type="Connection", entity_id=connection_id)
        return connection

    def find_by_id(self, connection_id: str) -> Connection | None:
        model = self.session.get(ConnectionModel, connection_id)
        return self._to_entity(model) if model is not None else None

    def get_by_condition_id(self, condition_id: str) -> Connection:
        """抛出：NotFoundError（条件不存在）"""
        stmt = select(ConnectionConditionModel.connection_id).where(
            ConnectionConditionModel.id == condition_id
        )
        connection_id = self.session.scalar(stmt)
        if connection_id is None:
            raise NotFoundError(entity_type="ConnectionCondition", entity_id=condition_id)
        return self.get_by_id(connection_id)

    def list_by_matrix(self, matrix_id: str) -> list[Connection]:
        stmt = (
            select(ConnectionModel)
            .where(ConnectionModel.matrix_id == matrix_id)
            .order_by(ConnectionModel.created_at, ConnectionModel.id)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def find_by_ids(self, connection_ids: list[str]) -> list[Connection]:
        if not connection_ids:
            return []
        stmt = select(ConnectionModel).where(ConnectionModel.id.in_(connection_ids))
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def delete_for_nodes(self, node_ids: list[str]) -> int:
        """删除与给定节点相关的全部连接，返回删除数量"""
        if not node_ids:
            return 0
        stmt = select(ConnectionModel).where(
            or_(ConnectionModel.source_id.in_(node_ids), ConnectionModel.target_id.in_(node_ids))
        )
        models = self.session.scalars(stmt).all()
        for model in models:
            self.session.delete(model)
        return len(models)

    def delete(self, connection_id: str) -> None:
        """删除连接（幂等；级联删除条件）"""
        model = self.session.get(ConnectionModel, connection_id)
        if model is not None:
            self.session.delete(model)
