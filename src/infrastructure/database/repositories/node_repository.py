"""SQLAlchemy Node Repository 实现"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.node import Node
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position
from src.infrastructure.database.models import NodeModel
from src.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyNodeRepository:
    """SQLAlchemy Node Repository 实现（实现 NodeRepository Port）"""

    def __init__(self, session: Session):
        self.session = session

    def _to_entity(self, model: NodeModel) -> Node:
        return Node(
            id=model.id,
            matrix_id=model.matrix_id,
            type=NodeType(model.type),
            name=model.name,
            config=dict(model.config or {}),
            position=Position(x=model.position_x, y=model.position_y),
            description=model.description,
            sub_matrix_id=model.sub_matrix_id,
            type_version=model.type_version,
            disabled=model.disabled,
            created_at=from_db(model.created_at),
            updated_at=from_db(model.updated_at),
        )

    def _to_model(self, entity: Node) -> NodeModel:
        return NodeModel(
            id=entity.id,
            matrix_id=entity.matrix_id,
            type=entity.type.value,
            name=entity.name,
            config=entity.config,
            position_x=entity.position.x,
            position_y=entity.position.y,
            description=entity.description,
            sub_matrix_id=entity.sub_matrix_id,
            type_version=entity.type_version,
            disabled=entity.disabled,
            created_at=to_db(entity.created_at),
            updated_at=to_db(entity.updated_at),
        )

    def save(self, node: Node) -> None:
        self.session.merge(self._to_model(node))

    def get_by_id(self, node_id: str) -> Node:
        """抛出：NotFoundError"""
        node = self.find_by_id(node_id)
        if node is None:
            raise NotFoundError(entity_type="Node", entity_id=node_id)
        return node

    def find_by_id(self, node_id: str) -> Node | None:
        model = self.session.get(NodeModel, node_id)
        return self._to_entity(model) if model is not None else None

    def list_by_matrix(self, matrix_id: str, type: NodeType | None = None) -> list[Node]:
        """按创建时间顺序列出矩阵的节点"""
        stmt = select(NodeModel).where(NodeModel.matrix_id == matrix_id)
        if type is not None:
            stmt = stmt.where(NodeModel.type == type.value)
        stmt = stmt.order_by(NodeModel.created_at, NodeModel.id)
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def find_by_ids(self, node_ids: list[str]) -> list[Node]:
        if not node_ids:
            return []
        stmt = select(NodeModel).where(NodeModel.id.in_(node_ids))
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def delete(self, node_id: str) -> None:
        """删除节点（幂等；ORM 级联删除相关连接与触发器）"""
        model = self.session.get(NodeModel, node_id)
        if model is not None:
            self.session.delete(model)
