"""ManageConnectionsUseCase / ManageConditionsUseCase - 连接与连接条件管理

业务规则：
- 连接的源节点与目标节点必须是同一矩阵内的不同节点
- 只有 condition 类型的连接可以拥有条件
- 删除最后一个条件时，连接类型重置为 default
"""

from dataclasses import dataclass
from typing import Any

from src.domain.entities.connection import Connection, ConnectionCondition
from src.domain.exceptions import DomainError
from src.domain.ports.connection_repository import ConnectionRepository
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_repository import NodeRepository
from src.domain.value_objects.connection_type import ConnectionType


@dataclass
class CreateConnectionInput:
    source_id: str
    target_id: str
    type: ConnectionType = ConnectionType.DEFAULT
    config: dict[str, Any] | None = None
    conditions: list[dict[str, Any]] | None = None


@dataclass
class UpdateConnectionInput:
    """更新连接输入（None 表示不修改）

    conditions: 连接类型为 condition 时整体替换条件列表
    """

    source_id: str | None = None
    target_id: str | None = None
    type: ConnectionType | None = None
    config: dict[str, Any] | None = None
    conditions: list[dict[str, Any]] | None = None


def ensure_endpoints(
    node_repository: NodeRepository, matrix_id: str, source_id: str, target_id: str
) -> None:
    """校验连接端点属于该矩阵

    抛出：
        DomainError: 端点不存在或不属于该矩阵
    """
    nodes = {node.id: node for node in node_repository.find_by_ids([source_id, target_id])}
    for label, node_id in (("源节点", source_id), ("目标节点", target_id)):
        node = nodes.get(node_id)
        if node is None or node.matrix_id != matrix_id:
            raise DomainError(f"{label}不存在或不属于该矩阵: {node_id}")


class ManageConnectionsUseCase:
    """连接管理用例"""

    def __init__(
        self,
        connection_repository: ConnectionRepository,
        node_repository: NodeRepository,
        matrix_repository: MatrixRepository,
    ):
        self.connection_repository = connection_repository
        self.node_repository = node_repository
        self.matrix_repository = matrix_repository

    def list_by_matrix(self, matrix_id: str) -> list[Connection]:
        self.matrix_repository.get_by_id(matrix_id)
        return self.connection_repository.list_by_matrix(matrix_id)

    def get(self, connection_id: str) -> Connection:
        return self.connection_repository.get_by_id(connection_id)

    def create(self, matrix_id: str, input_data: CreateConnectionInput) -> Connection:
        """创建连接

        抛出：
            NotFoundError: 矩阵不存在
            DomainError: 端点非法、连接到自身或条件非法
        """
        self.matrix_repository.get_by_id(matrix_id)
        connection = Connection.create(
            matrix_id=matrix_id,
            source_id=input_data.source_id,
            target_id=input_data.target_id,
            type=input_data.type,
            config=input_data.config,
            conditions=input_data.conditions if input_data.type == ConnectionType.CONDITION else None,
        )
        ensure_endpoints(
            self.node_repository, matrix_id, connection.source_id, connection.target_id
        )
        self.connection_repository.save(connection)
        return connection

    def update(self, connection_id: str, input_data: UpdateConnectionInput) -> Connection:
        connection = self.connection_repository.get_by_id(connection_id)
        connection.update(
            type=input_data.type,
            config=input_data.config,
            source_id=input_data.source_id,
            target_id=input_data.target_id,
        )
        if input_data.source_id is not None or input_data.target_id is not None:
            ensure_endpoints(
                self.node_repository,
                connection.matrix_id,
                connection.source_id,
                connection.target_id,
            )
        if input_data.conditions is not None and connection.type == ConnectionType.CONDITION:
            connection.replace_conditions(input_data.conditions)
        self.connection_repository.save(connection)
        return connection

    def delete(self, connection_id: str) -> None:
        self.connection_repository.get_by_id(connection_id)
        self.connection_repository.delete(connection_id)


class ManageConditionsUseCase:
    """连接条件管理用例（条件作为 Connection 聚合的一部分持久化）"""

    def __init__(self, connection_repository: ConnectionRepository):
        self.connection_repository = connection_repository

    def list_for_connection(self, connection_id: str) -> list[ConnectionCondition]:
        """抛出：DomainError（连接不是 condition 类型）"""
        connection = self.connection_repository.get_by_id(connection_id)
        if connection.type != ConnectionType.CONDITION:
            raise DomainError("只有 condition 类型的连接可以设置条件")
        return connection.conditions

    def get(self, condition_id: str) -> tuple[ConnectionCondition, Connection]:
        connection = self.connection_repository.get_by_condition_id(condition_id)
        return connection.get_condition(condition_id), connection

    def create(self, connection_id: str, condition: dict[str, Any]) -> ConnectionCondition:
        connection = self.connection_repository.get_by_id(connection_id)
        created = connection.add_condition(condition)
        self.connection_repository.save(connection)
        return created

    def update(self, condition_id: str, condition: dict[str, Any]) -> ConnectionCondition:
        connection = self.connection_repository.get_by_condition_id(condition_id)
        target = connection.get_condition(condition_id)
        target.update(condition)
        self.connection_repository.save(connection)
        return target

    def delete(self, condition_id: str) -> Connection:
        """删除条件，返回更新后的连接"""
        connection = self.connection_repository.get_by_condition_id(condition_id)
        connection.remove_condition(condition_id)
        self.connection_repository.save(connection)
        return connection
