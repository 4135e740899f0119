"""UpdateMatrixGraphUseCase - 矩阵图批量编辑

编辑器拖拽、批量粘贴等场景一次提交多个节点/连接变更：
- 批量创建 / 更新 / 删除节点
- 批量创建 / 更新 / 删除连接
- 所有 ID 必须属于该矩阵，否则整批拒绝（400）
- 删除节点前先删除与其相关的连接
"""

from dataclasses import dataclass

from src.application.use_cases.manage_connections import (
    CreateConnectionInput,
    UpdateConnectionInput,
)
from src.application.use_cases.manage_nodes import CreateNodeInput, UpdateNodeInput
from src.domain.entities.connection import Connection
from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.ports.connection_repository import ConnectionRepository
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.trigger_repository import TriggerRepository
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.domain.value_objects.connection_type import ConnectionType


@dataclass
class NodeChange:
    id: str
    changes: UpdateNodeInput


@dataclass
class ConnectionChange:
    id: str
    changes: UpdateConnectionInput


class UpdateMatrixGraphUseCase:
    """矩阵图批量编辑用例"""

    def __init__(
        self,
        matrix_repository: MatrixRepository,
        node_repository: NodeRepository,
        connection_repository: ConnectionRepository,
        trigger_repository: TriggerRepository,
        scheduler: TriggerScheduler | None = None,
    ):
        self.matrix_repository = matrix_repository
        self.node_repository = node_repository
        self.connection_repository = connection_repository
        self.trigger_repository = trigger_repository
        self.scheduler = scheduler

    # ------------------------------------------------------------------
    # 节点
    # ------------------------------------------------------------------

    def create_nodes(self, matrix_id: str, inputs: list[CreateNodeInput]) -> list[Node]:
        self.matrix_repository.get_by_id(matrix_id)
        nodes = []
        for input_data in inputs:
            if input_data.sub_matrix_id:
                self.matrix_repository.get_by_id(input_data.sub_matrix_id)
            nodes.append(
                Node.create(
                    matrix_id=matrix_id,
                    type=input_data.type,
                    name=input_data.name,
                    config=input_data.config,
                    position=input_data.position,
                    description=input_data.description,
                    sub_matrix_id=input_data.sub_matrix_id,
                    type_version=input_data.type_version,
                    disabled=input_data.disabled,
                )
            )
        for node in nodes:
            self.node_repository.save(node)
        return nodes

    def update_nodes(self, matrix_id: str, changes: list[NodeChange]) -> list[Node]:
        self.matrix_repository.get_by_id(matrix_id)
        nodes = self._owned_nodes(matrix_id, [change.id for change in changes])
        for change in changes:
            node = nodes[change.id]
            if change.changes.sub_matrix_id:
                self.matrix_repository.get_by_id(change.changes.sub_matrix_id)
            node.update(
                name=change.changes.name,
                description=change.changes.description,
                config=change.changes.config,
                position=change.changes.position,
                sub_matrix_id=change.changes.sub_matrix_id,
                type_version=change.changes.type_version,
                disabled=change.changes.disabled,
            )
            self.node_repository.save(node)
        return [nodes[change.id] for change in changes]

    def delete_nodes(self, matrix_id: str, node_ids: list[str]) -> int:
        """删除节点及其连接，返回删除的节点数"""
        self.matrix_repository.get_by_id(matrix_id)
        nodes = self._owned_nodes(matrix_id, node_ids)
        triggers = self.trigger_repository.find_by_node_ids(list(nodes))

        self.connection_repository.delete_for_nodes(list(nodes))
        for node_id in nodes:
            self.node_repository.delete(node_id)

        if self.scheduler is not None:
            for trigger in triggers.values():
                self.scheduler.remove(trigger.id)
        return len(nodes)

    # ------------------------------------------------------------------
    # 连接
    # ------------------------------------------------------------------

    def create_connections(
        self, matrix_id: str, inputs: list[CreateConnectionInput]
    ) -> list[Connection]:
        self.matrix_repository.get_by_id(matrix_id)
        connections = [
            Connection.create(
                matrix_id=matrix_id,
                source_id=input_data.source_id,
                target_id=input_data.target_id,
                type=input_data.type,
                config=input_data.config,
                conditions=(
                    input_data.conditions if input_data.type == ConnectionType.CONDITION else None
                ),
            )
            for input_data in inputs
        ]
        endpoint_ids = {c.source_id for c in connections} | {c.target_id for c in connections}
        self._owned_nodes(matrix_id, list(endpoint_ids))
        for connection in connections:
            self.connection_repository.save(connection)
        return connections

    def update_connections(
        self, matrix_id: str, changes: list[ConnectionChange]
    ) -> list[Connection]:
        self.matrix_repository.get_by_id(matrix_id)
        connections = self._owned_connections(matrix_id, [change.id for change in changes])
        for change in changes:
            connection = connections[change.id]
            connection.update(
                type=change.changes.type,
                config=change.changes.config,
                source_id=change.changes.source_id,
                target_id=change.changes.target_id,
            )
            if change.changes.conditions is not None and connection.type == ConnectionType.CONDITION:
                connection.replace_conditions(change.changes.conditions)

        endpoint_ids = set()
        for connection in connections.values():
            endpoint_ids.update((connection.source_id, connection.target_id))
        self._owned_nodes(matrix_id, list(endpoint_ids))

        for connection in connections.values():
            self.connection_repository.save(connection)
        return [connections[change.id] for change in changes]

    def delete_connections(self, matrix_id: str, connection_ids: list[str]) -> int:
        self.matrix_repository.get_by_id(matrix_id)
        connections = self._owned_connections(matrix_id, connection_ids)
        for connection_id in connections:
            self.connection_repository.delete(connection_id)
        return len(connections)

    def _owned_nodes(self, matrix_id: str, node_ids: list[str]) -> dict[str, Node]:
        """抛出：DomainError（存在不属于该矩阵的节点）"""
        unique_ids = list(dict.fromkeys(node_ids))
        nodes = {
            node.id: node
            for node in self.node_repository.find_by_ids(unique_ids)
            if node.matrix_id == matrix_id
        }
        if len(nodes) != len(unique_ids):
            raise DomainError("部分节点不存在或不属于该矩阵")
        return nodes

    def _owned_connections(self, matrix_id: str, connection_ids: list[str]) -> dict[str, Connection]:
        unique_ids = list(dict.fromkeys(connection_ids))
        connections = {
            connection.id: connection
            for connection in self.connection_repository.find_by_ids(unique_ids)
            if connection.matrix_id == matrix_id
        }
        if len(connections) != len(unique_ids):
            raise DomainError("部分连接不存在或不属于该矩阵")
        return connections
