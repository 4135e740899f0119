"""NodeRepository Port - Node 实体的持久化接口"""

from typing import Protocol

from src.domain.entities.node import Node
from src.domain.value_objects.node_type import NodeType


class NodeRepository(Protocol):
    def save(self, node: Node) -> None: ...

    def get_by_id(self, node_id: str) -> Node: ...

    def find_by_id(self, node_id: str) -> Node | None: ...

    def list_by_matrix(self, matrix_id: str, type: NodeType | None = None) -> list[Node]: ...

    def find_by_ids(self, node_ids: list[str]) -> list[Node]: ...

    def delete(self, node_id: str) -> None:
        """删除节点（级联删除相关连接与触发器）"""
        ...
