"""ConnectionRepository Port - Connection 聚合（含 ConnectionCondition）的持久化接口"""

from typing import Protocol

from src.domain.entities.connection import Connection


class ConnectionRepository(Protocol):
    def save(self, connection: Connection) -> None:
        """保存连接及其条件（条件列表整体同步）"""
        ...

    def get_by_id(self, connection_id: str) -> Connection: ...

    def find_by_id(self, connection_id: str) -> Connection | None: ...

    def get_by_condition_id(self, condition_id: str) -> Connection:
        """根据条件 ID 获取所属连接

        抛出：
            NotFoundError: 条件不存在
        """
        ...

    def list_by_matrix(self, matrix_id: str) -> list[Connection]: ...

    def find_by_ids(self, connection_ids: list[str]) -> list[Connection]: ...

    def delete_for_nodes(self, node_ids: list[str]) -> int:
        """删除与给定节点相关的全部连接，返回删除数量"""
        ...

    def delete(self, connection_id: str) -> None: ...
