"""MatrixRepository Port - Matrix 实体的持久化接口"""

from typing import Protocol

from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.page import Page


class MatrixRepository(Protocol):
    def save(self, matrix: Matrix) -> None: ...

    def get_by_id(self, matrix_id: str) -> Matrix: ...

    def find_by_id(self, matrix_id: str) -> Matrix | None: ...

    def list_by_project(
        self,
        project_id: str,
        page: int,
        limit: int,
        status: MatrixStatus | None = None,
        version: int | None = None,
    ) -> Page:
        """分页列出项目下的矩阵（按创建时间倒序）"""
        ...

    def find_child_ids(self, matrix_id: str) -> list[str]:
        """返回以该矩阵为父矩阵的子矩阵 ID"""
        ...

    def get_graph(self, matrix_id: str) -> MatrixGraph:
        """加载矩阵图（矩阵 + 节点 + 连接 + 条件）

        抛出：
            NotFoundError: 矩阵不存在
        """
        ...

    def exists(self, matrix_id: str) -> bool: ...

    def delete(self, matrix_id: str) -> None:
        """删除矩阵（级联删除节点、连接、执行记录）"""
        ...
