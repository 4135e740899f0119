"""ExecutionRepository Port - MatrixExecution 聚合的持久化接口"""

from typing import Protocol

from src.domain.entities.execution import MatrixExecution


class ExecutionRepository(Protocol):
    def save(self, execution: MatrixExecution) -> None:
        """保存执行记录及全部节点执行记录"""
        ...

    def get_by_id(self, execution_id: str) -> MatrixExecution: ...

    def find_by_id(self, execution_id: str) -> MatrixExecution | None: ...

    def list_by_matrix(
        self, matrix_id: str, limit: int = 20, offset: int = 0
    ) -> tuple[list[MatrixExecution], int]:
        """按创建时间倒序列出矩阵的执行记录，返回 (列表, 总数)"""
        ...
