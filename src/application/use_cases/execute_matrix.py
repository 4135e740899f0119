"""ExecuteMatrixUseCase - 执行矩阵

业务场景：
- 端到端执行：从所有启用的 trigger 节点开始（矩阵必须处于 active 状态）
- 节点执行：编辑器中从某个节点开始执行（可只执行该节点），草稿矩阵同样允许
- 后台执行：先持久化 CREATED 状态的执行记录并返回，再由后台任务执行

持久化：
- 执行引擎每次状态流转都会回调 _persist()，执行记录随即保存并提交
- 进程中断时可通过 GET /executions/{id} 查到最后状态
"""

from collections.abc import Callable
from dataclasses import asdict
from typing import Any

from src.domain.entities.execution import MatrixExecution
from src.domain.entities.matrix import MatrixGraph
from src.domain.exceptions import DomainError, GraphValidationError
from src.domain.ports.execution_repository import ExecutionRepository
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.ports.node_repository import NodeRepository
from src.domain.services.graph_validator import GraphIssue, GraphValidator
from src.domain.services.matrix_execution_engine import MatrixExecutionEngine
from src.domain.value_objects.execution_status import ExecutionStatus


class ExecuteMatrixUseCase:
    """矩阵执行用例

    依赖：
    - MatrixRepository / NodeRepository / ExecutionRepository
    - MatrixExecutionEngine（未提供时使用 executor_registry 构造默认引擎）
    - commit: 提交当前事务（每次持久化执行记录后调用）
    """

    def __init__(
        self,
        matrix_repository: MatrixRepository,
        node_repository: NodeRepository,
        execution_repository: ExecutionRepository,
        engine: MatrixExecutionEngine | None = None,
        executor_registry: NodeExecutorRegistry | None = None,
        commit: Callable[[], None] | None = None,
    ):
        if engine is None:
            if executor_registry is None:
                raise ValueError("engine 与 executor_registry 至少提供一个")
            engine = MatrixExecutionEngine(
                executor_registry, graph_loader=matrix_repository.get_graph
            )
        self.matrix_repository = matrix_repository
        self.node_repository = node_repository
        self.execution_repository = execution_repository
        self.engine = engine
        self.validator = GraphValidator()
        self._commit = commit

    # ------------------------------------------------------------------
    # 准备（同步，校验 + 创建执行记录）
    # ------------------------------------------------------------------

    def prepare(
        self, matrix_id: str, input: Any = None, trigger_id: str | None = None
    ) -> tuple[MatrixGraph, MatrixExecution]:
        """端到端执行前的校验与执行记录创建

        抛出：
            NotFoundError: 矩阵不存在
            DomainError: 矩阵未激活
            GraphValidationError: 矩阵图不合法或没有可用的 trigger 节点
        """
        matrix = self.matrix_repository.get_by_id(matrix_id)
        matrix.ensure_executable()
        graph = self.matrix_repository.get_graph(matrix_id)

        entry_node_ids = graph.trigger_node_ids()
        if not entry_node_ids:
            raise GraphValidationError(
                [asdict(GraphIssue(code="no_trigger", message="矩阵没有可用的 trigger 节点"))]
            )
        self.validator.validate(graph, entry_node_ids).raise_if_invalid()

        execution = MatrixExecution.create(
            matrix_id=matrix_id,
            entry_node_ids=entry_node_ids,
            input=input,
            trigger_id=trigger_id,
        )
        self._persist(execution)
        return graph, execution

    def prepare_from_node(
        self,
        matrix_id: str,
        node_id: str,
        input: Any = None,
        trigger_id: str | None = None,
    ) -> tuple[MatrixGraph, MatrixExecution]:
        """从指定节点执行前的校验与执行记录创建

        抛出：
            NotFoundError: 矩阵或节点不存在
            DomainError: 节点不属于该矩阵
            GraphValidationError: 矩阵图不合法
        """
        self.matrix_repository.get_by_id(matrix_id)
        node = self.node_repository.get_by_id(node_id)
        if node.matrix_id != matrix_id:
            raise DomainError(f"节点 {node_id} 不属于矩阵 {matrix_id}")

        graph = self.matrix_repository.get_graph(matrix_id)
        self.validator.validate(graph, [node_id]).raise_if_invalid()

        execution = MatrixExecution.create(
            matrix_id=matrix_id,
            entry_node_ids=[node_id],
            input=input,
            trigger_id=trigger_id,
        )
        self._persist(execution)
        return graph, execution

    # ------------------------------------------------------------------
    # 执行
    # ------------------------------------------------------------------

    async def run(
        self, graph: MatrixGraph, execution: MatrixExecution, downstream: bool = True
    ) -> MatrixExecution:
        """运行已准备好的执行记录（节点失败记录在执行记录上，不向外抛出）"""
        return await self.engine.run(
            graph, execution, downstream=downstream, on_change=self._persist
        )

    async def execute(
        self, matrix_id: str, input: Any = None, trigger_id: str | None = None
    ) -> MatrixExecution:
        graph, execution = self.prepare(matrix_id, input, trigger_id)
        return await self.run(graph, execution)

    async def execute_from_node(
        self,
        matrix_id: str,
        node_id: str,
        input: Any = None,
        downstream: bool = True,
        trigger_id: str | None = None,
    ) -> MatrixExecution:
        graph, execution = self.prepare_from_node(matrix_id, node_id, input, trigger_id)
        return await self.run(graph, execution, downstream=downstream)

    async def run_pending(self, execution_id: str) -> MatrixExecution:
        """执行已持久化但尚未开始的执行记录（后台任务使用）"""
        execution = self.execution_repository.get_by_id(execution_id)
        if execution.status != ExecutionStatus.CREATED:
            return execution
        graph = self.matrix_repository.get_graph(execution.matrix_id)
        return await self.run(graph, execution)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def get_execution(self, execution_id: str) -> MatrixExecution:
        return self.execution_repository.get_by_id(execution_id)

    def list_executions(
        self, matrix_id: str, limit: int = 20, offset: int = 0
    ) -> tuple[list[MatrixExecution], int]:
        self.matrix_repository.get_by_id(matrix_id)
        return self.execution_repository.list_by_matrix(matrix_id, limit=limit, offset=offset)

    def _persist(self, execution: MatrixExecution) -> None:
        self.execution_repository.save(execution)
        if self._commit is not None:
            self._commit()
