"""MatrixExecutionEngine（矩阵执行引擎）

Domain 层服务：负责按依赖关系执行矩阵图

职责：
- 校验矩阵图（无环、引用完整），确定参与执行的子图（入口节点可达集合）
- 波次调度：所有入边均已决的节点进入就绪集合，同一波次并发执行（Semaphore 限流）
- 扇入：节点等待所有参与执行的上游节点决出结果；至少一条入边被激活才执行，否则跳过
- 扇出：按连接类型（default/success/error/condition）决定激活哪些出边
- 重试与超时：RetryPolicy 指数退避，asyncio.wait_for 限制单次尝试时长
- 持久化：每次状态流转后回调 on_change（由 Use Case 负责落库）

失败语义：
- 节点重试耗尽后失败，且没有 error 类型出边 → 整个执行失败，剩余节点标记为跳过
- 节点失败但有 error 类型出边 → 视为已处理，执行继续
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from src.domain.entities.connection import Connection
from src.domain.entities.execution import MatrixExecution
from src.domain.entities.matrix import MatrixGraph
from src.domain.entities.node import Node
from src.domain.exceptions import (
    DomainError,
    ExpressionEvaluationError,
    UnsafeExpressionError,
)
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.condition_evaluator import ConditionEvaluator
from src.domain.services.graph_validator import GraphValidator
from src.domain.value_objects.connection_type import ConnectionType
from src.domain.value_objects.execution_status import NodeExecutionStatus
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.retry_policy import RetryPolicy

logger = logging.getLogger(__name__)

GraphLoader = Callable[[str], MatrixGraph]
ExecutionListener = Callable[[MatrixExecution], None]
SubMatrixRunner = Callable[[str, Any], Awaitable[MatrixExecution]]

ENTRY_INPUT_KEY = "$input"


@dataclass
class NodeOutcome:
    status: NodeExecutionStatus
    output: Any = None
    error: str | None = None


class MatrixExecutionEngine:
    """矩阵执行引擎

    参数：
        executor_registry: 节点执行器注册表
        condition_evaluator: 连接条件求值器
        retry_policy: 默认重试策略（节点 config.retry 可覆盖）
        node_timeout: 默认单次尝试超时（秒，节点 config.timeout 可覆盖）
        max_concurrent_nodes: 同一波次最大并发节点数
        max_sub_matrix_depth: 子矩阵最大嵌套深度
        graph_loader: 按矩阵 ID 加载 MatrixGraph（子矩阵执行使用）
        sleep: 重试等待函数（测试可替换）
    """

    def __init__(
        self,
        executor_registry: NodeExecutorRegistry,
        condition_evaluator: ConditionEvaluator | None = None,
        retry_policy: RetryPolicy | None = None,
        node_timeout: float = 60.0,
        max_concurrent_nodes: int = 5,
        max_sub_matrix_depth: int = 5,
        graph_loader: GraphLoader | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if max_concurrent_nodes < 1:
            raise DomainError("max_concurrent_nodes 必须大于等于 1")
        self._registry = executor_registry
        self._conditions = condition_evaluator or ConditionEvaluator()
        self._validator = GraphValidator()
        self._retry_policy = retry_policy or RetryPolicy()
        self._node_timeout = node_timeout
        self._max_concurrent_nodes = max_concurrent_nodes
        self._max_sub_matrix_depth = max_sub_matrix_depth
        self._graph_loader = graph_loader
        self._sleep = sleep

    async def run(
        self,
        graph: MatrixGraph,
        execution: MatrixExecution,
        *,
        downstream: bool = True,
        on_change: ExecutionListener | None = None,
        depth: int = 0,
        call_stack: tuple[str, ...] = (),
    ) -> MatrixExecution:
        """执行矩阵图

        参数：
            graph: 矩阵图
            execution: 处于 CREATED 状态的执行记录（entry_node_ids 为入口）
            downstream: False 时只执行入口节点本身
            on_change: 状态流转回调（持久化）
            depth / call_stack: 子矩阵嵌套信息

        返回：
            执行结束（COMPLETED/FAILED）的执行记录；矩阵图不合法时直接标记为 FAILED
        """
        report = self._validator.validate(graph, execution.entry_node_ids)
        if not report.is_valid:
            error = "; ".join(issue.message for issue in report.errors)
            execution.fail(f"矩阵图校验失败: {error}")
            self._notify(on_change, execution)
            logger.warning(
                "矩阵图校验失败，未执行: %s",
                error,
                extra={"execution_id": execution.id, "matrix_id": execution.matrix_id},
            )
            return execution

        node_map = graph.node_map()
        entry_ids = set(execution.entry_node_ids)
        participating = graph.reachable_from(list(entry_ids)) if downstream else set(entry_ids)
        order = [node.id for node in graph.nodes if node.id in participating]
        incoming = {
            node_id: [c for c in graph.incoming(node_id) if c.source_id in participating]
            for node_id in order
        }
        outgoing = {
            node_id: [c for c in graph.outgoing(node_id) if c.target_id in participating]
            for node_id in order
        }

        for node_id in order:
            execution.node_execution(node_id)
        execution.start()
        self._notify(on_change, execution)
        log_extra = {"execution_id": execution.id, "matrix_id": execution.matrix_id}
        logger.info("矩阵开始执行: %d 个节点", len(order), extra=log_extra)

        stack = (*call_stack, graph.matrix.id)

        async def run_sub_matrix(matrix_id: str, sub_input: Any) -> MatrixExecution:
            return await self._run_sub_matrix(
                matrix_id, sub_input, execution, depth, stack, on_change
            )

        context: dict[str, Any] = {
            "execution_id": execution.id,
            "matrix_id": execution.matrix_id,
            "initial_input": execution.input,
            "depth": depth,
            "run_sub_matrix": run_sub_matrix,
        }

        semaphore = asyncio.Semaphore(self._max_concurrent_nodes)
        outcomes: dict[str, NodeOutcome] = {}
        activated: set[str] = set()
        pending = list(order)
        failure: str | None = None

        while pending and failure is None:
            ready = [
                node_id
                for node_id in pending
                if all(c.source_id in outcomes for c in incoming[node_id])
            ]
            if not ready:
                break
            pending = [node_id for node_id in pending if node_id not in ready]

            runnable: list[tuple[Node, dict[str, Any]]] = []
            for node_id in ready:
                node = node_map[node_id]
                if node_id in entry_ids:
                    inputs = {ENTRY_INPUT_KEY: execution.input}
                else:
                    active = [c for c in incoming[node_id] if c.id in activated]
                    if not active:
                        outcomes[node_id] = self._skip(execution, node_id, "上游连接均未激活")
                        continue
                    inputs = {c.source_id: outcomes[c.source_id].output for c in active}
                if node.disabled:
                    outcomes[node_id] = self._skip(execution, node_id, "节点已禁用")
                    continue
                runnable.append((node, inputs))
            if len(runnable) < len(ready):
                self._notify(on_change, execution)

            results = await asyncio.gather(
                *(
                    self._run_node(node, inputs, execution, context, semaphore, on_change)
                    for node, inputs in runnable
                )
            )

            for (node, _), outcome in zip(runnable, results):
                outcomes[node.id] = outcome
                fired = self._activated_connections(node, outcome, outgoing[node.id])
                activated.update(c.id for c in fired)
                handled = any(c.type == ConnectionType.ERROR for c in outgoing[node.id])
                if outcome.status == NodeExecutionStatus.ERROR and not handled and failure is None:
                    failure = f"节点 {node.name}（{node.id}）执行失败: {outcome.error}"

        for node_id in pending:
            outcomes[node_id] = self._skip(execution, node_id, "执行已终止")

        if failure is not None:
            execution.fail(failure)
            logger.warning("矩阵执行失败: %s", failure, extra=log_extra)
        else:
            sink_outputs = {
                node_id: outcomes[node_id].output
                for node_id in order
                if outcomes[node_id].status == NodeExecutionStatus.COMPLETED
                and not any(c.id in activated for c in outgoing[node_id])
            }
            execution.complete(sink_outputs)
            logger.info("矩阵执行完成", extra=log_extra)

        self._notify(on_change, execution)
        return execution

    async def _run_node(
        self,
        node: Node,
        inputs: dict[str, Any],
        execution: MatrixExecution,
        context: dict[str, Any],
        semaphore: asyncio.Semaphore,
        on_change: ExecutionListener | None,
    ) -> NodeOutcome:
        """执行单个节点（含重试、超时）"""
        node_execution = execution.node_execution(node.id)
        log_extra = {
            "execution_id": execution.id,
            "matrix_id": execution.matrix_id,
            "node_id": node.id,
        }

        try:
            executor = self._registry.resolve(node.type.value)
            policy = self._retry_policy.with_overrides(node.config.get("retry"))
            timeout = self._resolve_timeout(node)
        except DomainError as e:
            node_execution.start(inputs)
            node_execution.fail(str(e))
            self._notify(on_change, execution)
            return NodeOutcome(NodeExecutionStatus.ERROR, error=str(e))

        async with semaphore:
            while True:
                node_execution.start(inputs)
                self._notify(on_change, execution)
                attempt_extra = {**log_extra, "attempt": node_execution.attempts}
                logger.debug("节点开始执行: %s", node.name, extra=attempt_extra)

                try:
                    output = await asyncio.wait_for(
                        executor.execute(node, inputs, context), timeout=timeout
                    )
                except asyncio.TimeoutError:
                    error = f"节点执行超时（{timeout}s）"
                except Exception as e:
                    error = str(e) or e.__class__.__name__
                else:
                    node_execution.complete(output)
                    self._notify(on_change, execution)
                    logger.debug("节点执行完成: %s", node.name, extra=attempt_extra)
                    return NodeOutcome(NodeExecutionStatus.COMPLETED, output=output)

                node_execution.fail(error)
                self._notify(on_change, execution)
                logger.warning("节点执行失败: %s: %s", node.name, error, extra=attempt_extra)

                if not policy.should_retry(node_execution.attempts):
                    return NodeOutcome(NodeExecutionStatus.ERROR, error=error)

                delay = policy.delay_for(node_execution.attempts)
                node_execution.retry()
                self._notify(on_change, execution)
                await self._sleep(delay)

    def _activated_connections(
        self, node: Node, outcome: NodeOutcome, connections: list[Connection]
    ) -> list[Connection]:
        return [c for c in connections if self._is_activated(node, outcome, c)]

    def _is_activated(self, node: Node, outcome: NodeOutcome, connection: Connection) -> bool:
        if outcome.status == NodeExecutionStatus.ERROR:
            return connection.type == ConnectionType.ERROR
        if outcome.status != NodeExecutionStatus.COMPLETED:
            return False
        if connection.type == ConnectionType.ERROR:
            return False

        if connection.type == ConnectionType.CONDITION:
            try:
                return self._conditions.evaluate_all(
                    [c.condition for c in connection.conditions], outcome.output
                )
            except (ExpressionEvaluationError, UnsafeExpressionError) as e:
                logger.warning(
                    "连接条件求值失败，视为不成立: %s",
                    e,
                    extra={"node_id": node.id, "connection_id": connection.id},
                )
                return False

        if node.type == NodeType.CONDITION:
            result = self._branch_result(outcome.output)
            if connection.type == ConnectionType.SUCCESS:
                return result
            branch = str(connection.config.get("branch", "true")).lower()
            return branch == ("true" if result else "false")

        return True

    @staticmethod
    def _branch_result(output: Any) -> bool:
        if isinstance(output, dict) and "result" in output:
            return bool(output["result"])
        return bool(output)

    def _resolve_timeout(self, node: Node) -> float:
        timeout = node.config.get("timeout", self._node_timeout)
        try:
            timeout = float(timeout)
        except (TypeError, ValueError) as e:
            raise DomainError(f"timeout 配置非法: {timeout}") from e
        if timeout <= 0:
            raise DomainError("timeout 必须大于 0")
        return timeout

    def _skip(self, execution: MatrixExecution, node_id: str, reason: str) -> NodeOutcome:
        execution.node_execution(node_id).skip(reason)
        return NodeOutcome(NodeExecutionStatus.SKIPPED)

    async def _run_sub_matrix(
        self,
        matrix_id: str,
        sub_input: Any,
        parent: MatrixExecution,
        depth: int,
        call_stack: tuple[str, ...],
        on_change: ExecutionListener | None,
    ) -> MatrixExecution:
        """嵌套执行子矩阵

        异常：
            DomainError: 未配置加载器、超过嵌套深度、循环引用或子矩阵没有 trigger 节点
        """
        if self._graph_loader is None:
            raise DomainError("未配置子矩阵加载器，无法执行子矩阵")
        if depth + 1 > self._max_sub_matrix_depth:
            raise DomainError(f"子矩阵嵌套超过最大深度 {self._max_sub_matrix_depth}")
        if matrix_id in call_stack:
            chain = " -> ".join((*call_stack, matrix_id))
            raise DomainError(f"检测到子矩阵循环引用: {chain}")

        graph = self._graph_loader(matrix_id)
        entry_node_ids = graph.trigger_node_ids()
        if not entry_node_ids:
            raise DomainError(f"子矩阵 {matrix_id} 没有可用的 trigger 节点")

        child = MatrixExecution.create(
            matrix_id=matrix_id,
            entry_node_ids=entry_node_ids,
            input=sub_input,
            parent_execution_id=parent.id,
        )
        self._notify(on_change, child)
        return await self.run(
            graph, child, on_change=on_change, depth=depth + 1, call_stack=call_stack
        )

    @staticmethod
    def _notify(on_change: ExecutionListener | None, execution: MatrixExecution) -> None:
        if on_change is not None:
            on_change(execution)
