"""执行记录实体 - MatrixExecution（聚合根）与 NodeExecution

业务定义：
- MatrixExecution 是矩阵的一次执行实例（端到端或从某个节点开始）
- NodeExecution 记录单个节点在该次执行中的状态、尝试次数、输入输出
- 引擎每次状态流转后都会持久化执行记录，进程中断后可查询到最后状态

状态机：
- MatrixExecution: CREATED → RUNNING → COMPLETED/FAILED
- NodeExecution: PENDING → RUNNING → COMPLETED/ERROR，ERROR → RETRYING → RUNNING，
  PENDING → SKIPPED
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError
from src.domain.value_objects.execution_status import ExecutionStatus, NodeExecutionStatus


@dataclass
class NodeExecution:
    """节点执行记录

    属性说明：
    - id: 唯一标识符（nexec_ 前缀）
    - execution_id: 所属 MatrixExecution
    - node_id: 节点 ID
    - status: 节点执行状态
    - attempts: 已开始的尝试次数
    - input / output / error: 最近一次尝试的输入、输出、错误
    """

    id: str
    execution_id: str
    node_id: str
    status: NodeExecutionStatus = NodeExecutionStatus.PENDING
    attempts: int = 0
    input: Any = None
    output: Any = None
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def create(cls, execution_id: str, node_id: str) -> "NodeExecution":
        return cls(
            id=f"nexec_{uuid4().hex[:8]}",
            execution_id=execution_id,
            node_id=node_id,
        )

    def _transition(self, target: NodeExecutionStatus) -> None:
        if not self.status.can_transition_to(target):
            raise DomainError(
                f"节点 {self.node_id} 状态无法从 {self.status.value} 流转到 {target.value}"
            )
        self.status = target

    def start(self, input: Any = None) -> None:
        """PENDING/RETRYING → RUNNING"""
        self._transition(NodeExecutionStatus.RUNNING)
        self.attempts += 1
        self.input = input
        self.error = None
        if self.started_at is None:
            self.started_at = datetime.now(UTC)

    def complete(self, output: Any) -> None:
        """RUNNING → COMPLETED"""
        self._transition(NodeExecutionStatus.COMPLETED)
        self.output = output
        self.finished_at = datetime.now(UTC)

    def fail(self, error: str) -> None:
        """RUNNING → ERROR"""
        self._transition(NodeExecutionStatus.ERROR)
        self.error = error
        self.finished_at = datetime.now(UTC)

    def retry(self) -> None:
        """ERROR → RETRYING"""
        self._transition(NodeExecutionStatus.RETRYING)
        self.finished_at = None

    def skip(self, reason: str | None = None) -> None:
        """PENDING → SKIPPED"""
        self._transition(NodeExecutionStatus.SKIPPED)
        self.error = reason
        self.finished_at = datetime.now(UTC)


@dataclass
class MatrixExecution:
    """矩阵执行记录（聚合根）

    属性说明：
    - id: 唯一标识符（exec_ 前缀）
    - matrix_id: 被执行的矩阵
    - entry_node_ids: 入口节点
    - trigger_id: 触发本次执行的触发器（可选）
    - parent_execution_id: 父执行（子矩阵嵌套执行时设置）
    - status: 执行状态
    - input / output / error: 初始输入、最终输出（汇节点输出）、错误信息
    - node_executions: 节点执行记录
    """

    id: str
    matrix_id: str
    entry_node_ids: list[str] = field(default_factory=list)
    status: ExecutionStatus = ExecutionStatus.CREATED
    trigger_id: str | None = None
    parent_execution_id: str | None = None
    input: Any = None
    output: Any = None
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    node_executions: list[NodeExecution] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        matrix_id: str,
        entry_node_ids: list[str],
        input: Any = None,
        trigger_id: str | None = None,
        parent_execution_id: str | None = None,
    ) -> "MatrixExecution":
        """创建执行记录

        抛出：
            DomainError: matrix_id 为空或没有入口节点
        """
        if not matrix_id:
            raise DomainError("matrix_id 不能为空")
        if not entry_node_ids:
            raise DomainError("至少需要一个入口节点")

        return cls(
            id=f"exec_{uuid4().hex[:8]}",
            matrix_id=matrix_id,
            entry_node_ids=list(entry_node_ids),
            input=input,
            trigger_id=trigger_id,
            parent_execution_id=parent_execution_id,
            created_at=datetime.now(UTC),
        )

    def _transition(self, target: ExecutionStatus) -> None:
        if not self.status.can_transition_to(target):
            raise DomainError(f"执行状态无法从 {self.status.value} 流转到 {target.value}")
        self.status = target

    def start(self) -> None:
        self._transition(ExecutionStatus.RUNNING)
        self.started_at = datetime.now(UTC)

    def complete(self, output: Any) -> None:
        self._transition(ExecutionStatus.COMPLETED)
        self.output = output
        self.finished_at = datetime.now(UTC)

    def fail(self, error: str) -> None:
        self._transition(ExecutionStatus.FAILED)
        self.error = error
        self.finished_at = datetime.now(UTC)

    def node_execution(self, node_id: str) -> NodeExecution:
        """获取节点执行记录，不存在时创建（PENDING）"""
        for node_execution in self.node_executions:
            if node_execution.node_id == node_id:
                return node_execution
        node_execution = NodeExecution.create(self.id, node_id)
        self.node_executions.append(node_execution)
        return node_execution

    def find_node_execution(self, node_id: str) -> NodeExecution | None:
        return next((n for n in self.node_executions if n.node_id == node_id), None)
