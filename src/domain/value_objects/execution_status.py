"""执行状态枚举 - MatrixExecution / NodeExecution 生命周期

状态流转：
- ExecutionStatus: CREATED → RUNNING → (COMPLETED | FAILED)
- NodeExecutionStatus:
    PENDING → RUNNING → (COMPLETED | ERROR)
    ERROR → RETRYING → RUNNING
    PENDING → SKIPPED

设计原则：
- 继承 str：序列化/数据库存储友好
- 通过 can_transition_to() 固化状态机不变式
"""

from __future__ import annotations

from enum import Enum


class ExecutionStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    def can_transition_to(self, target: ExecutionStatus) -> bool:
        allowed: dict[ExecutionStatus, set[ExecutionStatus]] = {
            ExecutionStatus.CREATED: {ExecutionStatus.RUNNING, ExecutionStatus.FAILED},
            ExecutionStatus.RUNNING: {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED},
            ExecutionStatus.COMPLETED: set(),
            ExecutionStatus.FAILED: set(),
        }
        return target in allowed[self]

    def is_terminal(self) -> bool:
        return self in {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED}


class NodeExecutionStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"
    RETRYING = "retrying"
    SKIPPED = "skipped"

    def can_transition_to(self, target: NodeExecutionStatus) -> bool:
        allowed: dict[NodeExecutionStatus, set[NodeExecutionStatus]] = {
            NodeExecutionStatus.PENDING: {NodeExecutionStatus.RUNNING, NodeExecutionStatus.SKIPPED},
            NodeExecutionStatus.RUNNING: {NodeExecutionStatus.COMPLETED, NodeExecutionStatus.ERROR},
            NodeExecutionStatus.ERROR: {NodeExecutionStatus.RETRYING},
            NodeExecutionStatus.RETRYING: {NodeExecutionStatus.RUNNING},
            NodeExecutionStatus.COMPLETED: set(),
            NodeExecutionStatus.SKIPPED: set(),
        }
        return target in allowed[self]

    def is_resolved(self) -> bool:
        """节点结果已确定（下游可据此判断是否就绪）"""
        return self in {
            NodeExecutionStatus.COMPLETED,
            NodeExecutionStatus.ERROR,
            NodeExecutionStatus.SKIPPED,
        }
