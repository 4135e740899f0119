"""Execution DTO"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.domain.entities.execution import MatrixExecution, NodeExecution
from src.domain.value_objects.execution_status import ExecutionStatus, NodeExecutionStatus


class ExecuteMatrixRequest(BaseModel):
    """端到端执行请求

    wait=false 时立即返回 202 与执行 ID，执行在后台进行
    """

    input: Any = None
    wait: bool = True


class ExecuteNodeRequest(BaseModel):
    """从节点开始执行

    downstream=false 时只执行该节点
    """

    input: Any = None
    downstream: bool = True


class NodeExecutionResponse(BaseModel):
    id: str
    node_id: str
    status: NodeExecutionStatus
    attempts: int
    input: Any = None
    output: Any = None
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_entity(cls, node_execution: NodeExecution) -> "NodeExecutionResponse":
        return cls(
            id=node_execution.id,
            node_id=node_execution.node_id,
            status=node_execution.status,
            attempts=node_execution.attempts,
            input=node_execution.input,
            output=node_execution.output,
            error=node_execution.error,
            started_at=node_execution.started_at,
            finished_at=node_execution.finished_at,
        )


class ExecutionResponse(BaseModel):
    id: str
    matrix_id: str
    status: ExecutionStatus
    entry_node_ids: list[str]
    trigger_id: str | None = None
    parent_execution_id: str | None = None
    input: Any = None
    output: Any = None
    error: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    created_at: datetime
    node_executions: list[NodeExecutionResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, execution: MatrixExecution) -> "ExecutionResponse":
        return cls(
            id=execution.id,
            matrix_id=execution.matrix_id,
            status=execution.status,
            entry_node_ids=execution.entry_node_ids,
            trigger_id=execution.trigger_id,
            parent_execution_id=execution.parent_execution_id,
            input=execution.input,
            output=execution.output,
            error=execution.error,
            started_at=execution.started_at,
            finished_at=execution.finished_at,
            created_at=execution.created_at,
            node_executions=[
                NodeExecutionResponse.from_entity(n) for n in execution.node_executions
            ],
        )


class ExecutionAcceptedResponse(BaseModel):
    execution_id: str
    status: ExecutionStatus
    message: str = "执行已提交，后台运行中"


class ExecutionListResponse(BaseModel):
    data: list[ExecutionResponse]
    total: int
    limit: int
    offset: int
