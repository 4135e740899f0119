"""Domain 值对象

导出所有领域值对象，方便其他模块导入
"""

from src.domain.value_objects.condition_operator import ConditionOperator
from src.domain.value_objects.connection_type import ConnectionType
from src.domain.value_objects.execution_status import ExecutionStatus, NodeExecutionStatus
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.page import Page
from src.domain.value_objects.position import Position
from src.domain.value_objects.retry_policy import RetryPolicy
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType

__all__ = [
    "ConditionOperator",
    "ConnectionType",
    "ExecutionStatus",
    "MatrixStatus",
    "NodeExecutionStatus",
    "NodeType",
    "Page",
    "Position",
    "RetryPolicy",
    "TriggerStatus",
    "TriggerType",
]
