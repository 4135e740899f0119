"""Executors（执行器）

Infrastructure 层：节点执行器实现

导出所有执行器和工厂函数
"""

from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.value_objects.node_type import NodeType
from src.infrastructure.executors.action_executor import ActionExecutor
from src.infrastructure.executors.base_executor import MonitorExecutor, TriggerExecutor
from src.infrastructure.executors.condition_executor import ConditionExecutor
from src.infrastructure.executors.loop_executor import LoopExecutor
from src.infrastructure.executors.sub_matrix_executor import SubMatrixExecutor
from src.infrastructure.executors.transform_executor import TransformerExecutor

__all__ = [
    "ActionExecutor",
    "ConditionExecutor",
    "LoopExecutor",
    "MonitorExecutor",
    "SubMatrixExecutor",
    "TransformerExecutor",
    "TriggerExecutor",
    "create_executor_registry",
]


def create_executor_registry(http_timeout: float = 30.0) -> NodeExecutorRegistry:
    """创建执行器注册表

    参数：
        http_timeout: HTTP 动作的请求超时（秒）

    返回：
        为每种 NodeType 注册好执行器的注册表
    """
    expressions = ExpressionEvaluator()
    registry = NodeExecutorRegistry()

    registry.register(NodeType.TRIGGER.value, TriggerExecutor())
    registry.register(NodeType.ACTION.value, ActionExecutor(http_timeout=http_timeout))
    registry.register(NodeType.CONDITION.value, ConditionExecutor(expressions))
    registry.register(NodeType.TRANSFORMER.value, TransformerExecutor(expressions))
    registry.register(NodeType.LOOP.value, LoopExecutor(expressions))
    registry.register(NodeType.SUB_MATRIX.value, SubMatrixExecutor())
    registry.register(NodeType.MONITOR.value, MonitorExecutor())

    return registry
