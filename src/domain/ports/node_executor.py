"""NodeExecutor Port - 按节点类型执行节点

引擎只依赖该接口；HTTP 请求、嵌套矩阵执行等外部能力由 Infrastructure 层的执行器提供。
"""

from abc import ABC, abstractmethod
from typing import Any

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError


class NodeExecutor(ABC):
    @abstractmethod
    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        """执行节点

        参数：
            node: 节点实体
            inputs: 上游输出（key 为源节点 ID；入口节点为 {"$input": 初始输入}）
            context: execution_id、matrix_id、depth、initial_input、run_sub_matrix

        返回：
            节点输出（作为下游节点的输入）

        异常：
            DomainError 及其他任意异常都视为本次尝试失败
        """


class NodeExecutorRegistry:
    """节点类型 → 执行器"""

    def __init__(self):
        self._executors: dict[str, NodeExecutor] = {}

    def register(self, node_type: str, executor: NodeExecutor) -> None:
        self._executors[node_type] = executor

    def get(self, node_type: str) -> NodeExecutor | None:
        return self._executors.get(node_type)

    def resolve(self, node_type: str) -> NodeExecutor:
        """抛出：DomainError（该类型没有注册执行器）"""
        executor = self._executors.get(node_type)
        if executor is None:
            raise DomainError(f"未注册的节点类型: {node_type}")
        return executor

    def registered_types(self) -> list[str]:
        return list(self._executors)
