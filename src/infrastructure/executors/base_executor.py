"""Base Executor（基础执行器）

Infrastructure 层：实现基础节点执行器

包括：
- TriggerExecutor: 触发节点（返回触发载荷）
- MonitorExecutor: 监控节点（记录日志并透传数据）
"""

import logging
from typing import Any

from src.domain.entities.node import Node
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.payload import merge_inputs

logger = logging.getLogger(__name__)


class TriggerExecutor(NodeExecutor):
    """Trigger 节点执行器"""

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        """执行 Trigger 节点

        入口节点的输入为 {"$input": 触发载荷}，合并后即为载荷本身
        """
        if inputs:
            return merge_inputs(inputs)
        return context.get("initial_input")


class MonitorExecutor(NodeExecutor):
    """Monitor 节点执行器"""

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        data = merge_inputs(inputs)
        logger.info(
            "监控节点 %s: %s",
            node.name,
            data,
            extra={"execution_id": context.get("execution_id"), "node_id": node.id},
        )
        return data
