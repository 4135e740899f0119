"""SubMatrix Executor（子矩阵执行器）

子矩阵节点以嵌套执行的方式端到端运行 sub_matrix_id 指向的矩阵：
- inputMapping: {子矩阵输入字段: 本节点输入的点分路径}，未配置时传入整个合并输入
- outputMapping: {输出字段: 子矩阵输出的点分路径}，未配置时返回整个子矩阵输出
- 嵌套深度与循环引用由执行引擎（context["run_sub_matrix"]）检查
"""

from typing import Any

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError, NodeExecutionError
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.payload import MISSING, get_path, merge_inputs, set_path
from src.domain.value_objects.execution_status import ExecutionStatus


class SubMatrixExecutor(NodeExecutor):
    """子矩阵节点执行器"""

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        if not node.sub_matrix_id:
            raise DomainError(f"子矩阵节点 {node.name} 未配置 sub_matrix_id")
        run_sub_matrix = context.get("run_sub_matrix")
        if run_sub_matrix is None:
            raise DomainError("当前执行上下文不支持子矩阵执行")

        data = merge_inputs(inputs)
        sub_input = self._map(data, node.config.get("inputMapping"), "inputMapping")

        child = await run_sub_matrix(node.sub_matrix_id, sub_input)
        if child.status != ExecutionStatus.COMPLETED:
            raise NodeExecutionError(
                node.id, f"子矩阵 {node.sub_matrix_id} 执行失败: {child.error}"
            )
        return self._map(child.output, node.config.get("outputMapping"), "outputMapping")

    @staticmethod
    def _map(data: Any, mapping: Any, field: str) -> Any:
        """按映射提取字段（源路径不存在的字段被忽略）"""
        if not mapping:
            return data
        if not isinstance(mapping, dict):
            raise DomainError(f"{field} 必须是对象")
        result: dict[str, Any] = {}
        for target, source in mapping.items():
            value = get_path(data, source)
            if value is not MISSING:
                set_path(result, target, value)
        return result
