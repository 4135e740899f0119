"""Condition Executor（条件执行器）

条件节点对合并输入求值，输出 {"result": bool, "data": 合并输入}；
引擎根据 result 激活 true / false 分支连接。
"""

from typing import Any

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.condition_evaluator import ConditionEvaluator, build_expression_context
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.services.payload import merge_inputs


class ConditionExecutor(NodeExecutor):
    """条件节点执行器

    配置参数：
        expression: 条件表达式（优先）
        conditions: 条件列表 [{field, operator, value}]，全部成立才为 True
    """

    def __init__(self, expression_evaluator: ExpressionEvaluator | None = None):
        self._expressions = expression_evaluator or ExpressionEvaluator()
        self._conditions = ConditionEvaluator(self._expressions)

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        data = merge_inputs(inputs)
        expression = node.config.get("expression")
        conditions = node.config.get("conditions")

        if expression:
            result = self._expressions.evaluate(expression, build_expression_context(data))
        elif conditions:
            if not isinstance(conditions, list):
                raise DomainError("conditions 必须是列表")
            result = self._conditions.evaluate_all(conditions, data)
        else:
            raise DomainError("条件节点缺少 expression 或 conditions 配置")

        return {"result": result, "data": data}
