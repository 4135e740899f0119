"""Loop Executor（循环执行器）

Infrastructure 层：实现循环节点执行器

配置参数：
    iteratorKey: 列表在合并输入中的点分路径（为空时输入本身必须是列表）
    maxIterations: 最大迭代次数（默认 1000）
    breakCondition: 中断条件表达式，对某个元素成立时停止（该元素不计入结果）
    itemExpression: 元素映射表达式（可选）

表达式上下文：item（当前元素）、index（下标）、data（合并输入）；
元素为 dict 时其键也可直接引用。
"""

from typing import Any

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.condition_evaluator import build_expression_context
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.services.payload import MISSING, get_path, merge_inputs

DEFAULT_MAX_ITERATIONS = 1000


class LoopExecutor(NodeExecutor):
    """循环节点执行器，返回 {"items": [...], "count": n}"""

    def __init__(self, expression_evaluator: ExpressionEvaluator | None = None):
        self._expressions = expression_evaluator or ExpressionEvaluator()

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        data = merge_inputs(inputs)
        iterator_key = node.config.get("iteratorKey") or ""
        items = get_path(data, iterator_key)
        if items is MISSING:
            raise DomainError(f"字段不存在: {iterator_key}")
        if not isinstance(items, list):
            raise DomainError(f"字段 {iterator_key or '(输入)'} 不是数组")

        max_iterations = node.config.get("maxIterations", DEFAULT_MAX_ITERATIONS)
        if not isinstance(max_iterations, int) or isinstance(max_iterations, bool) or max_iterations < 0:
            raise DomainError("maxIterations 必须是非负整数")
        break_condition = node.config.get("breakCondition")
        item_expression = node.config.get("itemExpression")

        results = []
        for index, item in enumerate(items[:max_iterations]):
            scope = build_expression_context(item, item=item, index=index, data=data)
            if break_condition and self._expressions.evaluate(break_condition, scope):
                break
            if item_expression:
                results.append(self._expressions.evaluate_expression(item_expression, scope))
            else:
                results.append(item)

        return {"items": results, "count": len(results)}
