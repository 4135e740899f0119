"""Transformer Executor（数据转换执行器）

Infrastructure 层：实现数据转换节点执行器

配置参数：
    transformations: 转换列表 [{source, target, transform}]
    - source: 点分路径（为空时取整个输入）
    - target: 输出字段点分路径（默认与 source 相同）
    - transform: none / upper / lower / int / float / str / bool / length / expr:<表达式>
"""

from typing import Any

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError, ExpressionEvaluationError
from src.domain.ports.node_executor import NodeExecutor
from src.domain.services.condition_evaluator import build_expression_context
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.services.payload import MISSING, get_path, merge_inputs, set_path

EXPRESSION_PREFIX = "expr:"


class TransformerExecutor(NodeExecutor):
    """数据转换节点执行器"""

    def __init__(self, expression_evaluator: ExpressionEvaluator | None = None):
        self._expressions = expression_evaluator or ExpressionEvaluator()

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        transformations = node.config.get("transformations")
        if not transformations or not isinstance(transformations, list):
            raise DomainError("Transformer 节点缺少 transformations 配置")

        data = merge_inputs(inputs)
        result: dict[str, Any] = {}
        for index, item in enumerate(transformations):
            if not isinstance(item, dict):
                raise DomainError(f"第 {index + 1} 个转换配置必须是对象")
            source = item.get("source") or ""
            target = item.get("target") or source
            if not target:
                raise DomainError(f"第 {index + 1} 个转换缺少 target")

            value = get_path(data, source)
            if value is MISSING:
                raise DomainError(f"字段不存在: {source}")
            set_path(result, target, self._apply(item.get("transform") or "none", value))
        return result

    def _apply(self, transform: str, value: Any) -> Any:
        if transform.startswith(EXPRESSION_PREFIX):
            expression = transform[len(EXPRESSION_PREFIX):]
            return self._expressions.evaluate_expression(
                expression, build_expression_context(value, value=value)
            )

        try:
            if transform == "none":
                return value
            elif transform == "upper":
                return str(value).upper()
            elif transform == "lower":
                return str(value).lower()
            elif transform == "int":
                return int(value)
            elif transform == "float":
                return float(value)
            elif transform == "str":
                return str(value)
            elif transform == "bool":
                # 字符串布尔值
                if isinstance(value, str):
                    return value.strip().lower() not in ("", "false", "0", "no", "off")
                return bool(value)
            elif transform == "length":
                return len(value)
        except (ValueError, TypeError) as e:
            raise ExpressionEvaluationError(f"类型转换失败: {transform}: {e}") from e

        raise DomainError(f"不支持的转换: {transform}")
