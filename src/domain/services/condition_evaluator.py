"""ConditionEvaluator - 连接条件 / 条件节点的求值

条件格式：
- {"expression": "status == 'ok' and score > 0.5"}
    在源输出上求值：源输出为 dict 时其键可直接作为变量，同时以 data 引用整个输出
- {"field": "user.age", "operator": "gte", "value": 18}
    field 为点分路径；省略 field 时比较整个输出
- {"value": "ok"}
    等价于 {"operator": "eq", "value": "ok"}

字段缺失时只有 exists 运算符可能成立。
"""

import re
from typing import Any

from src.domain.exceptions import ExpressionEvaluationError
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.services.payload import MISSING, get_path
from src.domain.value_objects.condition_operator import ConditionOperator


def build_expression_context(source: Any, /, **extra: Any) -> dict[str, Any]:
    """构造表达式上下文：dict 的键展开为变量，data/value 引用原始数据，extra 可覆盖二者"""
    context: dict[str, Any] = dict(source) if isinstance(source, dict) else {}
    context["data"] = source
    context.setdefault("value", source)
    context.update(extra)
    return context


class ConditionEvaluator:
    """条件求值器"""

    def __init__(self, expression_evaluator: ExpressionEvaluator | None = None):
        self._expressions = expression_evaluator or ExpressionEvaluator()

    def evaluate_all(self, conditions: list[dict[str, Any]], data: Any) -> bool:
        """所有条件均成立才返回 True（空列表视为成立）"""
        return all(self.evaluate(condition, data) for condition in conditions)

    def evaluate(self, condition: dict[str, Any], data: Any) -> bool:
        """评估单个条件

        异常：
            ExpressionEvaluationError: 表达式求值失败、运算符不支持或类型无法比较
            UnsafeExpressionError: 表达式不安全
        """
        expression = condition.get("expression")
        if expression:
            return self._expressions.evaluate(expression, build_expression_context(data))

        operator = condition.get("operator", ConditionOperator.EQ.value)
        try:
            operator = ConditionOperator(operator)
        except ValueError as e:
            raise ExpressionEvaluationError(f"不支持的条件运算符: {operator}") from e

        actual = get_path(data, condition.get("field"))
        expected = condition.get("value")

        if operator == ConditionOperator.EXISTS:
            return (actual is not MISSING) == bool(expected if "value" in condition else True)
        if actual is MISSING:
            return False

        return self._compare(operator, actual, expected)

    def _compare(self, operator: ConditionOperator, actual: Any, expected: Any) -> bool:
        try:
            if operator == ConditionOperator.EQ:
                return actual == expected
            if operator == ConditionOperator.NE:
                return actual != expected
            if operator == ConditionOperator.GT:
                return actual > expected
            if operator == ConditionOperator.GTE:
                return actual >= expected
            if operator == ConditionOperator.LT:
                return actual < expected
            if operator == ConditionOperator.LTE:
                return actual <= expected
            if operator == ConditionOperator.CONTAINS:
                return expected in actual
            if operator == ConditionOperator.IN:
                return actual in expected
            if operator == ConditionOperator.TRUTHY:
                return bool(actual) == (True if expected is None else bool(expected))
            if operator == ConditionOperator.REGEX:
                return re.search(str(expected), str(actual)) is not None
        except TypeError as e:
            raise ExpressionEvaluationError(
                f"无法使用 {operator.value} 比较 {type(actual).__name__} 与 {type(expected).__name__}"
            ) from e
        except re.error as e:
            raise ExpressionEvaluationError(f"正则表达式非法: {expected}") from e

        raise ExpressionEvaluationError(f"不支持的条件运算符: {operator.value}")
