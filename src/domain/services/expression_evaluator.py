"""表达式求值器 (Expression Evaluator)

业务定义：
- 安全地评估条件表达式，用于条件节点、连接条件、循环中断条件与转换表达式
- 防止代码注入和不安全操作

设计原则：
- 纯 Python 实现（ast + 受限 eval）
- 白名单机制：只允许白名单 AST 节点与白名单函数
- 属性访问 a.b 会被改写为 a["b"]，用于访问字典字段

使用示例：
    evaluator = ExpressionEvaluator()
    evaluator.evaluate("score > 0.8 and count >= 100", {"score": 0.95, "count": 100})  # True
    evaluator.evaluate("user.age >= 18", {"user": {"age": 20}})  # True
    evaluator.evaluate_expression("price * 0.9", {"price": 100})  # 90.0
"""

import ast
import re
from typing import Any

from src.domain.exceptions import ExpressionEvaluationError, UnsafeExpressionError


class _AttributeToSubscript(ast.NodeTransformer):
    """把 obj.key 改写为 obj["key"]"""

    def visit_Attribute(self, node: ast.Attribute) -> ast.AST:
        self.generic_visit(node)
        return ast.copy_location(
            ast.Subscript(value=node.value, slice=ast.Constant(value=node.attr), ctx=node.ctx),
            node,
        )


class ExpressionEvaluator:
    """表达式求值器

    支持：
    - 比较运算符：>, <, ==, !=, >=, <=, in, not in, is, is not
    - 逻辑运算符：and, or, not
    - 算术运算：+, -, *, /, //, %
    - 下标与字段访问：obj['key']、obj.key、items[0]
    - 字面量：数值、字符串、布尔、None、列表、元组、字典
    - 条件表达式：a if cond else b
    - 白名单函数：len, str, int, float, bool, abs, min, max, round, lower, upper
    """

    DANGEROUS_KEYWORDS = {
        "import",
        "exec",
        "eval",
        "compile",
        "open",
        "globals",
        "locals",
        "breakpoint",
    }

    ALLOWED_NODE_TYPES = {
        ast.Expression,
        ast.Constant,
        ast.Name,
        ast.Load,
        # 比较
        ast.Compare,
        ast.Eq,
        ast.NotEq,
        ast.Lt,
        ast.LtE,
        ast.Gt,
        ast.GtE,
        ast.In,
        ast.NotIn,
        ast.Is,
        ast.IsNot,
        # 逻辑
        ast.BoolOp,
        ast.And,
        ast.Or,
        ast.UnaryOp,
        ast.Not,
        ast.USub,
        ast.UAdd,
        # 数据访问
        ast.Subscript,
        ast.Slice,
        ast.Attribute,
        # 算术
        ast.BinOp,
        ast.Add,
        ast.Sub,
        ast.Mult,
        ast.Div,
        ast.FloorDiv,
        ast.Mod,
        # 字面量容器
        ast.List,
        ast.Tuple,
        ast.Dict,
        ast.IfExp,
        # 白名单函数调用
        ast.Call,
        ast.keyword,
    }

    ALLOWED_FUNCTIONS: dict[str, Any] = {
        "len": len,
        "str": str,
        "int": int,
        "float": float,
        "bool": bool,
        "abs": abs,
        "min": min,
        "max": max,
        "round": round,
        "lower": lambda value: str(value).lower(),
        "upper": lambda value: str(value).upper(),
    }

    def __init__(self):
        self._compiled_cache: dict[str, Any] = {}

    def evaluate(self, expression: str | None, context: dict[str, Any]) -> bool:
        """评估布尔表达式

        异常：
            ExpressionEvaluationError: 求值失败
            UnsafeExpressionError: 表达式不安全
        """
        return bool(self.evaluate_expression(expression, context))

    def evaluate_expression(self, expression: str | None, context: dict[str, Any]) -> Any:
        """评估表达式并返回原始值（空表达式返回 False）"""
        if not expression or not expression.strip():
            return False

        code = self.compile_expression(expression)

        # 移除与白名单函数同名的变量（防止函数劫持）
        local_vars = {k: v for k, v in (context or {}).items() if k not in self.ALLOWED_FUNCTIONS}
        safe_globals = {"__builtins__": {}, **self.ALLOWED_FUNCTIONS}

        try:
            return eval(code, safe_globals, local_vars)
        except NameError as e:
            raise ExpressionEvaluationError(f"变量未定义: {e}") from e
        except (TypeError, AttributeError, KeyError, IndexError, ValueError) as e:
            raise ExpressionEvaluationError(f"表达式求值错误: {e}") from e
        except ZeroDivisionError as e:
            raise ExpressionEvaluationError(f"表达式除零错误: {expression}") from e

    def compile_expression(self, expression: str) -> Any:
        """解析、校验并编译表达式（结果缓存）

        异常：
            ExpressionEvaluationError: 语法错误
            UnsafeExpressionError: 包含不允许的操作
        """
        if expression in self._compiled_cache:
            return self._compiled_cache[expression]

        self._check_dangerous_keywords(expression)

        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as e:
            raise ExpressionEvaluationError(f"表达式语法错误: {expression}") from e

        self._validate_ast(tree)
        tree = ast.fix_missing_locations(_AttributeToSubscript().visit(tree))
        code = compile(tree, "<expression>", "eval")
        self._compiled_cache[expression] = code
        return code

    def _check_dangerous_keywords(self, expression: str) -> None:
        for keyword in self.DANGEROUS_KEYWORDS:
            if re.search(rf"\b{keyword}\b", expression):
                raise UnsafeExpressionError(f"表达式包含危险操作: {keyword}")

        if "__" in expression:
            raise UnsafeExpressionError("表达式不允许访问双下划线方法")

    def _validate_ast(self, tree: ast.Expression) -> None:
        """遍历 AST，确保只包含白名单节点与白名单函数调用

        异常：
            UnsafeExpressionError: AST 包含不安全节点
        """
        for node in ast.walk(tree):
            node_type = type(node)
            if node_type not in self.ALLOWED_NODE_TYPES:
                raise UnsafeExpressionError(f"表达式包含不允许的操作: {node_type.__name__}")

            if isinstance(node, ast.Call):
                if not isinstance(node.func, ast.Name):
                    raise UnsafeExpressionError("仅允许直接调用白名单函数")
                if node.func.id not in self.ALLOWED_FUNCTIONS:
                    raise UnsafeExpressionError(f"函数 {node.func.id} 不在允许列表中")
                if any(kw.arg is None for kw in node.keywords):
                    raise UnsafeExpressionError("不允许使用**kwargs可变参数")
                if len(node.args) > 5:
                    raise UnsafeExpressionError("函数参数过多")

            if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
                raise UnsafeExpressionError(f"表达式不允许访问私有属性: {node.attr}")


__all__ = [
    "ExpressionEvaluator",
    "ExpressionEvaluationError",
    "UnsafeExpressionError",
]
