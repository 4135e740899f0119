"""Domain Services 模块

领域服务：
- ExpressionEvaluator / ConditionEvaluator: 表达式与条件求值
- GraphValidator: 矩阵图结构校验
- MatrixExecutionEngine: 矩阵执行引擎（波次调度、重试、超时、子矩阵）
- TriggerScheduler: schedule 触发器调度
"""

from src.domain.services.condition_evaluator import ConditionEvaluator
from src.domain.services.expression_evaluator import ExpressionEvaluator
from src.domain.services.graph_validator import (
    GraphIssue,
    GraphValidationReport,
    GraphValidator,
)
from src.domain.services.matrix_execution_engine import MatrixExecutionEngine
from src.domain.services.trigger_scheduler import TriggerScheduler

__all__ = [
    "ConditionEvaluator",
    "ExpressionEvaluator",
    "GraphIssue",
    "GraphValidationReport",
    "GraphValidator",
    "MatrixExecutionEngine",
    "TriggerScheduler",
]
