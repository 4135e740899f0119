"""领域层异常定义

异常分层：
- DomainError: 业务规则违反（API 层映射为 400）
- NotFoundError: 实体不存在（404）
- ConflictError: 资源冲突，如名称重复（409）
- GraphValidationError: 矩阵图结构不合法（400，附带问题列表）
- MatrixHasChildrenError: 删除仍有子矩阵的矩阵（400，附带子矩阵 ID）
- NodeExecutionError: 节点执行失败（携带 node_id）
- ExpressionEvaluationError / UnsafeExpressionError: 条件表达式求值失败
"""

from typing import Any


class DomainError(Exception):
    """领域层异常基类

    示例：
        if not name:
            raise DomainError("name 不能为空")
    """

    pass


class NotFoundError(DomainError):
    """实体不存在异常

    参数：
        entity_type: 实体类型（如："Matrix"、"Node"）
        entity_id: 实体 ID
    """

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} 不存在: {entity_id}")


class ConflictError(DomainError):
    """资源冲突异常（如项目名称重复、节点已有触发器）"""

    pass


class GraphValidationError(DomainError):
    """矩阵图校验失败

    属性：
        issues: 校验问题列表（code/message/node_ids）
    """

    def __init__(self, issues: list[dict[str, Any]]):
        self.issues = issues
        summary = "; ".join(issue["message"] for issue in issues) or "未知错误"
        super().__init__(f"矩阵图校验失败: {summary}")


class MatrixHasChildrenError(DomainError):
    """矩阵存在子矩阵，不允许删除"""

    def __init__(self, matrix_id: str, child_matrix_ids: list[str]):
        self.matrix_id = matrix_id
        self.child_matrix_ids = child_matrix_ids
        super().__init__(f"矩阵 {matrix_id} 存在 {len(child_matrix_ids)} 个子矩阵，无法删除")


class NodeExecutionError(DomainError):
    """节点执行失败"""

    def __init__(self, node_id: str, message: str):
        self.node_id = node_id
        super().__init__(message)


class ExpressionEvaluationError(DomainError):
    """表达式求值异常（缺失变量、类型错误、语法错误等）"""

    pass


class UnsafeExpressionError(DomainError):
    """不安全表达式异常（import、双下划线访问、非白名单函数调用等）"""

    pass
