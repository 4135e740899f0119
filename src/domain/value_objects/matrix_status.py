"""MatrixStatus 枚举 - 矩阵状态

状态说明：
- DRAFT: 草稿（默认，可编辑，可单节点调试）
- ACTIVE: 已激活（允许端到端执行）
- INACTIVE: 已停用
- ERROR: 错误状态
"""

from enum import Enum


class MatrixStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
    ERROR = "error"
