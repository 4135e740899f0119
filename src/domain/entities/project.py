"""Project 实体 - 矩阵的顶层容器

业务定义：
- Project 是用户组织矩阵的单位
- 项目名称全局唯一（唯一性由 Use Case 通过 Repository 校验）
- 删除项目会级联删除其下所有矩阵
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from src.domain.exceptions import DomainError

MAX_NAME_LENGTH = 255


def validate_name(name: str | None, field_name: str = "name") -> str:
    """校验名称并返回去除首尾空白后的值

    抛出：
        DomainError: 名称为空或超过 255 个字符
    """
    if not name or not name.strip():
        raise DomainError(f"{field_name} 不能为空")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise DomainError(f"{field_name} 长度不能超过 {MAX_NAME_LENGTH} 个字符")
    return name


@dataclass
class Project:
    """Project 实体

    属性说明：
    - id: 唯一标识符（proj_ 前缀）
    - name: 项目名称（唯一）
    - description: 项目描述（可选）
    """

    id: str
    name: str
    description: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, name: str, description: str | None = None) -> "Project":
        """创建 Project 的工厂方法

        抛出：
            DomainError: 当 name 为空或过长时
        """
        now = datetime.now(UTC)
        return cls(
            id=f"proj_{uuid4().hex[:8]}",
            name=validate_name(name),
            description=description,
            created_at=now,
            updated_at=now,
        )

    def update(self, name: str | None = None, description: str | None = None) -> None:
        """部分更新（None 表示不修改）"""
        if name is not None:
            self.name = validate_name(name)
        if description is not None:
            self.description = description
        self.updated_at = datetime.now(UTC)
