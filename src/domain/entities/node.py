"""Node 实体 - 矩阵中的执行单元

业务定义：
- Node 是矩阵中的单个执行步骤，类型见 NodeType
- config 为节点配置（JSON），约定字段：
  - inPorts / outPorts: 端口列表（编辑器使用）
  - retry: 重试策略覆盖（见 RetryPolicy）
  - timeout: 单次执行超时（秒）
- subMatrix 类型节点通过 sub_matrix_id 引用另一个矩阵
- disabled 节点在执行时被跳过
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.entities.project import validate_name
from src.domain.exceptions import DomainError
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position


@dataclass
class Node:
    """Node 实体

    属性说明：
    - id: 唯一标识符（node_ 前缀）
    - matrix_id: 所属矩阵
    - type: 节点类型
    - name: 节点名称（用户可见）
    - config: 节点配置
    - position: 节点在画布上的位置
    - sub_matrix_id: 子矩阵 ID（仅 subMatrix 节点）
    - type_version: 节点类型版本
    - disabled: 是否禁用
    """

    id: str
    matrix_id: str
    type: NodeType
    name: str
    config: dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)
    description: str | None = None
    sub_matrix_id: str | None = None
    type_version: int = 1
    disabled: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        matrix_id: str,
        type: NodeType,
        name: str,
        config: dict[str, Any] | None = None,
        position: Position | None = None,
        description: str | None = None,
        sub_matrix_id: str | None = None,
        type_version: int = 1,
        disabled: bool = False,
    ) -> "Node":
        """创建 Node 的工厂方法

        抛出：
            DomainError: name 非法、type_version 非法，或非子矩阵节点设置了 sub_matrix_id
        """
        if not matrix_id:
            raise DomainError("matrix_id 不能为空")
        if type_version < 1:
            raise DomainError("type_version 必须大于等于 1")
        if sub_matrix_id and type != NodeType.SUB_MATRIX:
            raise DomainError("只有 subMatrix 节点可以设置 sub_matrix_id")

        now = datetime.now(UTC)
        return cls(
            id=f"node_{uuid4().hex[:8]}",
            matrix_id=matrix_id,
            type=type,
            name=validate_name(name),
            config=dict(config or {}),
            position=position or Position(),
            description=description,
            sub_matrix_id=sub_matrix_id,
            type_version=type_version,
            disabled=disabled,
            created_at=now,
            updated_at=now,
        )

    def update(
        self,
        name: str | None = None,
        description: str | None = None,
        config: dict[str, Any] | None = None,
        position: Position | None = None,
        sub_matrix_id: str | None = None,
        type_version: int | None = None,
        disabled: bool | None = None,
    ) -> None:
        """部分更新（None 表示不修改；节点类型不可修改）"""
        if name is not None:
            self.name = validate_name(name)
        if description is not None:
            self.description = description
        if config is not None:
            self.config = dict(config)
        if position is not None:
            self.position = position
        if sub_matrix_id is not None:
            if self.type != NodeType.SUB_MATRIX:
                raise DomainError("只有 subMatrix 节点可以设置 sub_matrix_id")
            self.sub_matrix_id = sub_matrix_id
        if type_version is not None:
            if type_version < 1:
                raise DomainError("type_version 必须大于等于 1")
            self.type_version = type_version
        if disabled is not None:
            self.disabled = disabled
        self.updated_at = datetime.now(UTC)

    def copy_to(self, matrix_id: str) -> "Node":
        """复制到另一个矩阵（新 ID，sub_matrix_id 重置）"""
        now = datetime.now(UTC)
        return Node(
            id=f"node_{uuid4().hex[:8]}",
            matrix_id=matrix_id,
            type=self.type,
            name=self.name,
            config=dict(self.config),
            position=self.position,
            description=self.description,
            sub_matrix_id=None,
            type_version=self.type_version,
            disabled=self.disabled,
            created_at=now,
            updated_at=now,
        )
