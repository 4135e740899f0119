"""Connection 实体 - 矩阵中节点之间的有向连接

业务定义：
- Connection 连接同一矩阵内的两个不同节点（source → target）
- type 决定连接何时被激活（见 ConnectionType）
- CONDITION 类型的连接拥有若干 ConnectionCondition（聚合内部实体）
- 删除最后一个条件时，连接类型自动重置为 DEFAULT
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.exceptions import DomainError, NotFoundError
from src.domain.value_objects.condition_operator import ConditionOperator
from src.domain.value_objects.connection_type import ConnectionType


@dataclass
class ConnectionCondition:
    """连接条件

    condition 支持三种形式：
    - {"expression": "data['score'] > 0.8"}
    - {"field": "status", "operator": "eq", "value": "ok"}
    - {"value": "ok"}（与源节点输出整体做相等比较）
    """

    id: str
    connection_id: str
    condition: dict[str, Any]
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, connection_id: str, condition: dict[str, Any]) -> "ConnectionCondition":
        """创建连接条件

        抛出：
            DomainError: 条件为空、缺少 operator/value/expression，或运算符不支持
        """
        cls.validate(condition, require_shape=True)
        now = datetime.now(UTC)
        return cls(
            id=f"cond_{uuid4().hex[:8]}",
            connection_id=connection_id,
            condition=dict(condition),
            created_at=now,
            updated_at=now,
        )

    @staticmethod
    def validate(condition: dict[str, Any] | None, require_shape: bool = False) -> None:
        if not condition or not isinstance(condition, dict):
            raise DomainError("condition 不能为空")
        if require_shape and not any(key in condition for key in ("operator", "value", "expression")):
            raise DomainError("condition 必须包含 operator、value 或 expression 字段")
        operator = condition.get("operator")
        if operator is not None and operator not in ConditionOperator.values():
            raise DomainError(f"不支持的条件运算符: {operator}")
        expression = condition.get("expression")
        if expression is not None and (not isinstance(expression, str) or not expression.strip()):
            raise DomainError("expression 必须是非空字符串")

    def update(self, condition: dict[str, Any]) -> None:
        self.validate(condition)
        self.condition = dict(condition)
        self.updated_at = datetime.now(UTC)


@dataclass
class Connection:
    """Connection 实体（聚合根，管理 ConnectionCondition）

    属性说明：
    - id: 唯一标识符（conn_ 前缀）
    - matrix_id: 所属矩阵
    - source_id / target_id: 源节点 / 目标节点
    - type: 连接类型
    - config: 连接配置（如条件节点分支 {"branch": "false"}）
    - conditions: 条件列表（仅 CONDITION 类型）
    """

    id: str
    matrix_id: str
    source_id: str
    target_id: str
    type: ConnectionType = ConnectionType.DEFAULT
    config: dict[str, Any] = field(default_factory=dict)
    conditions: list[ConnectionCondition] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        matrix_id: str,
        source_id: str,
        target_id: str,
        type: ConnectionType = ConnectionType.DEFAULT,
        config: dict[str, Any] | None = None,
        conditions: list[dict[str, Any]] | None = None,
    ) -> "Connection":
        """创建 Connection 的工厂方法

        抛出：
            DomainError: 节点 ID 为空、连接到自身，或非 CONDITION 类型携带条件
        """
        if not source_id or not source_id.strip():
            raise DomainError("source_id 不能为空")
        if not target_id or not target_id.strip():
            raise DomainError("target_id 不能为空")
        if source_id.strip() == target_id.strip():
            raise DomainError("不能连接到自己")

        now = datetime.now(UTC)
        connection = cls(
            id=f"conn_{uuid4().hex[:8]}",
            matrix_id=matrix_id,
            source_id=source_id.strip(),
            target_id=target_id.strip(),
            type=type,
            config=dict(config or {}),
            created_at=now,
            updated_at=now,
        )
        if conditions:
            connection.replace_conditions(conditions)
        return connection

    def update(
        self,
        type: ConnectionType | None = None,
        config: dict[str, Any] | None = None,
        source_id: str | None = None,
        target_id: str | None = None,
    ) -> None:
        """部分更新

        业务规则：
        - 类型从 CONDITION 改为其他类型时清空条件
        """
        if source_id is not None:
            self.source_id = source_id
        if target_id is not None:
            self.target_id = target_id
        if self.source_id == self.target_id:
            raise DomainError("不能连接到自己")
        if config is not None:
            self.config = dict(config)
        if type is not None:
            self.type = type
            if type != ConnectionType.CONDITION:
                self.conditions = []
        self.updated_at = datetime.now(UTC)

    def replace_conditions(self, conditions: list[dict[str, Any]]) -> list[ConnectionCondition]:
        """整体替换条件列表

        抛出：
            DomainError: 连接类型不是 CONDITION
        """
        self._ensure_condition_type()
        self.conditions = [ConnectionCondition.create(self.id, c) for c in conditions]
        self.updated_at = datetime.now(UTC)
        return self.conditions

    def add_condition(self, condition: dict[str, Any]) -> ConnectionCondition:
        self._ensure_condition_type()
        created = ConnectionCondition.create(self.id, condition)
        self.conditions.append(created)
        self.updated_at = datetime.now(UTC)
        return created

    def get_condition(self, condition_id: str) -> ConnectionCondition:
        for condition in self.conditions:
            if condition.id == condition_id:
                return condition
        raise NotFoundError("ConnectionCondition", condition_id)

    def remove_condition(self, condition_id: str) -> None:
        """删除条件；删除最后一个条件时类型重置为 DEFAULT"""
        self.get_condition(condition_id)
        self.conditions = [c for c in self.conditions if c.id != condition_id]
        if not self.conditions:
            self.type = ConnectionType.DEFAULT
        self.updated_at = datetime.now(UTC)

    def copy_to(self, matrix_id: str, node_id_map: dict[str, str]) -> "Connection":
        """复制到另一个矩阵，并按 node_id_map 重映射端点"""
        now = datetime.now(UTC)
        copied = Connection(
            id=f"conn_{uuid4().hex[:8]}",
            matrix_id=matrix_id,
            source_id=node_id_map[self.source_id],
            target_id=node_id_map[self.target_id],
            type=self.type,
            config=dict(self.config),
            created_at=now,
            updated_at=now,
        )
        copied.conditions = [
            ConnectionCondition(
                id=f"cond_{uuid4().hex[:8]}",
                connection_id=copied.id,
                condition=dict(c.condition),
                created_at=now,
                updated_at=now,
            )
            for c in self.conditions
        ]
        return copied

    def _ensure_condition_type(self) -> None:
        if self.type != ConnectionType.CONDITION:
            raise DomainError("只有 condition 类型的连接可以设置条件")
