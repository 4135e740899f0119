"""Trigger 实体 - 触发节点的触发配置

业务定义：
- Trigger 绑定到一个 trigger 类型的节点（每个节点最多一个）
- SCHEDULE 类型需要 config.cronExpression（兼容 config.schedule）
- 触发后记录 last_triggered，定时触发器同时记录 next_trigger
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.entities.project import validate_name
from src.domain.exceptions import DomainError
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType


@dataclass
class Trigger:
    """Trigger 实体

    属性说明：
    - id: 唯一标识符（trg_ 前缀）
    - node_id: 绑定的触发节点
    - type: 触发类型
    - name: 触发器名称
    - config: 触发配置（如 cronExpression）
    - status: ACTIVE / INACTIVE / ERROR（默认 INACTIVE）
    - last_triggered / next_trigger: 上次 / 下次触发时间
    """

    id: str
    node_id: str
    type: TriggerType
    name: str
    config: dict[str, Any] = field(default_factory=dict)
    status: TriggerStatus = TriggerStatus.INACTIVE
    last_triggered: datetime | None = None
    next_trigger: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        node_id: str,
        type: TriggerType,
        name: str,
        config: dict[str, Any] | None = None,
        status: TriggerStatus = TriggerStatus.INACTIVE,
    ) -> "Trigger":
        """创建 Trigger 的工厂方法

        抛出：
            DomainError: node_id 为空、name 非法或定时触发器缺少 cron 表达式
        """
        if not node_id:
            raise DomainError("node_id 不能为空")

        now = datetime.now(UTC)
        trigger = cls(
            id=f"trg_{uuid4().hex[:8]}",
            node_id=node_id,
            type=type,
            name=validate_name(name),
            config=dict(config or {}),
            status=status,
            created_at=now,
            updated_at=now,
        )
        trigger._ensure_schedule_config()
        return trigger

    @property
    def cron_expression(self) -> str | None:
        expression = self.config.get("cronExpression") or self.config.get("schedule")
        return expression.strip() if isinstance(expression, str) and expression.strip() else None

    @property
    def is_scheduled(self) -> bool:
        """是否应当注册到调度器"""
        return self.type == TriggerType.SCHEDULE and self.status == TriggerStatus.ACTIVE

    def update(
        self,
        type: TriggerType | None = None,
        name: str | None = None,
        config: dict[str, Any] | None = None,
        status: TriggerStatus | None = None,
    ) -> None:
        if type is not None:
            self.type = type
        if name is not None:
            self.name = validate_name(name)
        if config is not None:
            self.config = dict(config)
        if status is not None:
            self.status = status
        if not self.is_scheduled:
            self.next_trigger = None
        self._ensure_schedule_config()
        self.updated_at = datetime.now(UTC)

    def record_fired(self, next_trigger: datetime | None = None) -> None:
        """记录一次触发"""
        self.last_triggered = datetime.now(UTC)
        self.next_trigger = next_trigger
        self.updated_at = self.last_triggered

    def mark_error(self) -> None:
        self.status = TriggerStatus.ERROR
        self.next_trigger = None
        self.updated_at = datetime.now(UTC)

    def _ensure_schedule_config(self) -> None:
        if self.type == TriggerType.SCHEDULE and self.cron_expression is None:
            raise DomainError("schedule 触发器必须配置 cronExpression")
