"""ManageTriggersUseCase - 触发器管理用例

编排：
1. 校验节点存在且为 trigger 节点（每个节点最多一个触发器）
2. schedule 触发器校验 cron 表达式并计算下次触发时间
3. 保存触发器
4. 同步调度器（激活的 schedule 触发器注册任务，其余移除）
"""

from dataclasses import dataclass
from typing import Any

from src.domain.entities.node import Node
from src.domain.entities.trigger import Trigger
from src.domain.exceptions import ConflictError, DomainError, NotFoundError
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.trigger_repository import TriggerRepository
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType


@dataclass
class CreateTriggerInput:
    type: TriggerType
    name: str
    config: dict[str, Any] | None = None
    status: TriggerStatus = TriggerStatus.INACTIVE


@dataclass
class UpdateTriggerInput:
    """更新触发器输入（None 表示不修改）"""

    type: TriggerType | None = None
    name: str | None = None
    config: dict[str, Any] | None = None
    status: TriggerStatus | None = None


def ensure_trigger_node(node: Node) -> None:
    """抛出：DomainError（节点不是 trigger 类型）"""
    if node.type != NodeType.TRIGGER:
        raise DomainError(f"节点 {node.id} 不是 trigger 节点")


def refresh_schedule(trigger: Trigger) -> None:
    """校验 cron 表达式并刷新 next_trigger

    抛出：
        DomainError: cron 表达式非法
    """
    if trigger.type == TriggerType.SCHEDULE:
        TriggerScheduler.validate_cron(trigger.cron_expression)
    if trigger.is_scheduled:
        trigger.next_trigger = TriggerScheduler.next_fire_time(trigger.cron_expression)
    else:
        trigger.next_trigger = None


class ManageTriggersUseCase:
    """触发器管理用例

    依赖：
    - NodeRepository / TriggerRepository
    - TriggerScheduler（可选；未启用调度器时只做持久化）
    """

    def __init__(
        self,
        node_repository: NodeRepository,
        trigger_repository: TriggerRepository,
        scheduler: TriggerScheduler | None = None,
    ):
        self.node_repository = node_repository
        self.trigger_repository = trigger_repository
        self.scheduler = scheduler

    def get_for_node(self, node_id: str) -> Trigger:
        """获取节点的触发器

        抛出：
            NotFoundError: 节点或触发器不存在
            DomainError: 节点不是 trigger 节点
        """
        node = self.node_repository.get_by_id(node_id)
        ensure_trigger_node(node)
        trigger = self.trigger_repository.find_by_node_id(node_id)
        if trigger is None:
            raise NotFoundError("Trigger", f"node={node_id}")
        return trigger

    def get(self, trigger_id: str) -> tuple[Trigger, Node]:
        trigger = self.trigger_repository.get_by_id(trigger_id)
        node = self.node_repository.get_by_id(trigger.node_id)
        return trigger, node

    def create(self, node_id: str, input_data: CreateTriggerInput) -> Trigger:
        """为 trigger 节点创建触发器

        抛出：
            NotFoundError: 节点不存在
            DomainError: 节点不是 trigger 节点 / 配置非法
            ConflictError: 节点已存在触发器
        """
        node = self.node_repository.get_by_id(node_id)
        ensure_trigger_node(node)
        if self.trigger_repository.find_by_node_id(node_id) is not None:
            raise ConflictError(f"节点 {node_id} 已存在触发器")

        trigger = Trigger.create(
            node_id=node_id,
            type=input_data.type,
            name=input_data.name,
            config=input_data.config,
            status=input_data.status,
        )
        refresh_schedule(trigger)
        self.trigger_repository.save(trigger)
        self._sync(trigger)
        return trigger

    def update(self, trigger_id: str, input_data: UpdateTriggerInput) -> Trigger:
        trigger = self.trigger_repository.get_by_id(trigger_id)
        trigger.update(
            type=input_data.type,
            name=input_data.name,
            config=input_data.config,
            status=input_data.status,
        )
        refresh_schedule(trigger)
        self.trigger_repository.save(trigger)
        self._sync(trigger)
        return trigger

    def delete(self, trigger_id: str) -> None:
        self.trigger_repository.get_by_id(trigger_id)
        self.trigger_repository.delete(trigger_id)
        if self.scheduler is not None:
            self.scheduler.remove(trigger_id)

    def _sync(self, trigger: Trigger) -> None:
        if self.scheduler is not None:
            self.scheduler.sync(trigger)
