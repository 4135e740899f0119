"""ManageNodesUseCase - 节点管理用例

编排：
1. 校验矩阵存在；subMatrix 节点校验子矩阵存在
2. 创建 / 更新节点，trigger 节点可同时创建或更新内嵌的触发器（同一事务）
3. 删除节点（相关连接与触发器由持久化层级联删除），并移除调度任务
"""

from dataclasses import dataclass
from typing import Any

from src.application.use_cases.manage_triggers import (
    CreateTriggerInput,
    UpdateTriggerInput,
    ensure_trigger_node,
    refresh_schedule,
)
from src.domain.entities.node import Node
from src.domain.entities.trigger import Trigger
from src.domain.exceptions import DomainError
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.trigger_repository import TriggerRepository
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position
from src.domain.value_objects.trigger_type import TriggerStatus


@dataclass
class CreateNodeInput:
    """创建节点输入

    属性说明：
    - trigger: 内嵌触发器（仅 trigger 节点）
    """

    type: NodeType
    name: str
    config: dict[str, Any] | None = None
    position: Position | None = None
    description: str | None = None
    sub_matrix_id: str | None = None
    type_version: int = 1
    disabled: bool = False
    trigger: CreateTriggerInput | None = None


@dataclass
class UpdateNodeInput:
    """更新节点输入（None 表示不修改）

    trigger: 节点已有触发器时更新，否则创建（此时 type 必填，name 默认取节点名称）
    """

    name: str | None = None
    description: str | None = None
    config: dict[str, Any] | None = None
    position: Position | None = None
    sub_matrix_id: str | None = None
    type_version: int | None = None
    disabled: bool | None = None
    trigger: UpdateTriggerInput | None = None


class ManageNodesUseCase:
    """节点管理用例"""

    def __init__(
        self,
        node_repository: NodeRepository,
        matrix_repository: MatrixRepository,
        trigger_repository: TriggerRepository,
        scheduler: TriggerScheduler | None = None,
    ):
        self.node_repository = node_repository
        self.matrix_repository = matrix_repository
        self.trigger_repository = trigger_repository
        self.scheduler = scheduler

    def list_by_matrix(
        self, matrix_id: str, type: NodeType | None = None
    ) -> tuple[list[Node], dict[str, Trigger]]:
        """列出矩阵的节点及其触发器（key 为 node_id）

        抛出：NotFoundError（矩阵不存在）
        """
        self.matrix_repository.get_by_id(matrix_id)
        nodes = self.node_repository.list_by_matrix(matrix_id, type=type)
        trigger_node_ids = [node.id for node in nodes if node.type == NodeType.TRIGGER]
        triggers = (
            self.trigger_repository.find_by_node_ids(trigger_node_ids) if trigger_node_ids else {}
        )
        return nodes, triggers

    def get(self, node_id: str) -> tuple[Node, Trigger | None]:
        node = self.node_repository.get_by_id(node_id)
        trigger = None
        if node.type == NodeType.TRIGGER:
            trigger = self.trigger_repository.find_by_node_id(node.id)
        return node, trigger

    def create(self, matrix_id: str, input_data: CreateNodeInput) -> tuple[Node, Trigger | None]:
        """创建节点

        抛出：
            NotFoundError: 矩阵或子矩阵不存在
            DomainError: 节点或触发器配置非法
        """
        self.matrix_repository.get_by_id(matrix_id)
        if input_data.sub_matrix_id:
            self.matrix_repository.get_by_id(input_data.sub_matrix_id)

        node = Node.create(
            matrix_id=matrix_id,
            type=input_data.type,
            name=input_data.name,
            config=input_data.config,
            position=input_data.position,
            description=input_data.description,
            sub_matrix_id=input_data.sub_matrix_id,
            type_version=input_data.type_version,
            disabled=input_data.disabled,
        )

        trigger = None
        if input_data.trigger is not None:
            ensure_trigger_node(node)
            trigger = Trigger.create(
                node_id=node.id,
                type=input_data.trigger.type,
                name=input_data.trigger.name,
                config=input_data.trigger.config,
                status=input_data.trigger.status,
            )
            refresh_schedule(trigger)

        self.node_repository.save(node)
        if trigger is not None:
            self.trigger_repository.save(trigger)
            self._sync(trigger)
        return node, trigger

    def update(self, node_id: str, input_data: UpdateNodeInput) -> tuple[Node, Trigger | None]:
        node = self.node_repository.get_by_id(node_id)
        if input_data.sub_matrix_id:
            self.matrix_repository.get_by_id(input_data.sub_matrix_id)

        node.update(
            name=input_data.name,
            description=input_data.description,
            config=input_data.config,
            position=input_data.position,
            sub_matrix_id=input_data.sub_matrix_id,
            type_version=input_data.type_version,
            disabled=input_data.disabled,
        )

        trigger = None
        if node.type == NodeType.TRIGGER:
            trigger = self.trigger_repository.find_by_node_id(node.id)

        if input_data.trigger is not None:
            ensure_trigger_node(node)
            patch = input_data.trigger
            if trigger is None:
                if patch.type is None:
                    raise DomainError("创建触发器时 type 不能为空")
                trigger = Trigger.create(
                    node_id=node.id,
                    type=patch.type,
                    name=patch.name or node.name,
                    config=patch.config,
                    status=patch.status or TriggerStatus.INACTIVE,
                )
            else:
                trigger.update(
                    type=patch.type, name=patch.name, config=patch.config, status=patch.status
                )
            refresh_schedule(trigger)

        self.node_repository.save(node)
        if input_data.trigger is not None and trigger is not None:
            self.trigger_repository.save(trigger)
            self._sync(trigger)
        return node, trigger

    def delete(self, node_id: str) -> None:
        node = self.node_repository.get_by_id(node_id)
        trigger = None
        if node.type == NodeType.TRIGGER:
            trigger = self.trigger_repository.find_by_node_id(node.id)
        self.node_repository.delete(node_id)
        if trigger is not None and self.scheduler is not None:
            self.scheduler.remove(trigger.id)

    def _sync(self, trigger: Trigger) -> None:
        if self.scheduler is not None:
            self.scheduler.sync(trigger)
