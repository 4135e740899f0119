"""Node DTO

trigger 节点可内嵌触发器：
- 创建节点时通过 trigger 字段同时创建触发器
- 查询 trigger 节点时响应中带上 trigger
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.application.use_cases.manage_nodes import CreateNodeInput, UpdateNodeInput
from src.domain.entities.node import Node
from src.domain.entities.trigger import Trigger
from src.domain.value_objects.node_type import NodeType
from src.interfaces.api.dto.common_dto import PositionDTO
from src.interfaces.api.dto.trigger_dto import (
    CreateTriggerRequest,
    TriggerResponse,
    UpdateTriggerRequest,
)


class CreateNodeRequest(BaseModel):
    type: NodeType
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    config: dict[str, Any] | None = None
    position: PositionDTO | None = None
    sub_matrix_id: str | None = None
    type_version: int = Field(default=1, ge=1)
    disabled: bool = False
    trigger: CreateTriggerRequest | None = Field(default=None, description="内嵌触发器（仅 trigger 节点）")

    def to_input(self) -> CreateNodeInput:
        return CreateNodeInput(
            type=self.type,
            name=self.name,
            config=self.config,
            position=self.position.to_value() if self.position else None,
            description=self.description,
            sub_matrix_id=self.sub_matrix_id,
            type_version=self.type_version,
            disabled=self.disabled,
            trigger=self.trigger.to_input() if self.trigger else None,
        )


class UpdateNodeRequest(BaseModel):
    """更新节点请求（未提供的字段不修改，节点类型不可修改）"""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    config: dict[str, Any] | None = None
    position: PositionDTO | None = None
    sub_matrix_id: str | None = None
    type_version: int | None = Field(default=None, ge=1)
    disabled: bool | None = None
    trigger: UpdateTriggerRequest | None = None

    def to_input(self) -> UpdateNodeInput:
        return UpdateNodeInput(
            name=self.name,
            description=self.description,
            config=self.config,
            position=self.position.to_value() if self.position else None,
            sub_matrix_id=self.sub_matrix_id,
            type_version=self.type_version,
            disabled=self.disabled,
            trigger=self.trigger.to_input() if self.trigger else None,
        )


class NodeResponse(BaseModel):
    id: str
    matrix_id: str
    type: NodeType
    name: str
    description: str | None = None
    config: dict[str, Any]
    position: PositionDTO
    sub_matrix_id: str | None = None
    type_version: int
    disabled: bool
    created_at: datetime
    updated_at: datetime
    trigger: TriggerResponse | None = None

    @classmethod
    def from_entity(cls, node: Node, trigger: Trigger | None = None) -> "NodeResponse":
        return cls(
            id=node.id,
            matrix_id=node.matrix_id,
            type=node.type,
            name=node.name,
            description=node.description,
            config=node.config,
            position=PositionDTO.from_value(node.position),
            sub_matrix_id=node.sub_matrix_id,
            type_version=node.type_version,
            disabled=node.disabled,
            created_at=node.created_at,
            updated_at=node.updated_at,
            trigger=TriggerResponse.from_entity(trigger) if trigger else None,
        )


class NodeListResponse(BaseModel):
    data: list[NodeResponse]


class TriggerDetailResponse(TriggerResponse):
    """触发器详情（带所属节点）"""

    node: NodeResponse

    @classmethod
    def from_entities(cls, trigger: Trigger, node: Node) -> "TriggerDetailResponse":
        return cls(
            **TriggerResponse.from_entity(trigger).model_dump(),
            node=NodeResponse.from_entity(node),
        )
