"""Trigger DTO"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.application.use_cases.manage_triggers import CreateTriggerInput, UpdateTriggerInput
from src.domain.entities.trigger import Trigger
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType


class CreateTriggerRequest(BaseModel):
    """创建触发器请求

    schedule 触发器需要 config.cronExpression（五段式 crontab）
    """

    type: TriggerType
    name: str = Field(..., min_length=1, max_length=255)
    config: dict[str, Any] | None = None
    status: TriggerStatus = TriggerStatus.INACTIVE

    def to_input(self) -> CreateTriggerInput:
        return CreateTriggerInput(
            type=self.type, name=self.name, config=self.config, status=self.status
        )


class UpdateTriggerRequest(BaseModel):
    type: TriggerType | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    config: dict[str, Any] | None = None
    status: TriggerStatus | None = None

    def to_input(self) -> UpdateTriggerInput:
        return UpdateTriggerInput(
            type=self.type, name=self.name, config=self.config, status=self.status
        )


class TriggerResponse(BaseModel):
    id: str
    node_id: str
    type: TriggerType
    name: str
    config: dict[str, Any]
    status: TriggerStatus
    last_triggered: datetime | None = None
    next_trigger: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, trigger: Trigger) -> "TriggerResponse":
        return cls(
            id=trigger.id,
            node_id=trigger.node_id,
            type=trigger.type,
            name=trigger.name,
            config=trigger.config,
            status=trigger.status,
            last_triggered=trigger.last_triggered,
            next_trigger=trigger.next_trigger,
            created_at=trigger.created_at,
            updated_at=trigger.updated_at,
        )
