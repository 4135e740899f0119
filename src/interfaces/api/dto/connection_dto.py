"""Connection / ConnectionCondition DTO"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.application.use_cases.manage_connections import (
    CreateConnectionInput,
    UpdateConnectionInput,
)
from src.domain.entities.connection import Connection, ConnectionCondition
from src.domain.value_objects.connection_type import ConnectionType


class CreateConnectionRequest(BaseModel):
    """创建连接请求

    conditions 仅在 type 为 condition 时保存
    """

    source_id: str = Field(..., min_length=1)
    target_id: str = Field(..., min_length=1)
    type: ConnectionType = ConnectionType.DEFAULT
    config: dict[str, Any] | None = None
    conditions: list[dict[str, Any]] | None = None

    def to_input(self) -> CreateConnectionInput:
        return CreateConnectionInput(
            source_id=self.source_id,
            target_id=self.target_id,
            type=self.type,
            config=self.config,
            conditions=self.conditions,
        )


class UpdateConnectionRequest(BaseModel):
    source_id: str | None = Field(default=None, min_length=1)
    target_id: str | None = Field(default=None, min_length=1)
    type: ConnectionType | None = None
    config: dict[str, Any] | None = None
    conditions: list[dict[str, Any]] | None = None

    def to_input(self) -> UpdateConnectionInput:
        return UpdateConnectionInput(
            source_id=self.source_id,
            target_id=self.target_id,
            type=self.type,
            config=self.config,
            conditions=self.conditions,
        )


class ConditionRequest(BaseModel):
    """连接条件请求

    示例：
        {"condition": {"field": "status", "operator": "eq", "value": "ok"}}
        {"condition": {"expression": "score > 0.8"}}
    """

    condition: dict[str, Any]


class ConditionResponse(BaseModel):
    id: str
    connection_id: str
    condition: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, condition: ConnectionCondition) -> "ConditionResponse":
        return cls(
            id=condition.id,
            connection_id=condition.connection_id,
            condition=condition.condition,
            created_at=condition.created_at,
            updated_at=condition.updated_at,
        )


class ConnectionResponse(BaseModel):
    id: str
    matrix_id: str
    source_id: str
    target_id: str
    type: ConnectionType
    config: dict[str, Any]
    conditions: list[ConditionResponse] | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls, connection: Connection, include_conditions: bool = True
    ) -> "ConnectionResponse":
        return cls(
            id=connection.id,
            matrix_id=connection.matrix_id,
            source_id=connection.source_id,
            target_id=connection.target_id,
            type=connection.type,
            config=connection.config,
            conditions=(
                [ConditionResponse.from_entity(c) for c in connection.conditions]
                if include_conditions
                else None
            ),
            created_at=connection.created_at,
            updated_at=connection.updated_at,
        )


class ConnectionListResponse(BaseModel):
    data: list[ConnectionResponse]


class ConditionListResponse(BaseModel):
    data: list[ConditionResponse]


class ConditionDetailResponse(ConditionResponse):
    connection: ConnectionResponse | None = None
