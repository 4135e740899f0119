"""矩阵图批量编辑 DTO"""

from pydantic import BaseModel, Field

from src.application.use_cases.update_matrix_graph import ConnectionChange, NodeChange
from src.interfaces.api.dto.connection_dto import (
    ConnectionResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)
from src.interfaces.api.dto.node_dto import CreateNodeRequest, NodeResponse, UpdateNodeRequest


class NodePatch(UpdateNodeRequest):
    id: str

    def to_change(self) -> NodeChange:
        return NodeChange(id=self.id, changes=self.to_input())


class ConnectionPatch(UpdateConnectionRequest):
    id: str

    def to_change(self) -> ConnectionChange:
        return ConnectionChange(id=self.id, changes=self.to_input())


class BulkCreateNodesRequest(BaseModel):
    nodes: list[CreateNodeRequest] = Field(..., min_length=1)


class BulkUpdateNodesRequest(BaseModel):
    nodes: list[NodePatch] = Field(..., min_length=1)


class BulkCreateConnectionsRequest(BaseModel):
    connections: list[CreateConnectionRequest] = Field(..., min_length=1)


class BulkUpdateConnectionsRequest(BaseModel):
    connections: list[ConnectionPatch] = Field(..., min_length=1)


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    deleted: int


class BulkNodesResponse(BaseModel):
    data: list[NodeResponse]


class BulkConnectionsResponse(BaseModel):
    data: list[ConnectionResponse]
