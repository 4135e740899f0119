"""Matrix DTO"""

from dataclasses import asdict
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.application.use_cases.manage_matrices import CreateMatrixInput, UpdateMatrixInput
from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.entities.trigger import Trigger
from src.domain.services.graph_validator import GraphValidationReport
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.page import Page
from src.interfaces.api.dto.common_dto import PaginationDTO
from src.interfaces.api.dto.connection_dto import ConnectionResponse
from src.interfaces.api.dto.node_dto import NodeResponse


class CreateMatrixRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: MatrixStatus = MatrixStatus.DRAFT
    config: dict[str, Any] | None = None
    parent_matrix_id: str | None = None

    def to_input(self) -> CreateMatrixInput:
        return CreateMatrixInput(
            name=self.name,
            description=self.description,
            status=self.status,
            config=self.config,
            parent_matrix_id=self.parent_matrix_id,
        )


class UpdateMatrixRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: MatrixStatus | None = None
    config: dict[str, Any] | None = None
    version: int | None = Field(default=None, ge=1)

    def to_input(self) -> UpdateMatrixInput:
        return UpdateMatrixInput(
            name=self.name,
            description=self.description,
            status=self.status,
            config=self.config,
            version=self.version,
        )


class MatrixResponse(BaseModel):
    """矩阵响应

    nodes / connections 仅在请求 include_nodes / include_connections 时返回
    """

    id: str
    project_id: str
    parent_matrix_id: str | None = None
    name: str
    description: str | None = None
    status: MatrixStatus
    version: int
    config: dict[str, Any]
    created_at: datetime
    updated_at: datetime
    nodes: list[NodeResponse] | None = None
    connections: list[ConnectionResponse] | None = None

    @classmethod
    def from_entity(cls, matrix: Matrix) -> "MatrixResponse":
        return cls(
            id=matrix.id,
            project_id=matrix.project_id,
            parent_matrix_id=matrix.parent_matrix_id,
            name=matrix.name,
            description=matrix.description,
            status=matrix.status,
            version=matrix.version,
            config=matrix.config,
            created_at=matrix.created_at,
            updated_at=matrix.updated_at,
        )

    @classmethod
    def from_graph(
        cls,
        graph: MatrixGraph,
        include_nodes: bool = True,
        include_connections: bool = True,
        triggers: dict[str, Trigger] | None = None,
    ) -> "MatrixResponse":
        response = cls.from_entity(graph.matrix)
        triggers = triggers or {}
        if include_nodes:
            response.nodes = [
                NodeResponse.from_entity(node, triggers.get(node.id)) for node in graph.nodes
            ]
        if include_connections:
            response.connections = [ConnectionResponse.from_entity(c) for c in graph.connections]
        return response


class MatrixListResponse(BaseModel):
    data: list[MatrixResponse]
    pagination: PaginationDTO

    @classmethod
    def from_page(cls, page: Page) -> "MatrixListResponse":
        return cls(
            data=[MatrixResponse.from_entity(matrix) for matrix in page.items],
            pagination=PaginationDTO.from_page(page),
        )


class MatrixGraphResponse(BaseModel):
    matrix_id: str
    nodes: list[NodeResponse]
    connections: list[ConnectionResponse]

    @classmethod
    def from_graph(
        cls, graph: MatrixGraph, triggers: dict[str, Trigger] | None = None
    ) -> "MatrixGraphResponse":
        triggers = triggers or {}
        return cls(
            matrix_id=graph.matrix.id,
            nodes=[NodeResponse.from_entity(node, triggers.get(node.id)) for node in graph.nodes],
            connections=[ConnectionResponse.from_entity(c) for c in graph.connections],
        )


class GraphIssueDTO(BaseModel):
    code: str
    message: str
    node_ids: list[str] = Field(default_factory=list)
    connection_ids: list[str] = Field(default_factory=list)


class MatrixValidationResponse(BaseModel):
    valid: bool
    errors: list[GraphIssueDTO]
    warnings: list[GraphIssueDTO]
    entry_node_ids: list[str]
    reachable_node_ids: list[str]
    topological_order: list[str]

    @classmethod
    def from_report(cls, report: GraphValidationReport) -> "MatrixValidationResponse":
        return cls(
            valid=report.is_valid,
            errors=[GraphIssueDTO(**asdict(issue)) for issue in report.errors],
            warnings=[GraphIssueDTO(**asdict(issue)) for issue in report.warnings],
            entry_node_ids=report.entry_node_ids,
            reachable_node_ids=report.reachable_node_ids,
            topological_order=report.topological_order,
        )
