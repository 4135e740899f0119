"""ManageMatricesUseCase - 矩阵管理用例

编排：
1. 项目下矩阵的分页查询、获取、创建、更新
2. 删除矩阵（存在子矩阵时拒绝）
3. 克隆矩阵（节点、连接、连接条件整体复制并重映射 ID）
4. 矩阵图校验与加载
"""

from dataclasses import dataclass
from typing import Any

from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.exceptions import MatrixHasChildrenError
from src.domain.ports.connection_repository import ConnectionRepository
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.project_repository import ProjectRepository
from src.domain.services.graph_validator import GraphValidationReport, GraphValidator
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.page import Page


@dataclass
class CreateMatrixInput:
    """创建矩阵输入"""

    name: str
    description: str | None = None
    status: MatrixStatus = MatrixStatus.DRAFT
    config: dict[str, Any] | None = None
    parent_matrix_id: str | None = None


@dataclass
class UpdateMatrixInput:
    """更新矩阵输入（None 表示不修改）"""

    name: str | None = None
    description: str | None = None
    status: MatrixStatus | None = None
    config: dict[str, Any] | None = None
    version: int | None = None


class ManageMatricesUseCase:
    """矩阵管理用例

    依赖：
    - MatrixRepository / ProjectRepository / NodeRepository / ConnectionRepository
    """

    def __init__(
        self,
        matrix_repository: MatrixRepository,
        project_repository: ProjectRepository,
        node_repository: NodeRepository,
        connection_repository: ConnectionRepository,
        validator: GraphValidator | None = None,
    ):
        self.matrix_repository = matrix_repository
        self.project_repository = project_repository
        self.node_repository = node_repository
        self.connection_repository = connection_repository
        self.validator = validator or GraphValidator()

    def list_by_project(
        self,
        project_id: str,
        page: int = 1,
        limit: int = 10,
        status: MatrixStatus | None = None,
        version: int | None = None,
    ) -> Page:
        """抛出：NotFoundError（项目不存在）"""
        self.project_repository.get_by_id(project_id)
        return self.matrix_repository.list_by_project(
            project_id, page=page, limit=limit, status=status, version=version
        )

    def get(self, matrix_id: str) -> Matrix:
        return self.matrix_repository.get_by_id(matrix_id)

    def get_graph(self, matrix_id: str) -> MatrixGraph:
        return self.matrix_repository.get_graph(matrix_id)

    def create(self, project_id: str, input_data: CreateMatrixInput) -> Matrix:
        """创建矩阵

        抛出：
            NotFoundError: 项目或父矩阵不存在
            DomainError: 名称非法
        """
        self.project_repository.get_by_id(project_id)
        if input_data.parent_matrix_id:
            self.matrix_repository.get_by_id(input_data.parent_matrix_id)

        matrix = Matrix.create(
            project_id=project_id,
            name=input_data.name,
            description=input_data.description,
            status=input_data.status,
            config=input_data.config,
            parent_matrix_id=input_data.parent_matrix_id,
        )
        self.matrix_repository.save(matrix)
        return matrix

    def update(self, matrix_id: str, input_data: UpdateMatrixInput) -> Matrix:
        matrix = self.matrix_repository.get_by_id(matrix_id)
        matrix.update(
            name=input_data.name,
            description=input_data.description,
            status=input_data.status,
            config=input_data.config,
            version=input_data.version,
        )
        self.matrix_repository.save(matrix)
        return matrix

    def delete(self, matrix_id: str) -> None:
        """删除矩阵

        抛出：
            NotFoundError: 矩阵不存在
            MatrixHasChildrenError: 存在子矩阵
        """
        self.matrix_repository.get_by_id(matrix_id)
        child_ids = self.matrix_repository.find_child_ids(matrix_id)
        if child_ids:
            raise MatrixHasChildrenError(matrix_id, child_ids)
        self.matrix_repository.delete(matrix_id)

    def clone(self, matrix_id: str) -> MatrixGraph:
        """克隆矩阵及其图结构

        返回：
            新矩阵的 MatrixGraph
        """
        source = self.matrix_repository.get_graph(matrix_id)
        cloned = source.matrix.clone()
        self.matrix_repository.save(cloned)

        node_id_map: dict[str, str] = {}
        nodes = []
        for node in source.nodes:
            copied = node.copy_to(cloned.id)
            node_id_map[node.id] = copied.id
            self.node_repository.save(copied)
            nodes.append(copied)

        connections = []
        for connection in source.connections:
            copied = connection.copy_to(cloned.id, node_id_map)
            self.connection_repository.save(copied)
            connections.append(copied)

        return MatrixGraph(matrix=cloned, nodes=nodes, connections=connections)

    def validate(self, matrix_id: str) -> GraphValidationReport:
        graph = self.matrix_repository.get_graph(matrix_id)
        return self.validator.validate(graph)
