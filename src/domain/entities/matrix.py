"""Matrix 实体 - 工作流矩阵（有向图的容器）

业务定义：
- Matrix 属于某个 Project，可以有父矩阵（parent_matrix_id）
- Matrix 包含多个 Node 和 Connection（分别持久化，执行时组装为 MatrixGraph）
- 只有 ACTIVE 状态的矩阵允许端到端执行

MatrixGraph：
- 执行与校验时使用的只读快照（矩阵 + 节点 + 连接 + 连接条件）
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.domain.entities.connection import Connection
from src.domain.entities.node import Node
from src.domain.entities.project import MAX_NAME_LENGTH, validate_name
from src.domain.exceptions import DomainError
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.node_type import NodeType


@dataclass
class Matrix:
    """Matrix 实体

    属性说明：
    - id: 唯一标识符（mx_ 前缀）
    - project_id: 所属项目
    - parent_matrix_id: 父矩阵（可选）
    - version: 版本号（从 1 开始）
    - name / description: 名称与描述
    - status: 矩阵状态（默认 DRAFT）
    - config: 矩阵级配置
    """

    id: str
    project_id: str
    name: str
    description: str | None = None
    status: MatrixStatus = MatrixStatus.DRAFT
    version: int = 1
    parent_matrix_id: str | None = None
    config: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        project_id: str,
        name: str,
        description: str | None = None,
        status: MatrixStatus = MatrixStatus.DRAFT,
        config: dict[str, Any] | None = None,
        parent_matrix_id: str | None = None,
    ) -> "Matrix":
        """创建 Matrix 的工厂方法

        抛出：
            DomainError: project_id 为空或 name 非法
        """
        if not project_id:
            raise DomainError("project_id 不能为空")

        now = datetime.now(UTC)
        return cls(
            id=f"mx_{uuid4().hex[:8]}",
            project_id=project_id,
            name=validate_name(name),
            description=description,
            status=status,
            version=1,
            parent_matrix_id=parent_matrix_id,
            config=dict(config or {}),
            created_at=now,
            updated_at=now,
        )

    def update(
        self,
        name: str | None = None,
        description: str | None = None,
        status: MatrixStatus | None = None,
        config: dict[str, Any] | None = None,
        version: int | None = None,
    ) -> None:
        """部分更新（None 表示不修改）"""
        if name is not None:
            self.name = validate_name(name)
        if description is not None:
            self.description = description
        if status is not None:
            self.status = status
        if config is not None:
            self.config = dict(config)
        if version is not None:
            if version < 1:
                raise DomainError("version 必须大于等于 1")
            self.version = version
        self.updated_at = datetime.now(UTC)

    def clone(self) -> "Matrix":
        """复制矩阵元数据

        业务规则：
        - 名称追加 " (Clone)"
        - 状态重置为 DRAFT，版本重置为 1
        - 不继承父矩阵
        """
        now = datetime.now(UTC)
        return Matrix(
            id=f"mx_{uuid4().hex[:8]}",
            project_id=self.project_id,
            name=validate_name(f"{self.name[: MAX_NAME_LENGTH - 8]} (Clone)"),
            description=self.description,
            status=MatrixStatus.DRAFT,
            version=1,
            parent_matrix_id=None,
            config=dict(self.config),
            created_at=now,
            updated_at=now,
        )

    def ensure_executable(self) -> None:
        """端到端执行前的状态检查

        抛出：
            DomainError: 矩阵未激活
        """
        if self.status != MatrixStatus.ACTIVE:
            raise DomainError(f"矩阵未激活，无法执行（当前状态: {self.status.value}）")


@dataclass
class MatrixGraph:
    """矩阵图快照（执行/校验用）"""

    matrix: Matrix
    nodes: list[Node] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def node_map(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def incoming(self, node_id: str) -> list[Connection]:
        return [c for c in self.connections if c.target_id == node_id]

    def outgoing(self, node_id: str) -> list[Connection]:
        return [c for c in self.connections if c.source_id == node_id]

    def trigger_node_ids(self, enabled_only: bool = True) -> list[str]:
        return [
            node.id
            for node in self.nodes
            if node.type == NodeType.TRIGGER and not (enabled_only and node.disabled)
        ]

    def reachable_from(self, entry_node_ids: list[str]) -> set[str]:
        """BFS 计算从入口节点可达的节点集合（包含入口节点自身）"""
        node_ids = {node.id for node in self.nodes}
        adjacency: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
        for connection in self.connections:
            if connection.source_id in node_ids and connection.target_id in node_ids:
                adjacency[connection.source_id].append(connection.target_id)

        visited = {node_id for node_id in entry_node_ids if node_id in node_ids}
        queue = deque(visited)
        while queue:
            current = queue.popleft()
            for neighbor in adjacency[current]:
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return visited
