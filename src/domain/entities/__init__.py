"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from src.domain.entities.connection import Connection, ConnectionCondition
from src.domain.entities.execution import MatrixExecution, NodeExecution
from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.entities.node import Node
from src.domain.entities.project import Project
from src.domain.entities.trigger import Trigger

__all__ = [
    "Connection",
    "ConnectionCondition",
    "Matrix",
    "MatrixExecution",
    "MatrixGraph",
    "Node",
    "NodeExecution",
    "Project",
    "Trigger",
]
