"""Domain 端口（Ports）

领域层定义接口，基础设施层实现接口（依赖倒置）
"""

from src.domain.ports.connection_repository import ConnectionRepository
from src.domain.ports.execution_repository import ExecutionRepository
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_executor import NodeExecutor, NodeExecutorRegistry
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.project_repository import ProjectRepository
from src.domain.ports.trigger_repository import TriggerRepository

__all__ = [
    "ConnectionRepository",
    "ExecutionRepository",
    "MatrixRepository",
    "NodeExecutor",
    "NodeExecutorRegistry",
    "NodeRepository",
    "ProjectRepository",
    "TriggerRepository",
]
