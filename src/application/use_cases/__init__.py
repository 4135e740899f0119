"""Application 层用例 - 业务逻辑编排

为什么需要 Use Case？
1. 业务逻辑编排：协调 Domain 实体、Repository、Domain Service
2. 事务边界：由 API 层在用例返回后提交（执行记录由 commit 回调逐步提交）
3. 输入输出转换：接收输入参数，返回领域实体

设计原则：
- 单一职责：每个 Use Case 只负责一类资源
- 依赖倒置：依赖 Port 接口，不依赖具体实现
- 可测试性：使用 Mock Repository 进行单元测试
"""

from src.application.use_cases.execute_matrix import ExecuteMatrixUseCase
from src.application.use_cases.fire_trigger import FireTriggerUseCase
from src.application.use_cases.manage_connections import (
    CreateConnectionInput,
    ManageConditionsUseCase,
    ManageConnectionsUseCase,
    UpdateConnectionInput,
)
from src.application.use_cases.manage_matrices import (
    CreateMatrixInput,
    ManageMatricesUseCase,
    UpdateMatrixInput,
)
from src.application.use_cases.manage_nodes import (
    CreateNodeInput,
    ManageNodesUseCase,
    UpdateNodeInput,
)
from src.application.use_cases.manage_projects import (
    CreateProjectInput,
    ManageProjectsUseCase,
    UpdateProjectInput,
)
from src.application.use_cases.manage_triggers import (
    CreateTriggerInput,
    ManageTriggersUseCase,
    UpdateTriggerInput,
)
from src.application.use_cases.update_matrix_graph import (
    ConnectionChange,
    NodeChange,
    UpdateMatrixGraphUseCase,
)

__all__ = [
    "ConnectionChange",
    "CreateConnectionInput",
    "CreateMatrixInput",
    "CreateNodeInput",
    "CreateProjectInput",
    "CreateTriggerInput",
    "ExecuteMatrixUseCase",
    "FireTriggerUseCase",
    "ManageConditionsUseCase",
    "ManageConnectionsUseCase",
    "ManageMatricesUseCase",
    "ManageNodesUseCase",
    "ManageProjectsUseCase",
    "ManageTriggersUseCase",
    "NodeChange",
    "UpdateConnectionInput",
    "UpdateMatrixGraphUseCase",
    "UpdateMatrixInput",
    "UpdateNodeInput",
    "UpdateProjectInput",
    "UpdateTriggerInput",
]
