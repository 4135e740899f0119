"""API DTO（Data Transfer Objects）

DTO 职责：
1. 数据验证：使用 Pydantic 验证请求数据
2. 数据序列化：将 Domain 实体转换为 JSON
3. 数据转换：请求 DTO → 用例输入（to_input），Domain 实体 → 响应 DTO（from_entity）

与 Domain 实体分离：API 字段可以独立演进，Domain 层保持稳定。
"""

from src.interfaces.api.dto.common_dto import PaginationDTO, PositionDTO
from src.interfaces.api.dto.connection_dto import (
    ConditionDetailResponse,
    ConditionListResponse,
    ConditionRequest,
    ConditionResponse,
    ConnectionListResponse,
    ConnectionResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)
from src.interfaces.api.dto.execution_dto import (
    ExecuteMatrixRequest,
    ExecuteNodeRequest,
    ExecutionAcceptedResponse,
    ExecutionListResponse,
    ExecutionResponse,
    NodeExecutionResponse,
)
from src.interfaces.api.dto.graph_dto import (
    BulkConnectionsResponse,
    BulkCreateConnectionsRequest,
    BulkCreateNodesRequest,
    BulkDeleteRequest,
    BulkDeleteResponse,
    BulkNodesResponse,
    BulkUpdateConnectionsRequest,
    BulkUpdateNodesRequest,
)
from src.interfaces.api.dto.matrix_dto import (
    CreateMatrixRequest,
    MatrixGraphResponse,
    MatrixListResponse,
    MatrixResponse,
    MatrixValidationResponse,
    UpdateMatrixRequest,
)
from src.interfaces.api.dto.node_dto import (
    CreateNodeRequest,
    NodeListResponse,
    NodeResponse,
    TriggerDetailResponse,
    UpdateNodeRequest,
)
from src.interfaces.api.dto.project_dto import (
    CreateProjectRequest,
    ProjectListResponse,
    ProjectResponse,
    UpdateProjectRequest,
)
from src.interfaces.api.dto.trigger_dto import (
    CreateTriggerRequest,
    TriggerResponse,
    UpdateTriggerRequest,
)

__all__ = [
    "BulkConnectionsResponse",
    "BulkCreateConnectionsRequest",
    "BulkCreateNodesRequest",
    "BulkDeleteRequest",
    "BulkDeleteResponse",
    "BulkNodesResponse",
    "BulkUpdateConnectionsRequest",
    "BulkUpdateNodesRequest",
    "ConditionDetailResponse",
    "ConditionListResponse",
    "ConditionRequest",
    "ConditionResponse",
    "ConnectionListResponse",
    "ConnectionResponse",
    "CreateConnectionRequest",
    "CreateMatrixRequest",
    "CreateNodeRequest",
    "CreateProjectRequest",
    "CreateTriggerRequest",
    "ExecuteMatrixRequest",
    "ExecuteNodeRequest",
    "ExecutionAcceptedResponse",
    "ExecutionListResponse",
    "ExecutionResponse",
    "MatrixGraphResponse",
    "MatrixListResponse",
    "MatrixResponse",
    "MatrixValidationResponse",
    "NodeExecutionResponse",
    "NodeListResponse",
    "NodeResponse",
    "PaginationDTO",
    "PositionDTO",
    "ProjectListResponse",
    "ProjectResponse",
    "TriggerDetailResponse",
    "TriggerResponse",
    "UpdateConnectionRequest",
    "UpdateMatrixRequest",
    "UpdateNodeRequest",
    "UpdateProjectRequest",
    "UpdateTriggerRequest",
]
