"""Repository 实现 - 数据访问层

设计原则：
- 实现领域层定义的 Port 接口（Protocol，结构化子类型）
- 使用 Assembler 模式进行对象转换：ORM 模型 ⇄ 领域实体
- 记录不存在时抛出领域异常 NotFoundError
- 不提交事务（由调用者控制）
"""

from src.infrastructure.database.repositories.connection_repository import (
    SQLAlchemyConnectionRepository,
)
from src.infrastructure.database.repositories.execution_repository import (
    SQLAlchemyExecutionRepository,
)
from src.infrastructure.database.repositories.matrix_repository import (
    SQLAlchemyMatrixRepository,
)
from src.infrastructure.database.repositories.node_repository import SQLAlchemyNodeRepository
from src.infrastructure.database.repositories.project_repository import (
    SQLAlchemyProjectRepository,
)
from src.infrastructure.database.repositories.trigger_repository import (
    SQLAlchemyTriggerRepository,
)

__all__ = [
    "SQLAlchemyConnectionRepository",
    "SQLAlchemyExecutionRepository",
    "SQLAlchemyMatrixRepository",
    "SQLAlchemyNodeRepository",
    "SQLAlchemyProjectRepository",
    "SQLAlchemyTriggerRepository",
]
