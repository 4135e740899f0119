"""执行相关依赖

- 节点执行器注册表（进程级单例，按配置创建）
- 会话工厂（后台任务 / 调度器触发使用独立会话）
- 执行用例组装：引擎参数全部来自 settings
"""

from collections.abc import Callable

from sqlalchemy.orm import Session

from src.application.use_cases.execute_matrix import ExecuteMatrixUseCase
from src.config import settings
from src.domain.ports.matrix_repository import MatrixRepository
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.matrix_execution_engine import MatrixExecutionEngine
from src.domain.value_objects.retry_policy import RetryPolicy
from src.infrastructure.database.engine import SessionLocal
from src.infrastructure.database.repositories import (
    SQLAlchemyExecutionRepository,
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
)
from src.infrastructure.executors import create_executor_registry

_executor_registry: NodeExecutorRegistry | None = None


def set_executor_registry(registry: NodeExecutorRegistry) -> None:
    global _executor_registry
    _executor_registry = registry


def get_executor_registry() -> NodeExecutorRegistry:
    """FastAPI dependency：未在启动时注册时按配置创建默认注册表"""
    global _executor_registry
    if _executor_registry is None:
        _executor_registry = create_executor_registry(http_timeout=settings.http_timeout)
    return _executor_registry


def get_session_factory() -> Callable[[], Session]:
    """FastAPI dependency：后台任务使用的会话工厂（测试可覆盖）"""
    return SessionLocal


def create_execution_engine(
    executor_registry: NodeExecutorRegistry, matrix_repository: MatrixRepository
) -> MatrixExecutionEngine:
    return MatrixExecutionEngine(
        executor_registry,
        retry_policy=RetryPolicy(
            max_retries=settings.node_max_retries,
            backoff_factor=settings.node_retry_backoff_factor,
            initial_delay=settings.node_retry_initial_delay,
            max_delay=settings.node_retry_max_delay,
        ),
        node_timeout=settings.node_timeout,
        max_concurrent_nodes=settings.max_concurrent_nodes,
        max_sub_matrix_depth=settings.max_sub_matrix_depth,
        graph_loader=matrix_repository.get_graph,
    )


def create_execute_use_case(
    session: Session, executor_registry: NodeExecutorRegistry
) -> ExecuteMatrixUseCase:
    """组装执行用例（每次状态流转后提交 session）"""
    matrix_repository = SQLAlchemyMatrixRepository(session)
    return ExecuteMatrixUseCase(
        matrix_repository=matrix_repository,
        node_repository=SQLAlchemyNodeRepository(session),
        execution_repository=SQLAlchemyExecutionRepository(session),
        engine=create_execution_engine(executor_registry, matrix_repository),
        commit=session.commit,
    )
