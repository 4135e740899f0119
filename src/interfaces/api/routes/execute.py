"""Execute 路由

- POST /execute/matrix/{matrix_id}：端到端执行（wait=false 时后台执行并返回 202）
- POST /execute/node/{matrix_id}/{node_id}/start：从指定节点开始执行

执行类路由均为同步函数：FastAPI 在线程池中调用，引擎经 asyncio.run 运行，
逐次落库的同步 SQLAlchemy I/O 不占用服务事件循环。
"""

import asyncio
import logging
from collections.abc import Callable

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from src.application.use_cases.execute_matrix import ExecuteMatrixUseCase
from src.domain.exceptions import DomainError, GraphValidationError, NotFoundError
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.infrastructure.database.engine import get_db_session
from src.interfaces.api.dependencies.execution import (
    create_execute_use_case,
    get_executor_registry,
    get_session_factory,
)
from src.interfaces.api.dto.execution_dto import (
    ExecuteMatrixRequest,
    ExecuteNodeRequest,
    ExecutionAcceptedResponse,
    ExecutionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/execute", tags=["Execute"])


def get_execute_use_case(
    db: Session = Depends(get_db_session),
    executor_registry: NodeExecutorRegistry = Depends(get_executor_registry),
) -> ExecuteMatrixUseCase:
    return create_execute_use_case(db, executor_registry)


def _raise_http(db: Session, exc: DomainError) -> None:
    db.rollback()
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, GraphValidationError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "issues": exc.issues},
        ) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def run_execution_in_background(
    execution_id: str,
    session_factory: Callable[[], Session],
    executor_registry: NodeExecutorRegistry,
) -> None:
    """后台执行已持久化的执行记录（独立会话，在线程池中运行）"""
    session = session_factory()
    try:
        use_case = create_execute_use_case(session, executor_registry)
        execution = asyncio.run(use_case.run_pending(execution_id))
        logger.info(
            "后台执行完成: %s (%s)",
            execution_id,
            execution.status.value,
            extra={"execution_id": execution_id},
        )
    except Exception:
        session.rollback()
        logger.exception("后台执行失败: %s", execution_id, extra={"execution_id": execution_id})
    finally:
        session.close()


@router.post("/matrix/{matrix_id}", response_model=ExecutionResponse)
def execute_matrix(
    matrix_id: str,
    background_tasks: BackgroundTasks,
    request: ExecuteMatrixRequest | None = None,
    db: Session = Depends(get_db_session),
    executor_registry: NodeExecutorRegistry = Depends(get_executor_registry),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
    use_case: ExecuteMatrixUseCase = Depends(get_execute_use_case),
):
    """端到端执行矩阵

    从所有启用的 trigger 节点开始执行，矩阵必须为 active 状态。
    """
    request = request or ExecuteMatrixRequest()
    try:
        if not request.wait:
            _, execution = use_case.prepare(matrix_id, request.input)
            db.commit()
            background_tasks.add_task(
                run_execution_in_background, execution.id, session_factory, executor_registry
            )
            accepted = ExecutionAcceptedResponse(
                execution_id=execution.id, status=execution.status
            )
            return JSONResponse(
                status_code=status.HTTP_202_ACCEPTED, content=accepted.model_dump(mode="json")
            )

        execution = asyncio.run(use_case.execute(matrix_id, request.input))
        db.commit()
        return ExecutionResponse.from_entity(execution)
    except DomainError as exc:
        _raise_http(db, exc)


@router.post("/node/{matrix_id}/{node_id}/start", response_model=ExecutionResponse)
def execute_from_node(
    matrix_id: str,
    node_id: str,
    request: ExecuteNodeRequest | None = None,
    db: Session = Depends(get_db_session),
    use_case: ExecuteMatrixUseCase = Depends(get_execute_use_case),
) -> ExecutionResponse:
    """从指定节点开始执行（草稿矩阵同样允许，downstream=false 时只执行该节点）"""
    request = request or ExecuteNodeRequest()
    try:
        execution = asyncio.run(
            use_case.execute_from_node(
                matrix_id, node_id, input=request.input, downstream=request.downstream
            )
        )
        db.commit()
        return ExecutionResponse.from_entity(execution)
    except DomainError as exc:
        _raise_http(db, exc)
