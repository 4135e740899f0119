"""Executions 路由：执行记录查询"""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.application.use_cases.execute_matrix import ExecuteMatrixUseCase
from src.domain.exceptions import NotFoundError
from src.interfaces.api.dto.execution_dto import ExecutionListResponse, ExecutionResponse
from src.interfaces.api.routes.execute import get_execute_use_case

router = APIRouter(prefix="/executions", tags=["Executions"])


@router.get("/matrix/{matrix_id}", response_model=ExecutionListResponse)
def list_executions(
    matrix_id: str,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    use_case: ExecuteMatrixUseCase = Depends(get_execute_use_case),
) -> ExecutionListResponse:
    """矩阵执行历史（按创建时间倒序）"""
    try:
        executions, total = use_case.list_executions(matrix_id, limit=limit, offset=offset)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ExecutionListResponse(
        data=[ExecutionResponse.from_entity(e) for e in executions],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{execution_id}", response_model=ExecutionResponse)
def get_execution(
    execution_id: str,
    use_case: ExecuteMatrixUseCase = Depends(get_execute_use_case),
) -> ExecutionResponse:
    try:
        return ExecutionResponse.from_entity(use_case.get_execution(execution_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
