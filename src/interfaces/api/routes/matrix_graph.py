"""矩阵图批量编辑路由

所有 ID 必须属于路径中的矩阵，否则整批拒绝（400），不会部分生效。
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases.update_matrix_graph import UpdateMatrixGraphUseCase
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyConnectionRepository,
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
    SQLAlchemyTriggerRepository,
)
from src.interfaces.api.dependencies.scheduler import get_optional_scheduler
from src.interfaces.api.dto.connection_dto import ConnectionResponse
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
from src.interfaces.api.dto.node_dto import NodeResponse

router = APIRouter(prefix="/matrix/{matrix_id}/graph", tags=["Matrix Graph"])


def get_update_graph_use_case(
    db: Session = Depends(get_db_session),
    scheduler: TriggerScheduler | None = Depends(get_optional_scheduler),
) -> UpdateMatrixGraphUseCase:
    return UpdateMatrixGraphUseCase(
        matrix_repository=SQLAlchemyMatrixRepository(db),
        node_repository=SQLAlchemyNodeRepository(db),
        connection_repository=SQLAlchemyConnectionRepository(db),
        trigger_repository=SQLAlchemyTriggerRepository(db),
        scheduler=scheduler,
    )


def _handle_error(db: Session, exc: DomainError) -> HTTPException:
    db.rollback()
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post("/nodes", response_model=BulkNodesResponse, status_code=status.HTTP_201_CREATED)
def create_nodes(
    matrix_id: str,
    request: BulkCreateNodesRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkNodesResponse:
    """批量创建节点（内嵌 trigger 不在批量接口中处理）"""
    try:
        nodes = use_case.create_nodes(matrix_id, [item.to_input() for item in request.nodes])
        db.commit()
        return BulkNodesResponse(data=[NodeResponse.from_entity(node) for node in nodes])
    except DomainError as exc:
        raise _handle_error(db, exc) from exc


@router.patch("/nodes", response_model=BulkNodesResponse)
def update_nodes(
    matrix_id: str,
    request: BulkUpdateNodesRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkNodesResponse:
    try:
        nodes = use_case.update_nodes(matrix_id, [item.to_change() for item in request.nodes])
        db.commit()
        return BulkNodesResponse(data=[NodeResponse.from_entity(node) for node in nodes])
    except DomainError as exc:
        raise _handle_error(db, exc) from exc


@router.delete("/nodes", response_model=BulkDeleteResponse)
def delete_nodes(
    matrix_id: str,
    request: BulkDeleteRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkDeleteResponse:
    """批量删除节点（先删除相关连接）"""
    try:
        deleted = use_case.delete_nodes(matrix_id, request.ids)
        db.commit()
        return BulkDeleteResponse(deleted=deleted)
    except DomainError as exc:
        raise _handle_error(db, exc) from exc


@router.post(
    "/connections", response_model=BulkConnectionsResponse, status_code=status.HTTP_201_CREATED
)
def create_connections(
    matrix_id: str,
    request: BulkCreateConnectionsRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkConnectionsResponse:
    try:
        connections = use_case.create_connections(
            matrix_id, [item.to_input() for item in request.connections]
        )
        db.commit()
        return BulkConnectionsResponse(
            data=[ConnectionResponse.from_entity(c) for c in connections]
        )
    except DomainError as exc:
        raise _handle_error(db, exc) from exc


@router.patch("/connections", response_model=BulkConnectionsResponse)
def update_connections(
    matrix_id: str,
    request: BulkUpdateConnectionsRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkConnectionsResponse:
    try:
        connections = use_case.update_connections(
            matrix_id, [item.to_change() for item in request.connections]
        )
        db.commit()
        return BulkConnectionsResponse(
            data=[ConnectionResponse.from_entity(c) for c in connections]
        )
    except DomainError as exc:
        raise _handle_error(db, exc) from exc


@router.delete("/connections", response_model=BulkDeleteResponse)
def delete_connections(
    matrix_id: str,
    request: BulkDeleteRequest,
    db: Session = Depends(get_db_session),
    use_case: UpdateMatrixGraphUseCase = Depends(get_update_graph_use_case),
) -> BulkDeleteResponse:
    try:
        deleted = use_case.delete_connections(matrix_id, request.ids)
        db.commit()
        return BulkDeleteResponse(deleted=deleted)
    except DomainError as exc:
        raise _handle_error(db, exc) from exc
