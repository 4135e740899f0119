"""Connections 路由"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.application.use_cases.manage_connections import ManageConnectionsUseCase
from src.domain.exceptions import DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyConnectionRepository,
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
)
from src.interfaces.api.dto.connection_dto import (
    ConnectionListResponse,
    ConnectionResponse,
    CreateConnectionRequest,
    UpdateConnectionRequest,
)

router = APIRouter(prefix="/connections", tags=["Connections"])


def get_manage_connections_use_case(
    db: Session = Depends(get_db_session),
) -> ManageConnectionsUseCase:
    return ManageConnectionsUseCase(
        connection_repository=SQLAlchemyConnectionRepository(db),
        node_repository=SQLAlchemyNodeRepository(db),
        matrix_repository=SQLAlchemyMatrixRepository(db),
    )


@router.get(
    "/matrix/{matrix_id}", response_model=ConnectionListResponse, response_model_exclude_none=True
)
def list_connections(
    matrix_id: str,
    include_conditions: bool = Query(False),
    use_case: ManageConnectionsUseCase = Depends(get_manage_connections_use_case),
) -> ConnectionListResponse:
    try:
        connections = use_case.list_by_matrix(matrix_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ConnectionListResponse(
        data=[ConnectionResponse.from_entity(c, include_conditions) for c in connections]
    )


@router.get("/{connection_id}", response_model=ConnectionResponse)
def get_connection(
    connection_id: str,
    use_case: ManageConnectionsUseCase = Depends(get_manage_connections_use_case),
) -> ConnectionResponse:
    try:
        return ConnectionResponse.from_entity(use_case.get(connection_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/matrix/{matrix_id}", response_model=ConnectionResponse, status_code=status.HTTP_201_CREATED
)
def create_connection(
    matrix_id: str,
    request: CreateConnectionRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageConnectionsUseCase = Depends(get_manage_connections_use_case),
) -> ConnectionResponse:
    """创建连接（源/目标节点非法时返回 400）"""
    try:
        connection = use_case.create(matrix_id, request.to_input())
        db.commit()
        return ConnectionResponse.from_entity(connection)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/{connection_id}", response_model=ConnectionResponse)
def update_connection(
    connection_id: str,
    request: UpdateConnectionRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageConnectionsUseCase = Depends(get_manage_connections_use_case),
) -> ConnectionResponse:
    try:
        connection = use_case.update(connection_id, request.to_input())
        db.commit()
        return ConnectionResponse.from_entity(connection)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_connection(
    connection_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageConnectionsUseCase = Depends(get_manage_connections_use_case),
) -> None:
    try:
        use_case.delete(connection_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
