"""Nodes 路由"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.application.use_cases.manage_nodes import ManageNodesUseCase
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.domain.value_objects.node_type import NodeType
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
    SQLAlchemyTriggerRepository,
)
from src.interfaces.api.dependencies.scheduler import get_optional_scheduler
from src.interfaces.api.dto.node_dto import (
    CreateNodeRequest,
    NodeListResponse,
    NodeResponse,
    UpdateNodeRequest,
)

router = APIRouter(prefix="/nodes", tags=["Nodes"])


def get_manage_nodes_use_case(
    db: Session = Depends(get_db_session),
    scheduler: TriggerScheduler | None = Depends(get_optional_scheduler),
) -> ManageNodesUseCase:
    return ManageNodesUseCase(
        node_repository=SQLAlchemyNodeRepository(db),
        matrix_repository=SQLAlchemyMatrixRepository(db),
        trigger_repository=SQLAlchemyTriggerRepository(db),
        scheduler=scheduler,
    )


@router.get("/matrix/{matrix_id}", response_model=NodeListResponse)
def list_nodes(
    matrix_id: str,
    type: NodeType | None = Query(None, description="按节点类型过滤"),
    include_trigger: bool = Query(False, description="trigger 节点是否附带触发器"),
    use_case: ManageNodesUseCase = Depends(get_manage_nodes_use_case),
) -> NodeListResponse:
    try:
        nodes, triggers = use_case.list_by_matrix(matrix_id, type=type)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if not include_trigger:
        triggers = {}
    return NodeListResponse(
        data=[NodeResponse.from_entity(node, triggers.get(node.id)) for node in nodes]
    )


@router.get("/{node_id}", response_model=NodeResponse)
def get_node(
    node_id: str,
    use_case: ManageNodesUseCase = Depends(get_manage_nodes_use_case),
) -> NodeResponse:
    try:
        node, trigger = use_case.get(node_id)
        return NodeResponse.from_entity(node, trigger)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/matrix/{matrix_id}", response_model=NodeResponse, status_code=status.HTTP_201_CREATED
)
def create_node(
    matrix_id: str,
    request: CreateNodeRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageNodesUseCase = Depends(get_manage_nodes_use_case),
) -> NodeResponse:
    """创建节点（trigger 节点可同时创建内嵌触发器，同一事务提交）"""
    try:
        node, trigger = use_case.create(matrix_id, request.to_input())
        db.commit()
        return NodeResponse.from_entity(node, trigger)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/{node_id}", response_model=NodeResponse)
def update_node(
    node_id: str,
    request: UpdateNodeRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageNodesUseCase = Depends(get_manage_nodes_use_case),
) -> NodeResponse:
    try:
        node, trigger = use_case.update(node_id, request.to_input())
        db.commit()
        return NodeResponse.from_entity(node, trigger)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_node(
    node_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageNodesUseCase = Depends(get_manage_nodes_use_case),
) -> None:
    try:
        use_case.delete(node_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
