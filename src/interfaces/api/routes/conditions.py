"""Connection Conditions 路由

条件只能挂在 condition 类型的连接上；删除最后一个条件时连接类型重置为 default。
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.application.use_cases.manage_connections import ManageConditionsUseCase
from src.domain.exceptions import DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import SQLAlchemyConnectionRepository
from src.interfaces.api.dto.connection_dto import (
    ConditionDetailResponse,
    ConditionListResponse,
    ConditionRequest,
    ConditionResponse,
    ConnectionResponse,
)

router = APIRouter(prefix="/conditions", tags=["Connection Conditions"])


def get_manage_conditions_use_case(
    db: Session = Depends(get_db_session),
) -> ManageConditionsUseCase:
    return ManageConditionsUseCase(connection_repository=SQLAlchemyConnectionRepository(db))


@router.get("/connections/{connection_id}/conditions", response_model=ConditionListResponse)
def list_conditions(
    connection_id: str,
    use_case: ManageConditionsUseCase = Depends(get_manage_conditions_use_case),
) -> ConditionListResponse:
    try:
        conditions = use_case.list_for_connection(connection_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ConditionListResponse(data=[ConditionResponse.from_entity(c) for c in conditions])


@router.get(
    "/{condition_id}", response_model=ConditionDetailResponse, response_model_exclude_none=True
)
def get_condition(
    condition_id: str,
    include_connection: bool = Query(False),
    use_case: ManageConditionsUseCase = Depends(get_manage_conditions_use_case),
) -> ConditionDetailResponse:
    try:
        condition, connection = use_case.get(condition_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return ConditionDetailResponse(
        **ConditionResponse.from_entity(condition).model_dump(),
        connection=ConnectionResponse.from_entity(connection) if include_connection else None,
    )


@router.post(
    "/connections/{connection_id}/conditions",
    response_model=ConditionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_condition(
    connection_id: str,
    request: ConditionRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageConditionsUseCase = Depends(get_manage_conditions_use_case),
) -> ConditionResponse:
    try:
        condition = use_case.create(connection_id, request.condition)
        db.commit()
        return ConditionResponse.from_entity(condition)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/{condition_id}", response_model=ConditionResponse)
def update_condition(
    condition_id: str,
    request: ConditionRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageConditionsUseCase = Depends(get_manage_conditions_use_case),
) -> ConditionResponse:
    try:
        condition = use_case.update(condition_id, request.condition)
        db.commit()
        return ConditionResponse.from_entity(condition)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{condition_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_condition(
    condition_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageConditionsUseCase = Depends(get_manage_conditions_use_case),
) -> None:
    try:
        use_case.delete(condition_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
