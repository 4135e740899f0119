"""Triggers 路由

- 触发器 CRUD（一个 trigger 节点至多一个触发器）
- 手动触发：POST /triggers/{id}/fire（任意状态）
- Webhook 触发：POST /triggers/{id}/webhook（仅 active 的 webhook 触发器，请求体作为执行输入）

触发类路由为同步函数（线程池中经 asyncio.run 执行矩阵）。
"""

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.application.use_cases.fire_trigger import FireTriggerUseCase
from src.application.use_cases.manage_triggers import ManageTriggersUseCase
from src.domain.exceptions import (
    ConflictError,
    DomainError,
    GraphValidationError,
    NotFoundError,
)
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyNodeRepository,
    SQLAlchemyTriggerRepository,
)
from src.interfaces.api.dependencies.execution import (
    create_execute_use_case,
    get_executor_registry,
)
from src.interfaces.api.dependencies.scheduler import get_optional_scheduler
from src.interfaces.api.dto.execution_dto import ExecutionResponse
from src.interfaces.api.dto.node_dto import TriggerDetailResponse
from src.interfaces.api.dto.trigger_dto import (
    CreateTriggerRequest,
    TriggerResponse,
    UpdateTriggerRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/triggers", tags=["Triggers"])


def get_manage_triggers_use_case(
    db: Session = Depends(get_db_session),
    scheduler: TriggerScheduler | None = Depends(get_optional_scheduler),
) -> ManageTriggersUseCase:
    return ManageTriggersUseCase(
        node_repository=SQLAlchemyNodeRepository(db),
        trigger_repository=SQLAlchemyTriggerRepository(db),
        scheduler=scheduler,
    )


def get_fire_trigger_use_case(
    db: Session = Depends(get_db_session),
    executor_registry: NodeExecutorRegistry = Depends(get_executor_registry),
    scheduler: TriggerScheduler | None = Depends(get_optional_scheduler),
) -> FireTriggerUseCase:
    return FireTriggerUseCase(
        trigger_repository=SQLAlchemyTriggerRepository(db),
        node_repository=SQLAlchemyNodeRepository(db),
        execute_use_case=create_execute_use_case(db, executor_registry),
        scheduler=scheduler,
    )


@router.get("/nodes/{node_id}/trigger", response_model=TriggerResponse)
def get_node_trigger(
    node_id: str,
    use_case: ManageTriggersUseCase = Depends(get_manage_triggers_use_case),
) -> TriggerResponse:
    try:
        return TriggerResponse.from_entity(use_case.get_for_node(node_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post(
    "/nodes/{node_id}/trigger",
    response_model=TriggerResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_trigger(
    node_id: str,
    request: CreateTriggerRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageTriggersUseCase = Depends(get_manage_triggers_use_case),
) -> TriggerResponse:
    """为 trigger 节点创建触发器（已存在时 409）"""
    try:
        trigger = use_case.create(node_id, request.to_input())
        db.commit()
        return TriggerResponse.from_entity(trigger)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{trigger_id}", response_model=TriggerDetailResponse)
def get_trigger(
    trigger_id: str,
    use_case: ManageTriggersUseCase = Depends(get_manage_triggers_use_case),
) -> TriggerDetailResponse:
    try:
        trigger, node = use_case.get(trigger_id)
        return TriggerDetailResponse.from_entities(trigger, node)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.patch("/{trigger_id}", response_model=TriggerResponse)
def update_trigger(
    trigger_id: str,
    request: UpdateTriggerRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageTriggersUseCase = Depends(get_manage_triggers_use_case),
) -> TriggerResponse:
    try:
        trigger = use_case.update(trigger_id, request.to_input())
        db.commit()
        return TriggerResponse.from_entity(trigger)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{trigger_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_trigger(
    trigger_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageTriggersUseCase = Depends(get_manage_triggers_use_case),
) -> None:
    try:
        use_case.delete(trigger_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _fire(
    use_case: FireTriggerUseCase,
    db: Session,
    trigger_id: str,
    payload: Any,
    source: str,
) -> ExecutionResponse:
    try:
        execution = asyncio.run(use_case.fire(trigger_id, payload=payload, source=source))
        db.commit()
        return ExecutionResponse.from_entity(execution)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except GraphValidationError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "issues": exc.issues},
        ) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{trigger_id}/fire", response_model=ExecutionResponse)
def fire_trigger(
    trigger_id: str,
    payload: Any = Body(None),
    db: Session = Depends(get_db_session),
    use_case: FireTriggerUseCase = Depends(get_fire_trigger_use_case),
) -> ExecutionResponse:
    """手动触发（同步等待执行完成）"""
    logger.info("手动触发 %s", trigger_id, extra={"trigger_id": trigger_id})
    return _fire(use_case, db, trigger_id, payload, "manual")


@router.post("/{trigger_id}/webhook", response_model=ExecutionResponse)
def webhook_trigger(
    trigger_id: str,
    payload: Any = Body(None),
    db: Session = Depends(get_db_session),
    use_case: FireTriggerUseCase = Depends(get_fire_trigger_use_case),
) -> ExecutionResponse:
    return _fire(use_case, db, trigger_id, payload, "webhook")
