"""Matrices 路由

- 项目下矩阵的分页查询与创建
- 矩阵的获取 / 更新 / 删除 / 克隆 / 校验 / 图加载
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.application.use_cases.manage_matrices import ManageMatricesUseCase
from src.domain.exceptions import DomainError, MatrixHasChildrenError, NotFoundError
from src.domain.value_objects.matrix_status import MatrixStatus
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import (
    SQLAlchemyConnectionRepository,
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
    SQLAlchemyProjectRepository,
    SQLAlchemyTriggerRepository,
)
from src.interfaces.api.dto.matrix_dto import (
    CreateMatrixRequest,
    MatrixGraphResponse,
    MatrixListResponse,
    MatrixResponse,
    MatrixValidationResponse,
    UpdateMatrixRequest,
)

router = APIRouter(prefix="/matrix", tags=["Matrices"])


def get_manage_matrices_use_case(db: Session = Depends(get_db_session)) -> ManageMatricesUseCase:
    return ManageMatricesUseCase(
        matrix_repository=SQLAlchemyMatrixRepository(db),
        project_repository=SQLAlchemyProjectRepository(db),
        node_repository=SQLAlchemyNodeRepository(db),
        connection_repository=SQLAlchemyConnectionRepository(db),
    )


@router.get("/project/{project_id}", response_model=MatrixListResponse)
def list_matrices(
    project_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: MatrixStatus | None = Query(None, alias="status"),
    version: int | None = Query(None, ge=1),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixListResponse:
    try:
        result = use_case.list_by_project(
            project_id, page=page, limit=limit, status=status_filter, version=version
        )
        return MatrixListResponse.from_page(result)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/project/{project_id}", response_model=MatrixResponse, status_code=status.HTTP_201_CREATED
)
def create_matrix(
    project_id: str,
    request: CreateMatrixRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixResponse:
    try:
        matrix = use_case.create(project_id, request.to_input())
        db.commit()
        return MatrixResponse.from_entity(matrix)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{matrix_id}", response_model=MatrixResponse, response_model_exclude_none=True)
def get_matrix(
    matrix_id: str,
    include_nodes: bool = Query(False),
    include_connections: bool = Query(False),
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixResponse:
    try:
        if not include_nodes and not include_connections:
            return MatrixResponse.from_entity(use_case.get(matrix_id))

        graph = use_case.get_graph(matrix_id)
        triggers = SQLAlchemyTriggerRepository(db).find_by_node_ids(
            [node.id for node in graph.nodes]
        )
        return MatrixResponse.from_graph(
            graph,
            include_nodes=include_nodes,
            include_connections=include_connections,
            triggers=triggers,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.patch("/{matrix_id}", response_model=MatrixResponse, response_model_exclude_none=True)
def update_matrix(
    matrix_id: str,
    request: UpdateMatrixRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixResponse:
    try:
        matrix = use_case.update(matrix_id, request.to_input())
        db.commit()
        return MatrixResponse.from_entity(matrix)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{matrix_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_matrix(
    matrix_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> None:
    """删除矩阵（存在子矩阵时返回 400 与 child_matrix_ids）"""
    try:
        use_case.delete(matrix_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except MatrixHasChildrenError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(exc), "child_matrix_ids": exc.child_matrix_ids},
        ) from exc


@router.post(
    "/{matrix_id}/clone",
    response_model=MatrixResponse,
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
)
def clone_matrix(
    matrix_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixResponse:
    """克隆矩阵（节点、连接、连接条件一并复制，新矩阵为草稿）"""
    try:
        graph = use_case.clone(matrix_id)
        db.commit()
        return MatrixResponse.from_graph(graph)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/{matrix_id}/validate", response_model=MatrixValidationResponse)
def validate_matrix(
    matrix_id: str,
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixValidationResponse:
    try:
        return MatrixValidationResponse.from_report(use_case.validate(matrix_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("/{matrix_id}/graph", response_model=MatrixGraphResponse)
def get_matrix_graph(
    matrix_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageMatricesUseCase = Depends(get_manage_matrices_use_case),
) -> MatrixGraphResponse:
    try:
        graph = use_case.get_graph(matrix_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    triggers = SQLAlchemyTriggerRepository(db).find_by_node_ids([node.id for node in graph.nodes])
    return MatrixGraphResponse.from_graph(graph, triggers)
