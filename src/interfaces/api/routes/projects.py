"""Projects 路由"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.application.use_cases.manage_projects import ManageProjectsUseCase
from src.domain.exceptions import ConflictError, DomainError, NotFoundError
from src.infrastructure.database.engine import get_db_session
from src.infrastructure.database.repositories import SQLAlchemyProjectRepository
from src.interfaces.api.dto.project_dto import (
    CreateProjectRequest,
    ProjectListResponse,
    ProjectResponse,
    UpdateProjectRequest,
)

router = APIRouter(prefix="/projects", tags=["Projects"])


def get_manage_projects_use_case(db: Session = Depends(get_db_session)) -> ManageProjectsUseCase:
    return ManageProjectsUseCase(project_repository=SQLAlchemyProjectRepository(db))


@router.get("", response_model=ProjectListResponse)
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, description="按名称模糊搜索（不区分大小写）"),
    use_case: ManageProjectsUseCase = Depends(get_manage_projects_use_case),
) -> ProjectListResponse:
    return ProjectListResponse.from_page(use_case.list(page=page, limit=limit, search=search))


@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(
    project_id: str,
    use_case: ManageProjectsUseCase = Depends(get_manage_projects_use_case),
) -> ProjectResponse:
    try:
        return ProjectResponse.from_entity(use_case.get(project_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
def create_project(
    request: CreateProjectRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageProjectsUseCase = Depends(get_manage_projects_use_case),
) -> ProjectResponse:
    try:
        project = use_case.create(request.to_input())
        db.commit()
        return ProjectResponse.from_entity(project)
    except ConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: str,
    request: UpdateProjectRequest,
    db: Session = Depends(get_db_session),
    use_case: ManageProjectsUseCase = Depends(get_manage_projects_use_case),
) -> ProjectResponse:
    try:
        project = use_case.update(project_id, request.to_input())
        db.commit()
        return ProjectResponse.from_entity(project)
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except DomainError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    db: Session = Depends(get_db_session),
    use_case: ManageProjectsUseCase = Depends(get_manage_projects_use_case),
) -> None:
    """删除项目（级联删除其下全部矩阵）"""
    try:
        use_case.delete(project_id)
        db.commit()
    except NotFoundError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
