"""ProjectRepository Port - Project 实体的持久化接口

方法命名规范（全部仓储一致）：
- save(): 保存实体（新增或更新）
- get_by_id(): 根据 ID 获取实体（不存在抛 NotFoundError）
- find_by_id(): 根据 ID 查找实体（不存在返回 None）
- exists(): 检查实体是否存在
- delete(): 删除实体（幂等）
"""

from typing import Protocol

from src.domain.entities.project import Project
from src.domain.value_objects.page import Page


class ProjectRepository(Protocol):
    def save(self, project: Project) -> None: ...

    def get_by_id(self, project_id: str) -> Project: ...

    def find_by_id(self, project_id: str) -> Project | None: ...

    def find_by_name(self, name: str) -> Project | None:
        """按名称精确查找（用于唯一性校验）"""
        ...

    def list(self, page: int, limit: int, search: str | None = None) -> Page:
        """分页列出项目（按创建时间倒序，search 为名称模糊匹配，不区分大小写）"""
        ...

    def exists(self, project_id: str) -> bool: ...

    def delete(self, project_id: str) -> None:
        """删除项目（级联删除矩阵）"""
        ...
