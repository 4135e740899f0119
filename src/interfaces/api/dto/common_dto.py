"""通用 DTO：画布位置、分页信息"""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.value_objects.page import Page
from src.domain.value_objects.position import Position


class PositionDTO(BaseModel):
    """节点位置（允许负坐标）"""

    x: float = Field(default=0.0, description="横坐标")
    y: float = Field(default=0.0, description="纵坐标")

    model_config = ConfigDict(from_attributes=True)

    def to_value(self) -> Position:
        return Position(x=self.x, y=self.y)

    @classmethod
    def from_value(cls, position: Position) -> "PositionDTO":
        return cls(x=position.x, y=position.y)


class PaginationDTO(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PaginationDTO":
        return cls(
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
