"""Node Types 路由"""

from fastapi import APIRouter

from src.domain.value_objects.node_type import NodeType

router = APIRouter(prefix="/node-types", tags=["Node Types"])


@router.get("")
def list_node_types() -> dict[str, list[str]]:
    """支持的节点类型"""
    return {"data": [node_type.value for node_type in NodeType]}
