"""节点数据处理工具

- merge_inputs: 把 {源节点 ID: 输出} 合并为节点的"合并输入"
- get_path / set_path: 点分路径读写（"user.address.city"、"items.0.name"）
"""

from typing import Any

MISSING = object()


def merge_inputs(inputs: dict[str, Any]) -> Any:
    """合并节点输入

    规则：
    - 无输入：None
    - 仅一个输入：该值本身
    - 全部为 dict：浅合并（后者覆盖前者）
    - 其他：输入值列表
    """
    values = list(inputs.values())
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    if all(isinstance(value, dict) for value in values):
        merged: dict[str, Any] = {}
        for value in values:
            merged.update(value)
        return merged
    return values


def get_path(data: Any, path: str | None, default: Any = MISSING) -> Any:
    """按点分路径读取值

    参数：
        data: 源数据（dict / list 嵌套）
        path: 点分路径；为空时返回 data 本身
        default: 路径不存在时的返回值（默认返回 MISSING 哨兵）
    """
    if path is None or path == "":
        return data

    current = data
    for part in str(path).split("."):
        if isinstance(current, dict):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return current


def set_path(data: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """按点分路径写入值（中间层不存在时自动创建 dict）"""
    parts = str(path).split(".")
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value
    return data
