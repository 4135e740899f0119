"""TriggerRepository Port - Trigger 实体的持久化接口"""

from typing import Protocol

from src.domain.entities.trigger import Trigger


class TriggerRepository(Protocol):
    def save(self, trigger: Trigger) -> None: ...

    def get_by_id(self, trigger_id: str) -> Trigger: ...

    def find_by_id(self, trigger_id: str) -> Trigger | None: ...

    def find_by_node_id(self, node_id: str) -> Trigger | None: ...

    def find_by_node_ids(self, node_ids: list[str]) -> dict[str, Trigger]: ...

    def find_active_schedules(self) -> list[Trigger]:
        """返回所有 ACTIVE 的 schedule 触发器（启动调度器时加载）"""
        ...

    def delete(self, trigger_id: str) -> None: ...
