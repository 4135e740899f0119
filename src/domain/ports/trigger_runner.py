"""TriggerRunner Port - 调度器触发执行的入口

TriggerScheduler 在 APScheduler 工作线程中调用 fire()；
实现方负责打开独立会话、执行矩阵并提交事务。
"""

from typing import Any, Protocol


class TriggerRunner(Protocol):
    def fire(
        self, trigger_id: str, payload: dict[str, Any] | None = None, source: str = "schedule"
    ) -> Any: ...
