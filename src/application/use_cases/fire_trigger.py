"""FireTriggerUseCase - 触发器触发执行

触发来源：
- manual: POST /triggers/{id}/fire（任意类型、任意状态）
- webhook: POST /triggers/{id}/webhook（仅 active 的 webhook 触发器）
- schedule: TriggerScheduler 到点触发（输入为 {}）

编排：
1. 加载触发器与所属节点
2. 从触发节点开始执行矩阵（下游全部参与）
3. 记录 last_triggered / next_trigger
4. 定时触发失败时触发器进入 error 状态并移出调度器
"""

import logging
from typing import Any

from src.application.use_cases.execute_matrix import ExecuteMatrixUseCase
from src.domain.entities.execution import MatrixExecution
from src.domain.entities.trigger import Trigger
from src.domain.exceptions import DomainError
from src.domain.ports.node_repository import NodeRepository
from src.domain.ports.trigger_repository import TriggerRepository
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.domain.value_objects.execution_status import ExecutionStatus
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType

logger = logging.getLogger(__name__)

TRIGGER_SOURCES = ("manual", "webhook", "schedule")


class FireTriggerUseCase:
    """触发器触发用例"""

    def __init__(
        self,
        trigger_repository: TriggerRepository,
        node_repository: NodeRepository,
        execute_use_case: ExecuteMatrixUseCase,
        scheduler: TriggerScheduler | None = None,
    ):
        self.trigger_repository = trigger_repository
        self.node_repository = node_repository
        self.execute_use_case = execute_use_case
        self.scheduler = scheduler

    async def fire(
        self, trigger_id: str, payload: Any = None, source: str = "manual"
    ) -> MatrixExecution:
        """触发执行

        抛出：
            NotFoundError: 触发器或节点不存在
            DomainError: 来源非法 / webhook 触发器未激活 / 矩阵图不合法
        """
        if source not in TRIGGER_SOURCES:
            raise DomainError(f"不支持的触发来源: {source}")

        trigger = self.trigger_repository.get_by_id(trigger_id)
        if source == "webhook":
            self._ensure_webhook(trigger)
        node = self.node_repository.get_by_id(trigger.node_id)

        try:
            execution = await self.execute_use_case.execute_from_node(
                node.matrix_id,
                node.id,
                input=payload if payload is not None else {},
                downstream=True,
                trigger_id=trigger.id,
            )
        except DomainError as e:
            if source == "schedule":
                self._mark_error(trigger, str(e))
            raise

        self._record_fired(trigger)
        if source == "schedule" and execution.status == ExecutionStatus.FAILED:
            self._mark_error(trigger, execution.error)
        return execution

    @staticmethod
    def _ensure_webhook(trigger: Trigger) -> None:
        if trigger.type != TriggerType.WEBHOOK:
            raise DomainError(f"触发器 {trigger.id} 不是 webhook 类型")
        if trigger.status != TriggerStatus.ACTIVE:
            raise DomainError(f"webhook 触发器 {trigger.id} 未激活")

    def _record_fired(self, trigger: Trigger) -> None:
        next_trigger = None
        if trigger.is_scheduled:
            next_trigger = TriggerScheduler.next_fire_time(trigger.cron_expression)
        trigger.record_fired(next_trigger)
        self.trigger_repository.save(trigger)

    def _mark_error(self, trigger: Trigger, error: str | None) -> None:
        logger.warning("定时触发器 %s 执行失败，已标记为 error: %s", trigger.id, error)
        trigger.mark_error()
        self.trigger_repository.save(trigger)
        if self.scheduler is not None:
            self.scheduler.remove(trigger.id)
