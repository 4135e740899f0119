"""触发器执行适配器

实现 TriggerRunner Port：
- 供 TriggerScheduler 在 APScheduler 工作线程中调用
- 每次触发创建独立 session 与用例，执行结束后提交并关闭
"""

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy.orm import Session

from src.application.use_cases.fire_trigger import FireTriggerUseCase
from src.domain.entities.execution import MatrixExecution
from src.domain.exceptions import DomainError
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.infrastructure.database.repositories import (
    SQLAlchemyNodeRepository,
    SQLAlchemyTriggerRepository,
)
from src.interfaces.api.dependencies.execution import create_execute_use_case


class TriggerRunnerAdapter:
    """在调度线程中触发矩阵执行

    scheduler 在 TriggerScheduler 创建后赋值（两者互相引用），
    定时触发失败时用于移除调度任务
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        executor_registry: NodeExecutorRegistry,
        scheduler: TriggerScheduler | None = None,
    ):
        self._session_factory = session_factory
        self.executor_registry = executor_registry
        self.scheduler = scheduler

    @contextmanager
    def _create_use_case(self) -> Iterator[tuple[Session, FireTriggerUseCase]]:
        session = self._session_factory()
        use_case = FireTriggerUseCase(
            trigger_repository=SQLAlchemyTriggerRepository(session),
            node_repository=SQLAlchemyNodeRepository(session),
            execute_use_case=create_execute_use_case(session, self.executor_registry),
            scheduler=self.scheduler,
        )
        try:
            yield session, use_case
        finally:
            session.close()

    def fire(
        self, trigger_id: str, payload: dict[str, Any] | None = None, source: str = "schedule"
    ) -> MatrixExecution:
        """同步入口（APScheduler 线程内没有事件循环）

        领域错误时先提交已记录的触发器状态（如 error），再向上抛出
        """
        with self._create_use_case() as (session, use_case):
            try:
                execution = asyncio.run(use_case.fire(trigger_id, payload, source))
            except DomainError:
                session.commit()
                raise
            except Exception:
                session.rollback()
                raise
            session.commit()
            return execution
