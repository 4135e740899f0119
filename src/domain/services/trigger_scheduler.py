"""触发器调度服务"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from src.domain.entities.trigger import Trigger
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.ports.trigger_repository import TriggerRepository
from src.domain.ports.trigger_runner import TriggerRunner

logger = logging.getLogger(__name__)


class TriggerScheduler:
    """使用 APScheduler 管理 schedule 类型触发器。

    依赖注入：
    - trigger_repository: 启动时加载激活的 schedule 触发器
    - trigger_runner: 到点时触发执行（独立会话/事务由实现方负责）
    """

    def __init__(self, trigger_repository: TriggerRepository, trigger_runner: TriggerRunner):
        self._repo = trigger_repository
        self._runner = trigger_runner
        self.scheduler = BackgroundScheduler(timezone="UTC")
        self._is_running = False

    @staticmethod
    def validate_cron(expression: str | None) -> CronTrigger:
        """校验 5 段 cron 表达式

        异常：
            DomainError: 表达式为空或非法
        """
        if not expression or not str(expression).strip():
            raise DomainError("cronExpression 不能为空")
        try:
            return CronTrigger.from_crontab(str(expression).strip(), timezone="UTC")
        except ValueError as e:
            raise DomainError(f"cron 表达式非法: {expression} ({e})") from e

    @classmethod
    def next_fire_time(cls, expression: str, now: datetime | None = None) -> datetime | None:
        """计算下一次触发时间（UTC）"""
        trigger = cls.validate_cron(expression)
        now = now or datetime.now(UTC)
        return trigger.get_next_fire_time(None, now)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        """启动调度器并加载已激活的 schedule 触发器。"""
        if self._is_running:
            return

        self.scheduler.start()
        self._is_running = True

        triggers = self._repo.find_active_schedules()
        for trigger in triggers:
            self.sync(trigger)
        logger.info("触发器调度器已启动，加载 %d 个定时任务", len(triggers))

    def stop(self) -> None:
        """停止调度器。"""
        if not self._is_running:
            return

        self.scheduler.shutdown(wait=False)
        self._is_running = False

    def sync(self, trigger: Trigger) -> None:
        """按触发器当前状态注册或移除调度任务"""
        if not trigger.is_scheduled:
            self.remove(trigger.id)
            return

        try:
            cron = self.validate_cron(trigger.cron_expression)
        except DomainError as e:
            logger.warning("触发器 %s 的 cron 表达式非法，已跳过: %s", trigger.id, e)
            self.remove(trigger.id)
            return

        self.scheduler.add_job(
            func=self._fire,
            trigger=cron,
            args=[trigger.id],
            id=trigger.id,
            name=f"trigger_{trigger.id}",
            replace_existing=True,
        )

    def remove(self, trigger_id: str) -> None:
        """移除调度任务（不存在时忽略）"""
        if self.scheduler.get_job(trigger_id) is not None:
            self.scheduler.remove_job(trigger_id)

    def get_job(self, trigger_id: str) -> Any | None:
        """返回 APScheduler job 对象"""
        return self.scheduler.get_job(trigger_id)

    def _fire(self, trigger_id: str) -> None:
        """供 APScheduler 调用的同步入口。"""
        try:
            self._runner.fire(trigger_id, {}, "schedule")
        except NotFoundError:
            logger.warning("触发器 %s 已不存在，移除调度任务", trigger_id)
            self.remove(trigger_id)
        except Exception:
            logger.exception("定时触发器 %s 执行失败", trigger_id)
