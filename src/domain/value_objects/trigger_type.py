"""Trigger 相关枚举

TriggerType:
- SCHEDULE 由 TriggerScheduler（APScheduler cron）驱动
- WEBHOOK 由 POST /api/triggers/{id}/webhook 驱动
- MANUAL/EVENT/EMAIL/DATABASE 仅支持手动触发
"""

from enum import Enum


class TriggerType(str, Enum):
    WEBHOOK = "webhook"
    SCHEDULE = "schedule"
    EVENT = "event"
    MANUAL = "manual"
    EMAIL = "email"
    DATABASE = "database"


class TriggerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"
