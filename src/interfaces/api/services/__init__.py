"""接口层服务

- TriggerRunnerAdapter: 调度器触发执行（独立会话）
"""

from src.interfaces.api.services.trigger_runner_adapter import TriggerRunnerAdapter

__all__ = ["TriggerRunnerAdapter"]
