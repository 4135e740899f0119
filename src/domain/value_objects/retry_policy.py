"""RetryPolicy 值对象 - 节点重试与指数退避策略

退避公式：
    delay(n) = min(initial_delay * backoff_factor ** (n - 1), max_delay)
其中 n 为已失败的尝试次数（从 1 开始）。

节点可通过 config["retry"] 覆盖默认值：
    {"retry": {"maxRetries": 3, "backoffFactor": 2, "initialDelay": 1, "maxDelay": 10}}
"""

from dataclasses import dataclass, replace
from typing import Any

from src.domain.exceptions import DomainError


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 0
    backoff_factor: float = 2.0
    initial_delay: float = 0.5
    max_delay: float = 30.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise DomainError("maxRetries 不能为负数")
        if self.backoff_factor < 1:
            raise DomainError("backoffFactor 不能小于 1")
        if self.initial_delay < 0 or self.max_delay < 0:
            raise DomainError("重试延迟不能为负数")

    def delay_for(self, failed_attempts: int) -> float:
        """返回第 failed_attempts 次失败后、下一次尝试前的等待秒数"""
        if failed_attempts < 1:
            return 0.0
        delay = self.initial_delay * self.backoff_factor ** (failed_attempts - 1)
        return min(delay, self.max_delay)

    def should_retry(self, failed_attempts: int) -> bool:
        return failed_attempts <= self.max_retries

    def with_overrides(self, overrides: dict[str, Any] | None) -> "RetryPolicy":
        """用节点配置中的 retry 字段覆盖默认策略

        抛出：
            DomainError: 覆盖值类型非法
        """
        if not overrides:
            return self
        if not isinstance(overrides, dict):
            raise DomainError("retry 配置必须是对象")

        try:
            return replace(
                self,
                max_retries=int(overrides.get("maxRetries", self.max_retries)),
                backoff_factor=float(overrides.get("backoffFactor", self.backoff_factor)),
                initial_delay=float(overrides.get("initialDelay", self.initial_delay)),
                max_delay=float(overrides.get("maxDelay", self.max_delay)),
            )
        except (TypeError, ValueError) as e:
            raise DomainError(f"retry 配置非法: {e}") from e
