"""应用配置模块 - 使用 Pydantic Settings 管理环境变量"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="FlowMatrix", description="应用名称")
    app_version: str = Field(default="0.1.0", description="应用版本")
    env: Literal["development", "production", "test"] = Field(
        default="development", description="运行环境"
    )
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")
    log_format: Literal["json", "text"] = Field(default="text", description="日志格式")

    # Server
    host: str = Field(default="0.0.0.0", description="服务器地址")
    port: int = Field(default=8000, description="服务器端口")
    reload: bool = Field(default=False, description="热重载")

    # Database
    database_url: str = Field(
        default="sqlite:///./flowmatrix.db",
        description="数据库连接 URL",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        description="允许的跨域源",
    )

    # Node execution (retry & timeout)
    node_max_retries: int = Field(default=0, ge=0, description="节点最大重试次数")
    node_retry_backoff_factor: float = Field(default=2.0, ge=1.0, description="重试退避因子")
    node_retry_initial_delay: float = Field(default=0.5, ge=0, description="首次重试延迟（秒）")
    node_retry_max_delay: float = Field(default=30.0, ge=0, description="最大重试延迟（秒）")
    node_timeout: float = Field(default=60.0, gt=0, description="单个节点超时时间（秒）")
    max_concurrent_nodes: int = Field(default=5, ge=1, description="同一波次最大并发节点数")
    max_sub_matrix_depth: int = Field(default=5, ge=1, description="子矩阵最大嵌套深度")

    # Action nodes
    http_timeout: float = Field(default=30.0, gt=0, description="HTTP 动作节点超时时间（秒）")

    # Triggers
    scheduler_enabled: bool = Field(default=True, description="是否启动定时触发器调度")


# 全局配置实例
settings = Settings()
