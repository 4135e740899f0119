"""数据库基础设施 - SQLAlchemy 配置和会话管理

为什么需要这个模块？
1. 集中管理数据库连接和会话
2. 导出 Base 供 ORM 模型使用
3. 导出 get_db_session 供依赖注入使用
"""

from src.infrastructure.database.base import Base
from src.infrastructure.database.engine import (
    SessionLocal,
    get_db_session,
    get_sync_engine,
    sync_engine,
)

__all__ = [
    "Base",
    "SessionLocal",
    "sync_engine",
    "get_sync_engine",
    "get_db_session",
]
