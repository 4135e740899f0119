"""数据库引擎配置

为什么需要单独的 engine 模块？
1. 分离关注点：引擎配置独立于模型定义
2. 避免循环导入：Base 和 engine 分开定义
3. 便于测试：测试中通过 dependency_overrides 替换 get_db_session

设计说明：
- 使用 create_engine 创建同步引擎（Repository 与路由均为同步实现）
- 从配置文件读取 database_url
- SQLite 不支持连接池参数，且需要允许跨线程使用连接（后台任务、调度器线程）
"""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.config import settings


def get_sync_engine(database_url: str | None = None) -> Engine:
    """创建同步数据库引擎

    配置说明：
    - echo: 是否打印 SQL（debug 模式开启）
    - pool_size / max_overflow: 连接池参数（仅非 SQLite）
    - pool_pre_ping: 连接前检查（避免使用失效连接）

    返回：
        Engine: 同步数据库引擎
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        url,
        echo=settings.debug,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


# 全局同步引擎实例
sync_engine = get_sync_engine()

# 创建 Session 工厂
SessionLocal = sessionmaker(
    bind=sync_engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def get_db_session() -> Generator[Session, None, None]:
    """获取数据库会话

    这是 FastAPI 依赖注入函数：
    - 为每个请求创建新的 Session
    - 请求结束后自动关闭 Session（无论成功还是失败）

    使用示例：
    >>> @router.get("/projects")
    >>> def list_projects(db: Session = Depends(get_db_session)):
    >>>     repo = SQLAlchemyProjectRepository(db)
    >>>     return repo.list(page=1, limit=10)

    Yields:
        Session: 数据库会话
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
