"""FastAPI 应用入口"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from src.config import settings
from src.domain.ports.node_executor import NodeExecutorRegistry
from src.domain.services.trigger_scheduler import TriggerScheduler
from src.infrastructure.database.engine import SessionLocal
from src.infrastructure.database.repositories import SQLAlchemyTriggerRepository
from src.infrastructure.database.schema import ensure_sqlite_schema
from src.infrastructure.executors import create_executor_registry
from src.infrastructure.logging_config import configure_logging
from src.interfaces.api.dependencies.execution import set_executor_registry
from src.interfaces.api.dependencies.scheduler import clear_scheduler, set_scheduler
from src.interfaces.api.middleware import LoggingMiddleware
from src.interfaces.api.routes import (
    conditions,
    connections,
    execute,
    executions,
    health,
    matrices,
    matrix_graph,
    node_types,
    nodes,
    projects,
    triggers,
)
from src.interfaces.api.services.trigger_runner_adapter import TriggerRunnerAdapter

logger = logging.getLogger(__name__)

_trigger_scheduler: TriggerScheduler | None = None


def _init_scheduler(executor_registry: NodeExecutorRegistry) -> TriggerScheduler:
    runner = TriggerRunnerAdapter(
        session_factory=SessionLocal,
        executor_registry=executor_registry,
    )
    # 启动时加载激活的 schedule 触发器
    scheduler = TriggerScheduler(
        trigger_repository=SQLAlchemyTriggerRepository(SessionLocal()),
        trigger_runner=runner,
    )
    # 定时触发失败时需要把触发器移出调度器
    runner.scheduler = scheduler
    return scheduler


def _get_display_host() -> str:
    """Return a host suitable for displaying in links."""
    if settings.host in {"0.0.0.0", "::"}:
        return "127.0.0.1"
    return settings.host


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    global _trigger_scheduler
    display_host = _get_display_host()
    configure_logging(settings.log_level, settings.log_format)
    print(f"[*] {settings.app_name} v{settings.app_version} 启动中...")
    print(f"[ENV] 环境: {settings.env}")
    print(f"[DB] 数据库: {settings.database_url}")
    print(f"[URL] 服务地址: http://{display_host}:{settings.port}")
    print(f"[DOCS] API 文档: http://{display_host}:{settings.port}/docs")

    try:
        ensure_sqlite_schema()
    except SQLAlchemyError as exc:  # pragma: no cover - best effort startup helper
        print(f"[DB] 数据库初始化失败（请运行 Alembic 迁移）: {exc}")

    executor_registry = create_executor_registry(http_timeout=settings.http_timeout)
    set_executor_registry(executor_registry)

    if settings.scheduler_enabled:
        try:
            _trigger_scheduler = _init_scheduler(executor_registry)
            _trigger_scheduler.start()
            set_scheduler(_trigger_scheduler)
            print("[SCHEDULER] 触发器调度器已启动")
        except SQLAlchemyError as exc:
            _trigger_scheduler = None
            clear_scheduler()
            print(f"[SCHEDULER] 启动失败，已禁用调度器: {exc}")

    try:
        yield
    finally:
        if _trigger_scheduler is not None:
            _trigger_scheduler.stop()
            _trigger_scheduler = None
        clear_scheduler()
        print(f"[SHUTDOWN] {settings.app_name} 关闭中...")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="矩阵式工作流编排与执行平台",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("未处理的异常: %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "服务器内部错误", "error": exc.__class__.__name__},
    )


@app.get("/health", tags=["Health"])
async def app_health() -> JSONResponse:
    return JSONResponse(
        content={
            "status": "healthy",
            "app_name": settings.app_name,
            "version": settings.app_version,
            "env": settings.env,
        }
    )


@app.get("/", tags=["Root"])
async def root() -> JSONResponse:
    display_host = _get_display_host()
    return JSONResponse(
        content={
            "message": f"欢迎使用 {settings.app_name}",
            "version": settings.app_version,
            "docs": f"http://{display_host}:{settings.port}/docs",
        }
    )


app.include_router(health.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(matrices.router, prefix="/api")
app.include_router(matrix_graph.router, prefix="/api")
app.include_router(nodes.router, prefix="/api")
app.include_router(connections.router, prefix="/api")
app.include_router(conditions.router, prefix="/api")
app.include_router(triggers.router, prefix="/api")
app.include_router(execute.router, prefix="/api")
app.include_router(executions.router, prefix="/api")
app.include_router(node_types.router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.interfaces.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
