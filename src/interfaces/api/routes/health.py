"""健康检查端点"""

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import settings
from src.infrastructure.database.engine import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(db: Session = Depends(get_db_session)) -> dict[str, Any]:
    """服务与数据库健康检查（数据库不可用时 status 为 degraded）"""
    database = "connected"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("数据库健康检查失败", exc_info=True)
        database = "disconnected"
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "service": settings.app_name,
        "database": database,
        "timestamp": datetime.now(UTC).isoformat(),
    }
