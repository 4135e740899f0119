"""Pytest 配置文件 - 全局 fixtures"""

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.infrastructure.database import models  # noqa: F401
from src.infrastructure.database.base import Base
from src.infrastructure.database.repositories import (
    SQLAlchemyConnectionRepository,
    SQLAlchemyExecutionRepository,
    SQLAlchemyMatrixRepository,
    SQLAlchemyNodeRepository,
    SQLAlchemyProjectRepository,
    SQLAlchemyTriggerRepository,
)


@pytest.fixture
def test_engine():
    """内存 SQLite 引擎（StaticPool：所有连接共享同一个内存库）"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def repos(db_session):
    """绑定到 db_session 的全部 Repository"""
    return SimpleNamespace(
        projects=SQLAlchemyProjectRepository(db_session),
        matrices=SQLAlchemyMatrixRepository(db_session),
        nodes=SQLAlchemyNodeRepository(db_session),
        connections=SQLAlchemyConnectionRepository(db_session),
        triggers=SQLAlchemyTriggerRepository(db_session),
        executions=SQLAlchemyExecutionRepository(db_session),
    )
