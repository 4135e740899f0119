"""API 集成测试 fixtures

- TestClient 不进入 lifespan（不启动调度器、不初始化真实数据库）
- get_db_session / get_session_factory 替换为内存 SQLite
"""

import pytest
from fastapi.testclient import TestClient

from src.infrastructure.database.engine import get_db_session
from src.infrastructure.executors import create_executor_registry
from src.interfaces.api.dependencies.execution import get_session_factory, set_executor_registry
from src.interfaces.api.dependencies.scheduler import clear_scheduler
from src.interfaces.api.main import app


@pytest.fixture
def client(session_factory):
    def override_get_db_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    clear_scheduler()
    set_executor_registry(create_executor_registry())

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def project(client):
    response = client.post("/api/projects", json={"name": "Payments", "description": "支付流程"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def matrix(client, project):
    response = client.post(
        f"/api/matrix/project/{project['id']}",
        json={"name": "Refunds", "status": "active"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def linear_graph(client, matrix):
    """trigger(manual) -> action(set)"""
    start = client.post(
        f"/api/nodes/matrix/{matrix['id']}",
        json={
            "type": "trigger",
            "name": "start",
            "trigger": {"type": "manual", "name": "manual start", "status": "active"},
        },
    ).json()
    action = client.post(
        f"/api/nodes/matrix/{matrix['id']}",
        json={
            "type": "action",
            "name": "mark refunded",
            "config": {"actionType": "set", "parameters": {"refunded": True}},
        },
    ).json()
    connection = client.post(
        f"/api/connections/matrix/{matrix['id']}",
        json={"source_id": start["id"], "target_id": action["id"]},
    ).json()
    return {"matrix": matrix, "start": start, "action": action, "connection": connection}
