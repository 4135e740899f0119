"""测试：TriggerRunnerAdapter（调度线程入口，独立会话与事务）"""

from unittest.mock import MagicMock

import pytest

from src.domain.entities.connection import Connection
from src.domain.entities.matrix import Matrix
from src.domain.entities.node import Node
from src.domain.entities.project import Project
from src.domain.entities.trigger import Trigger
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.value_objects.execution_status import ExecutionStatus
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType
from src.infrastructure.executors import create_executor_registry
from src.interfaces.api.services.trigger_runner_adapter import TriggerRunnerAdapter


def _seed(repos, db_session, action_type: str = "log", trigger_type=TriggerType.MANUAL, **trigger_kwargs):
    project = Project.create("Ops")
    matrix = Matrix.create(project.id, "nightly")
    start = Node.create(matrix.id, NodeType.TRIGGER, "start")
    action = Node.create(matrix.id, NodeType.ACTION, "act", config={"actionType": action_type})
    trigger = Trigger.create(start.id, trigger_type, "trigger", **trigger_kwargs)
    repos.projects.save(project)
    repos.matrices.save(matrix)
    repos.nodes.save(start)
    repos.nodes.save(action)
    repos.connections.save(Connection.create(matrix.id, start.id, action.id))
    repos.triggers.save(trigger)
    db_session.commit()
    return trigger


@pytest.fixture
def adapter(session_factory):
    return TriggerRunnerAdapter(session_factory, create_executor_registry(), scheduler=MagicMock())


def test_fire_commits_execution_and_trigger(adapter, repos, db_session):
    trigger = _seed(repos, db_session)

    execution = adapter.fire(trigger.id, {"run": 1}, "manual")

    db_session.expire_all()
    assert execution.status == ExecutionStatus.COMPLETED
    assert repos.executions.get_by_id(execution.id).status == ExecutionStatus.COMPLETED
    assert repos.triggers.get_by_id(trigger.id).last_triggered is not None


def test_failed_schedule_commits_error_status(adapter, repos, db_session):
    trigger = _seed(
        repos,
        db_session,
        action_type="fail",
        trigger_type=TriggerType.SCHEDULE,
        config={"cronExpression": "0 * * * *"},
        status=TriggerStatus.ACTIVE,
    )

    execution = adapter.fire(trigger.id, {}, "schedule")

    db_session.expire_all()
    assert execution.status == ExecutionStatus.FAILED
    assert repos.triggers.get_by_id(trigger.id).status == TriggerStatus.ERROR
    adapter.scheduler.remove.assert_called_once_with(trigger.id)


def test_domain_errors_propagate(adapter):
    with pytest.raises(NotFoundError):
        adapter.fire("trg_missing", {}, "schedule")


def test_inactive_webhook_is_rejected(adapter, repos, db_session):
    trigger = _seed(repos, db_session, trigger_type=TriggerType.WEBHOOK)

    with pytest.raises(DomainError):
        adapter.fire(trigger.id, {}, "webhook")
