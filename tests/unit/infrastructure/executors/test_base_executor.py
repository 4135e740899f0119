"""测试：TriggerExecutor / MonitorExecutor 与执行器注册表"""

import pytest

from src.domain.entities.node import Node
from src.domain.exceptions import DomainError
from src.domain.value_objects.node_type import NodeType
from src.infrastructure.executors import (
    ActionExecutor,
    SubMatrixExecutor,
    create_executor_registry,
)
from src.infrastructure.executors.base_executor import MonitorExecutor, TriggerExecutor


@pytest.mark.asyncio
async def test_trigger_returns_payload():
    node = Node.create("mx_1", NodeType.TRIGGER, "start")

    assert await TriggerExecutor().execute(node, {"$input": {"order": 1}}, {}) == {"order": 1}


@pytest.mark.asyncio
async def test_trigger_without_inputs_uses_initial_input():
    node = Node.create("mx_1", NodeType.TRIGGER, "start")

    assert await TriggerExecutor().execute(node, {}, {"initial_input": [1, 2]}) == [1, 2]


@pytest.mark.asyncio
async def test_monitor_passes_data_through():
    node = Node.create("mx_1", NodeType.MONITOR, "watch")

    result = await MonitorExecutor().execute(node, {"a": {"x": 1}, "b": {"y": 2}}, {})

    assert result == {"x": 1, "y": 2}


def test_registry_covers_every_node_type():
    registry = create_executor_registry(http_timeout=3)

    assert sorted(registry.registered_types()) == sorted(t.value for t in NodeType)
    assert isinstance(registry.get(NodeType.SUB_MATRIX.value), SubMatrixExecutor)
    action = registry.get(NodeType.ACTION.value)
    assert isinstance(action, ActionExecutor)
    assert action.http_timeout == 3
    assert registry.get("unknown") is None


def test_registry_resolve_unknown_type():
    registry = create_executor_registry()

    assert isinstance(registry.resolve(NodeType.TRIGGER.value), TriggerExecutor)
    with pytest.raises(DomainError, match="未注册的节点类型"):
        registry.resolve("webhookRelay")
