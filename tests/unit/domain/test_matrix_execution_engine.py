"""测试：MatrixExecutionEngine

使用可编程的假执行器，覆盖：
- 波次调度与扇入合并
- 连接类型（default/success/error/condition）与条件节点分支
- 重试、超时、失败传播与跳过
- 子矩阵嵌套（深度、循环引用）
- 每次状态流转都会回调 on_change
"""

import asyncio
from typing import Any

import pytest

from src.domain.entities.connection import Connection
from src.domain.entities.execution import MatrixExecution
from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.entities.node import Node
from src.domain.ports.node_executor import NodeExecutor, NodeExecutorRegistry
from src.domain.services.matrix_execution_engine import MatrixExecutionEngine
from src.domain.services.payload import merge_inputs
from src.domain.value_objects.connection_type import ConnectionType
from src.domain.value_objects.execution_status import ExecutionStatus, NodeExecutionStatus
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.retry_policy import RetryPolicy


class PassThroughExecutor(NodeExecutor):
    """输出 config.output（未配置时透传合并输入），记录调用顺序"""

    def __init__(self):
        self.calls: list[str] = []

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        self.calls.append(node.name)
        if "output" in node.config:
            return node.config["output"]
        return merge_inputs(inputs)


class FlakyExecutor(NodeExecutor):
    """前 failures 次调用失败"""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return "recovered"


class SlowExecutor(NodeExecutor):
    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        await asyncio.sleep(1)
        return "late"


class SubMatrixCaller(NodeExecutor):
    async def execute(self, node: Node, inputs: dict[str, Any], context: dict[str, Any]) -> Any:
        child = await context["run_sub_matrix"](node.sub_matrix_id, merge_inputs(inputs))
        if child.status != ExecutionStatus.COMPLETED:
            raise RuntimeError(child.error)
        return child.output


async def _no_sleep(_: float) -> None:
    return None


def _registry(**overrides: NodeExecutor) -> tuple[NodeExecutorRegistry, PassThroughExecutor]:
    default = PassThroughExecutor()
    registry = NodeExecutorRegistry()
    for node_type in NodeType:
        registry.register(node_type.value, overrides.get(node_type.name.lower(), default))
    return registry, default


def _matrix(matrix_id: str = "mx_main") -> Matrix:
    return Matrix(id=matrix_id, project_id="proj_1", name=matrix_id)


def _node(name: str, node_type: NodeType = NodeType.ACTION, matrix_id: str = "mx_main", **kwargs) -> Node:
    return Node.create(matrix_id, node_type, name, **kwargs)


def _connect(source: Node, target: Node, type=ConnectionType.DEFAULT, **kwargs) -> Connection:
    return Connection.create(source.matrix_id, source.id, target.id, type=type, **kwargs)


def _execution(graph: MatrixGraph, entry: list[Node] | None = None, input: Any = None) -> MatrixExecution:
    entry_ids = [n.id for n in entry] if entry else graph.trigger_node_ids()
    return MatrixExecution.create(graph.matrix.id, entry_ids, input=input)


def _status(execution: MatrixExecution, node: Node) -> NodeExecutionStatus:
    return execution.find_node_execution(node.id).status


@pytest.mark.asyncio
async def test_linear_matrix_passes_data_and_outputs_sink():
    registry, default = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    enrich = _node("enrich", config={"output": {"enriched": True}})
    graph = MatrixGraph(_matrix(), [trigger, enrich], [_connect(trigger, enrich)])
    snapshots: list[str] = []

    execution = await MatrixExecutionEngine(registry).run(
        graph,
        _execution(graph, input={"order": 1}),
        on_change=lambda e: snapshots.append(e.status.value),
    )

    assert execution.status == ExecutionStatus.COMPLETED
    assert execution.output == {enrich.id: {"enriched": True}}
    assert execution.find_node_execution(trigger.id).output == {"order": 1}
    assert execution.find_node_execution(enrich.id).input == {trigger.id: {"order": 1}}
    assert default.calls == ["trigger", "enrich"]
    assert snapshots[0] == "running"
    assert snapshots[-1] == "completed"


@pytest.mark.asyncio
async def test_fan_in_waits_for_all_upstream_and_merges_inputs():
    registry, _ = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    left = _node("left", config={"output": {"a": 1}})
    right = _node("right", config={"output": {"b": 2}})
    join = _node("join")
    graph = MatrixGraph(
        _matrix(),
        [trigger, left, right, join],
        [
            _connect(trigger, left),
            _connect(trigger, right),
            _connect(left, join),
            _connect(right, join),
        ],
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.output == {join.id: {"a": 1, "b": 2}}


@pytest.mark.asyncio
async def test_condition_node_activates_matching_branch_only():
    registry, default = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    check = _node("check", NodeType.CONDITION, config={"output": {"result": False}})
    yes = _node("yes")
    no = _node("no")
    graph = MatrixGraph(
        _matrix(),
        [trigger, check, yes, no],
        [
            _connect(trigger, check),
            _connect(check, yes, config={"branch": "true"}),
            _connect(check, no, config={"branch": "false"}),
        ],
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.COMPLETED
    assert _status(execution, yes) == NodeExecutionStatus.SKIPPED
    assert _status(execution, no) == NodeExecutionStatus.COMPLETED
    assert "yes" not in default.calls


@pytest.mark.asyncio
async def test_condition_connection_uses_all_conditions():
    registry, _ = _registry()
    trigger = _node("trigger", NodeType.TRIGGER, config={"output": {"score": 0.9, "status": "ok"}})
    high = _node("high")
    low = _node("low")
    graph = MatrixGraph(
        _matrix(),
        [trigger, high, low],
        [
            _connect(
                trigger,
                high,
                ConnectionType.CONDITION,
                conditions=[
                    {"expression": "score > 0.8"},
                    {"field": "status", "operator": "eq", "value": "ok"},
                ],
            ),
            _connect(trigger, low, ConnectionType.CONDITION, conditions=[{"expression": "score <= 0.8"}]),
        ],
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert _status(execution, high) == NodeExecutionStatus.COMPLETED
    assert _status(execution, low) == NodeExecutionStatus.SKIPPED


@pytest.mark.asyncio
async def test_failing_condition_expression_does_not_activate_connection():
    registry, _ = _registry()
    trigger = _node("trigger", NodeType.TRIGGER, config={"output": {"a": 1}})
    target = _node("target")
    graph = MatrixGraph(
        _matrix(),
        [trigger, target],
        [_connect(trigger, target, ConnectionType.CONDITION, conditions=[{"expression": "missing > 1"}])],
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.COMPLETED
    assert _status(execution, target) == NodeExecutionStatus.SKIPPED


@pytest.mark.asyncio
async def test_retry_until_success_with_backoff():
    flaky = FlakyExecutor(failures=2)
    registry, _ = _registry(action=flaky)
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action")
    graph = MatrixGraph(_matrix(), [trigger, action], [_connect(trigger, action)])
    delays: list[float] = []

    async def record_sleep(delay: float) -> None:
        delays.append(delay)

    engine = MatrixExecutionEngine(
        registry,
        retry_policy=RetryPolicy(max_retries=3, backoff_factor=2, initial_delay=0.5),
        sleep=record_sleep,
    )
    execution = await engine.run(graph, _execution(graph))

    node_execution = execution.find_node_execution(action.id)
    assert execution.status == ExecutionStatus.COMPLETED
    assert node_execution.attempts == 3
    assert node_execution.output == "recovered"
    assert delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_node_config_retry_overrides_default_policy():
    flaky = FlakyExecutor(failures=1)
    registry, _ = _registry(action=flaky)
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action", config={"retry": {"maxRetries": 1}})
    graph = MatrixGraph(_matrix(), [trigger, action], [_connect(trigger, action)])

    execution = await MatrixExecutionEngine(registry, sleep=_no_sleep).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.COMPLETED
    assert flaky.calls == 2


@pytest.mark.asyncio
async def test_unhandled_failure_fails_execution_and_skips_rest():
    registry, default = _registry(action=FlakyExecutor(failures=10))
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action")
    after = _node("after", NodeType.MONITOR)
    graph = MatrixGraph(
        _matrix(), [trigger, action, after], [_connect(trigger, action), _connect(action, after)]
    )

    execution = await MatrixExecutionEngine(registry, sleep=_no_sleep).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.FAILED
    assert "action" in execution.error
    assert _status(execution, action) == NodeExecutionStatus.ERROR
    assert _status(execution, after) == NodeExecutionStatus.SKIPPED
    assert "after" not in default.calls


@pytest.mark.asyncio
async def test_error_connection_handles_failure():
    registry, _ = _registry(action=FlakyExecutor(failures=10))
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action")
    on_success = _node("on_success", NodeType.MONITOR)
    on_error = _node("on_error", NodeType.MONITOR)
    graph = MatrixGraph(
        _matrix(),
        [trigger, action, on_success, on_error],
        [
            _connect(trigger, action),
            _connect(action, on_success, ConnectionType.SUCCESS),
            _connect(action, on_error, ConnectionType.ERROR),
        ],
    )

    execution = await MatrixExecutionEngine(registry, sleep=_no_sleep).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.COMPLETED
    assert _status(execution, on_success) == NodeExecutionStatus.SKIPPED
    assert _status(execution, on_error) == NodeExecutionStatus.COMPLETED
    assert execution.find_node_execution(on_error.id).input == {action.id: None}


@pytest.mark.asyncio
async def test_node_timeout_is_reported_as_error():
    registry, _ = _registry(action=SlowExecutor())
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action", config={"timeout": 0.01})
    graph = MatrixGraph(_matrix(), [trigger, action], [_connect(trigger, action)])

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.FAILED
    assert "超时" in execution.find_node_execution(action.id).error


@pytest.mark.asyncio
async def test_disabled_node_is_skipped_and_blocks_downstream():
    registry, default = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    disabled = _node("disabled", disabled=True)
    after = _node("after")
    graph = MatrixGraph(
        _matrix(), [trigger, disabled, after], [_connect(trigger, disabled), _connect(disabled, after)]
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.COMPLETED
    assert _status(execution, disabled) == NodeExecutionStatus.SKIPPED
    assert _status(execution, after) == NodeExecutionStatus.SKIPPED
    assert default.calls == ["trigger"]


@pytest.mark.asyncio
async def test_downstream_false_runs_only_entry_node():
    registry, default = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    action = _node("action")
    after = _node("after")
    graph = MatrixGraph(
        _matrix(), [trigger, action, after], [_connect(trigger, action), _connect(action, after)]
    )

    execution = await MatrixExecutionEngine(registry).run(
        graph, _execution(graph, entry=[action], input={"x": 1}), downstream=False
    )

    assert execution.status == ExecutionStatus.COMPLETED
    assert default.calls == ["action"]
    assert [n.node_id for n in execution.node_executions] == [action.id]
    assert execution.output == {action.id: {"x": 1}}


@pytest.mark.asyncio
async def test_invalid_graph_marks_execution_failed():
    registry, default = _registry()
    trigger = _node("trigger", NodeType.TRIGGER)
    a = _node("a")
    b = _node("b")
    graph = MatrixGraph(
        _matrix(),
        [trigger, a, b],
        [_connect(trigger, a), _connect(a, b), _connect(b, a)],
    )

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.FAILED
    assert "环" in execution.error
    assert default.calls == []


@pytest.mark.asyncio
async def test_unregistered_node_type_fails_node():
    registry = NodeExecutorRegistry()
    registry.register(NodeType.TRIGGER.value, PassThroughExecutor())
    trigger = _node("trigger", NodeType.TRIGGER)
    loop = _node("loop", NodeType.LOOP)
    graph = MatrixGraph(_matrix(), [trigger, loop], [_connect(trigger, loop)])

    execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

    assert execution.status == ExecutionStatus.FAILED
    assert "未注册的节点类型" in execution.find_node_execution(loop.id).error


@pytest.mark.asyncio
async def test_concurrency_is_limited_by_semaphore():
    running = 0
    peak = 0

    class CountingExecutor(NodeExecutor):
        async def execute(self, node, inputs, context):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1
            return node.name

    registry, _ = _registry(action=CountingExecutor())
    trigger = _node("trigger", NodeType.TRIGGER)
    workers = [_node(f"w{i}") for i in range(6)]
    graph = MatrixGraph(_matrix(), [trigger, *workers], [_connect(trigger, w) for w in workers])

    execution = await MatrixExecutionEngine(registry, max_concurrent_nodes=2).run(
        graph, _execution(graph)
    )

    assert execution.status == ExecutionStatus.COMPLETED
    assert peak == 2


class TestSubMatrix:
    @staticmethod
    def _child_graph(matrix_id: str = "mx_child") -> MatrixGraph:
        trigger = _node("child_trigger", NodeType.TRIGGER, matrix_id=matrix_id)
        double = _node("double", matrix_id=matrix_id, config={"output": {"doubled": 4}})
        return MatrixGraph(_matrix(matrix_id), [trigger, double], [_connect(trigger, double)])

    @pytest.mark.asyncio
    async def test_sub_matrix_runs_nested_execution(self):
        child_graph = self._child_graph()
        registry, _ = _registry(sub_matrix=SubMatrixCaller())
        trigger = _node("trigger", NodeType.TRIGGER)
        sub = _node("sub", NodeType.SUB_MATRIX, sub_matrix_id="mx_child")
        graph = MatrixGraph(_matrix(), [trigger, sub], [_connect(trigger, sub)])
        persisted: dict[str, MatrixExecution] = {}

        execution = await MatrixExecutionEngine(
            registry, graph_loader=lambda matrix_id: child_graph
        ).run(
            graph,
            _execution(graph, input={"n": 2}),
            on_change=lambda e: persisted.__setitem__(e.id, e),
        )

        assert execution.status == ExecutionStatus.COMPLETED
        child = next(e for e in persisted.values() if e.parent_execution_id == execution.id)
        assert child.matrix_id == "mx_child"
        assert child.input == {"n": 2}
        assert child.status == ExecutionStatus.COMPLETED
        assert execution.find_node_execution(sub.id).output == child.output

    @pytest.mark.asyncio
    async def test_recursive_sub_matrix_is_rejected(self):
        registry, _ = _registry(sub_matrix=SubMatrixCaller())
        trigger = _node("trigger", NodeType.TRIGGER)
        sub = _node("sub", NodeType.SUB_MATRIX, sub_matrix_id="mx_main")
        graph = MatrixGraph(_matrix(), [trigger, sub], [_connect(trigger, sub)])

        execution = await MatrixExecutionEngine(registry, graph_loader=lambda _: graph).run(
            graph, _execution(graph)
        )

        assert execution.status == ExecutionStatus.FAILED
        assert "循环引用" in execution.find_node_execution(sub.id).error

    @pytest.mark.asyncio
    async def test_max_depth_is_enforced(self):
        registry, _ = _registry(sub_matrix=SubMatrixCaller())
        trigger = _node("trigger", NodeType.TRIGGER)
        sub = _node("sub", NodeType.SUB_MATRIX, sub_matrix_id="mx_child")
        graph = MatrixGraph(_matrix(), [trigger, sub], [_connect(trigger, sub)])

        execution = await MatrixExecutionEngine(
            registry, graph_loader=lambda _: self._child_graph(), max_sub_matrix_depth=1
        ).run(graph, _execution(graph), depth=1)

        assert execution.status == ExecutionStatus.FAILED
        assert "最大深度" in execution.find_node_execution(sub.id).error

    @pytest.mark.asyncio
    async def test_missing_graph_loader_fails_node(self):
        registry, _ = _registry(sub_matrix=SubMatrixCaller())
        trigger = _node("trigger", NodeType.TRIGGER)
        sub = _node("sub", NodeType.SUB_MATRIX, sub_matrix_id="mx_child")
        graph = MatrixGraph(_matrix(), [trigger, sub], [_connect(trigger, sub)])

        execution = await MatrixExecutionEngine(registry).run(graph, _execution(graph))

        assert execution.status == ExecutionStatus.FAILED
        assert "加载器" in execution.find_node_execution(sub.id).error
