"""测试：领域实体（Project / Matrix / Node / Connection / Trigger）"""

import pytest

from src.domain.entities.connection import Connection
from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.entities.node import Node
from src.domain.entities.project import Project
from src.domain.entities.trigger import Trigger
from src.domain.exceptions import DomainError, NotFoundError
from src.domain.value_objects.connection_type import ConnectionType
from src.domain.value_objects.matrix_status import MatrixStatus
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.position import Position
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType


class TestProject:
    def test_create_project_should_generate_prefixed_id_and_trim_name(self):
        project = Project.create(name="  销售分析  ", description="desc")

        assert project.id.startswith("proj_")
        assert project.name == "销售分析"
        assert project.created_at == project.updated_at

    def test_create_project_with_empty_name_should_raise_error(self):
        with pytest.raises(DomainError, match="name 不能为空"):
            Project.create(name="   ")

    def test_create_project_with_too_long_name_should_raise_error(self):
        with pytest.raises(DomainError, match="255"):
            Project.create(name="x" * 256)

    def test_update_project_none_means_unchanged(self):
        project = Project.create(name="p1", description="d")

        project.update(description="new")

        assert project.name == "p1"
        assert project.description == "new"


class TestMatrix:
    def test_create_matrix_defaults_to_draft_version_1(self):
        matrix = Matrix.create(project_id="proj_1", name="m")

        assert matrix.id.startswith("mx_")
        assert matrix.status == MatrixStatus.DRAFT
        assert matrix.version == 1
        assert matrix.config == {}

    def test_create_matrix_without_project_should_raise_error(self):
        with pytest.raises(DomainError, match="project_id"):
            Matrix.create(project_id="", name="m")

    def test_update_version_below_one_should_raise_error(self):
        matrix = Matrix.create(project_id="proj_1", name="m")

        with pytest.raises(DomainError, match="version"):
            matrix.update(version=0)

    def test_clone_resets_status_version_and_parent(self):
        matrix = Matrix.create(
            project_id="proj_1",
            name="orders",
            status=MatrixStatus.ACTIVE,
            config={"a": 1},
            parent_matrix_id="mx_parent",
        )
        matrix.update(version=4)

        cloned = matrix.clone()

        assert cloned.id != matrix.id
        assert cloned.name == "orders (Clone)"
        assert cloned.status == MatrixStatus.DRAFT
        assert cloned.version == 1
        assert cloned.parent_matrix_id is None
        assert cloned.config == {"a": 1}
        assert cloned.config is not matrix.config

    def test_ensure_executable_requires_active(self):
        matrix = Matrix.create(project_id="proj_1", name="m")

        with pytest.raises(DomainError, match="未激活"):
            matrix.ensure_executable()

        matrix.update(status=MatrixStatus.ACTIVE)
        matrix.ensure_executable()


class TestMatrixGraph:
    def test_trigger_node_ids_excludes_disabled_triggers(self):
        matrix = Matrix.create(project_id="proj_1", name="m")
        t1 = Node.create(matrix.id, NodeType.TRIGGER, "t1")
        t2 = Node.create(matrix.id, NodeType.TRIGGER, "t2", disabled=True)
        action = Node.create(matrix.id, NodeType.ACTION, "a")
        graph = MatrixGraph(matrix=matrix, nodes=[t1, t2, action])

        assert graph.trigger_node_ids() == [t1.id]
        assert graph.trigger_node_ids(enabled_only=False) == [t1.id, t2.id]

    def test_reachable_from_follows_connections(self):
        matrix = Matrix.create(project_id="proj_1", name="m")
        a = Node.create(matrix.id, NodeType.TRIGGER, "a")
        b = Node.create(matrix.id, NodeType.ACTION, "b")
        c = Node.create(matrix.id, NodeType.ACTION, "c")
        isolated = Node.create(matrix.id, NodeType.ACTION, "isolated")
        graph = MatrixGraph(
            matrix=matrix,
            nodes=[a, b, c, isolated],
            connections=[
                Connection.create(matrix.id, a.id, b.id),
                Connection.create(matrix.id, b.id, c.id),
            ],
        )

        assert graph.reachable_from([a.id]) == {a.id, b.id, c.id}
        assert graph.reachable_from([b.id]) == {b.id, c.id}


class TestNode:
    def test_create_node_with_valid_params_should_succeed(self):
        node = Node.create(
            matrix_id="mx_1",
            type=NodeType.ACTION,
            name="调用接口",
            config={"actionType": "http"},
            position=Position(x=100, y=200),
        )

        assert node.id.startswith("node_")
        assert node.position == Position(x=100, y=200)
        assert node.type_version == 1
        assert node.disabled is False

    def test_sub_matrix_id_only_allowed_on_sub_matrix_nodes(self):
        with pytest.raises(DomainError, match="subMatrix"):
            Node.create("mx_1", NodeType.ACTION, "a", sub_matrix_id="mx_2")

        node = Node.create("mx_1", NodeType.SUB_MATRIX, "s", sub_matrix_id="mx_2")
        assert node.sub_matrix_id == "mx_2"

    def test_invalid_type_version_should_raise_error(self):
        with pytest.raises(DomainError, match="type_version"):
            Node.create("mx_1", NodeType.ACTION, "a", type_version=0)

    def test_copy_to_generates_new_id_and_drops_sub_matrix(self):
        node = Node.create("mx_1", NodeType.SUB_MATRIX, "s", sub_matrix_id="mx_2")

        copied = node.copy_to("mx_9")

        assert copied.id != node.id
        assert copied.matrix_id == "mx_9"
        assert copied.sub_matrix_id is None


class TestConnection:
    def test_self_connection_should_raise_error(self):
        with pytest.raises(DomainError, match="不能连接到自己"):
            Connection.create("mx_1", "node_a", "node_a")

    def test_conditions_only_on_condition_connections(self):
        connection = Connection.create("mx_1", "node_a", "node_b")

        with pytest.raises(DomainError, match="condition"):
            connection.add_condition({"value": 1})

    def test_invalid_operator_should_raise_error(self):
        connection = Connection.create("mx_1", "node_a", "node_b", type=ConnectionType.CONDITION)

        with pytest.raises(DomainError, match="不支持的条件运算符"):
            connection.add_condition({"field": "x", "operator": "between", "value": 1})

    def test_condition_without_shape_should_raise_error(self):
        connection = Connection.create("mx_1", "node_a", "node_b", type=ConnectionType.CONDITION)

        with pytest.raises(DomainError):
            connection.add_condition({"field": "x"})

    def test_removing_last_condition_resets_type_to_default(self):
        connection = Connection.create(
            "mx_1",
            "node_a",
            "node_b",
            type=ConnectionType.CONDITION,
            conditions=[{"field": "ok", "operator": "truthy"}],
        )
        condition_id = connection.conditions[0].id

        connection.remove_condition(condition_id)

        assert connection.conditions == []
        assert connection.type == ConnectionType.DEFAULT

    def test_get_unknown_condition_should_raise_not_found(self):
        connection = Connection.create("mx_1", "node_a", "node_b", type=ConnectionType.CONDITION)

        with pytest.raises(NotFoundError):
            connection.get_condition("cond_missing")

    def test_changing_type_away_from_condition_clears_conditions(self):
        connection = Connection.create(
            "mx_1", "node_a", "node_b", type=ConnectionType.CONDITION, conditions=[{"value": 1}]
        )

        connection.update(type=ConnectionType.SUCCESS)

        assert connection.conditions == []

    def test_copy_to_remaps_endpoints_and_conditions(self):
        connection = Connection.create(
            "mx_1", "node_a", "node_b", type=ConnectionType.CONDITION, conditions=[{"value": 1}]
        )

        copied = connection.copy_to("mx_2", {"node_a": "node_x", "node_b": "node_y"})

        assert (copied.source_id, copied.target_id) == ("node_x", "node_y")
        assert copied.conditions[0].connection_id == copied.id
        assert copied.conditions[0].id != connection.conditions[0].id


class TestTrigger:
    def test_schedule_trigger_requires_cron_expression(self):
        with pytest.raises(DomainError, match="cronExpression"):
            Trigger.create(node_id="node_1", type=TriggerType.SCHEDULE, name="nightly")

    def test_cron_expression_falls_back_to_schedule_key(self):
        trigger = Trigger.create(
            node_id="node_1",
            type=TriggerType.SCHEDULE,
            name="nightly",
            config={"schedule": "0 2 * * *"},
        )

        assert trigger.cron_expression == "0 2 * * *"
        assert trigger.status == TriggerStatus.INACTIVE
        assert trigger.is_scheduled is False

    def test_is_scheduled_requires_active_schedule(self):
        trigger = Trigger.create(
            node_id="node_1",
            type=TriggerType.SCHEDULE,
            name="nightly",
            config={"cronExpression": "0 2 * * *"},
            status=TriggerStatus.ACTIVE,
        )

        assert trigger.is_scheduled is True

    def test_mark_error_clears_next_trigger(self):
        trigger = Trigger.create(node_id="node_1", type=TriggerType.WEBHOOK, name="hook")
        trigger.record_fired()

        trigger.mark_error()

        assert trigger.status == TriggerStatus.ERROR
        assert trigger.next_trigger is None
        assert trigger.last_triggered is not None
