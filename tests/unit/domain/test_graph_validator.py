"""测试：GraphValidator"""

from src.domain.entities.connection import Connection
from src.domain.entities.matrix import Matrix, MatrixGraph
from src.domain.entities.node import Node
from src.domain.services.graph_validator import GraphValidator
from src.domain.value_objects.node_type import NodeType


def _graph(nodes, connections=()):
    matrix = Matrix(id="mx_1", project_id="proj_1", name="m")
    return MatrixGraph(matrix=matrix, nodes=list(nodes), connections=list(connections))


def _node(node_type=NodeType.ACTION, **kwargs):
    return Node.create("mx_1", node_type, kwargs.pop("name", "n"), **kwargs)


def _codes(issues):
    return [issue.code for issue in issues]


class TestGraphValidator:
    def test_valid_linear_graph(self):
        trigger = _node(NodeType.TRIGGER)
        action = _node()
        graph = _graph([trigger, action], [Connection.create("mx_1", trigger.id, action.id)])

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert report.entry_node_ids == [trigger.id]
        assert report.topological_order == [trigger.id, action.id]
        assert report.warnings == []

    def test_cycle_is_an_error(self):
        trigger = _node(NodeType.TRIGGER)
        a = _node()
        b = _node()
        graph = _graph(
            [trigger, a, b],
            [
                Connection.create("mx_1", trigger.id, a.id),
                Connection.create("mx_1", a.id, b.id),
                Connection.create("mx_1", b.id, a.id),
            ],
        )

        report = GraphValidator().validate(graph)

        assert not report.is_valid
        cycle = next(issue for issue in report.errors if issue.code == "cycle")
        assert set(cycle.node_ids) == {a.id, b.id}
        assert report.topological_order == []

    def test_dangling_connection_is_an_error(self):
        trigger = _node(NodeType.TRIGGER)
        graph = _graph([trigger], [Connection.create("mx_1", trigger.id, "node_gone")])

        report = GraphValidator().validate(graph)

        assert _codes(report.errors) == ["dangling_connection"]
        assert report.errors[0].node_ids == ["node_gone"]

    def test_sub_matrix_without_reference_is_an_error(self):
        report = GraphValidator().validate(_graph([_node(NodeType.TRIGGER), _node(NodeType.SUB_MATRIX)]))

        assert "missing_sub_matrix" in _codes(report.errors)

    def test_unknown_entry_node_is_an_error(self):
        report = GraphValidator().validate(_graph([_node()]), ["node_unknown"])

        assert _codes(report.errors) == ["unknown_entry_node"]

    def test_warnings_do_not_block(self):
        orphan = _node()
        disabled = _node(disabled=True)

        report = GraphValidator().validate(_graph([orphan, disabled]))

        assert report.is_valid
        assert _codes(report.warnings) == ["no_trigger", "disabled_nodes"]

    def test_unreachable_nodes_warning(self):
        trigger = _node(NodeType.TRIGGER)
        orphan = _node()

        report = GraphValidator().validate(_graph([trigger, orphan]))

        assert _codes(report.warnings) == ["unreachable_nodes"]
        assert report.warnings[0].node_ids == [orphan.id]
