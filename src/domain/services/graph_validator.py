"""GraphValidator - 矩阵图结构校验

错误（阻止执行）：
- dangling_connection: 连接引用了矩阵外的节点
- self_loop: 连接的源与目标相同
- cycle: 图中存在环（Kahn 算法检测，报告环上节点）
- missing_sub_matrix: subMatrix 节点未设置 sub_matrix_id
- unknown_entry_node: 指定的入口节点不在图中

警告（不阻止执行）：
- no_trigger: 矩阵没有可用的 trigger 节点
- unreachable_nodes: 存在从入口节点不可达的节点
- disabled_nodes: 存在被禁用的节点
"""

from collections import defaultdict, deque
from dataclasses import asdict, dataclass, field

from src.domain.entities.matrix import MatrixGraph
from src.domain.exceptions import GraphValidationError
from src.domain.value_objects.node_type import NodeType


@dataclass
class GraphIssue:
    code: str
    message: str
    node_ids: list[str] = field(default_factory=list)
    connection_ids: list[str] = field(default_factory=list)


@dataclass
class GraphValidationReport:
    """校验报告

    属性：
        errors / warnings: 问题列表
        entry_node_ids: 本次校验使用的入口节点
        reachable_node_ids: 从入口节点可达的节点
        topological_order: 拓扑序（存在环时为空）
    """

    errors: list[GraphIssue] = field(default_factory=list)
    warnings: list[GraphIssue] = field(default_factory=list)
    entry_node_ids: list[str] = field(default_factory=list)
    reachable_node_ids: list[str] = field(default_factory=list)
    topological_order: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_if_invalid(self) -> None:
        """抛出：GraphValidationError（存在错误时）"""
        if self.errors:
            raise GraphValidationError([asdict(issue) for issue in self.errors])


class GraphValidator:
    """矩阵图校验器"""

    def validate(
        self, graph: MatrixGraph, entry_node_ids: list[str] | None = None
    ) -> GraphValidationReport:
        """校验矩阵图

        参数：
            graph: 矩阵图
            entry_node_ids: 入口节点（默认使用所有启用的 trigger 节点）

        返回：
            GraphValidationReport
        """
        report = GraphValidationReport()
        node_map = graph.node_map()

        self._check_connections(graph, node_map, report)
        self._check_sub_matrices(graph, report)
        report.topological_order = self._check_cycles(graph, node_map, report)

        if entry_node_ids is None:
            entry_node_ids = graph.trigger_node_ids()
            if not entry_node_ids:
                report.warnings.append(
                    GraphIssue(code="no_trigger", message="矩阵没有可用的 trigger 节点")
                )
        else:
            unknown = [node_id for node_id in entry_node_ids if node_id not in node_map]
            if unknown:
                report.errors.append(
                    GraphIssue(
                        code="unknown_entry_node",
                        message=f"入口节点不存在: {', '.join(unknown)}",
                        node_ids=unknown,
                    )
                )
        report.entry_node_ids = [node_id for node_id in entry_node_ids if node_id in node_map]

        reachable = graph.reachable_from(report.entry_node_ids)
        report.reachable_node_ids = [node.id for node in graph.nodes if node.id in reachable]
        unreachable = [node.id for node in graph.nodes if node.id not in reachable]
        if unreachable and report.entry_node_ids:
            report.warnings.append(
                GraphIssue(
                    code="unreachable_nodes",
                    message=f"{len(unreachable)} 个节点从入口节点不可达",
                    node_ids=unreachable,
                )
            )

        disabled = [node.id for node in graph.nodes if node.disabled]
        if disabled:
            report.warnings.append(
                GraphIssue(
                    code="disabled_nodes",
                    message=f"{len(disabled)} 个节点已禁用，执行时将被跳过",
                    node_ids=disabled,
                )
            )

        return report

    def _check_connections(self, graph, node_map, report: GraphValidationReport) -> None:
        for connection in graph.connections:
            missing = [
                node_id
                for node_id in (connection.source_id, connection.target_id)
                if node_id not in node_map
            ]
            if missing:
                report.errors.append(
                    GraphIssue(
                        code="dangling_connection",
                        message=f"连接 {connection.id} 引用了不存在的节点: {', '.join(missing)}",
                        node_ids=missing,
                        connection_ids=[connection.id],
                    )
                )
            elif connection.source_id == connection.target_id:
                report.errors.append(
                    GraphIssue(
                        code="self_loop",
                        message=f"连接 {connection.id} 连接到自身",
                        node_ids=[connection.source_id],
                        connection_ids=[connection.id],
                    )
                )

    def _check_sub_matrices(self, graph: MatrixGraph, report: GraphValidationReport) -> None:
        for node in graph.nodes:
            if node.type == NodeType.SUB_MATRIX and not node.sub_matrix_id:
                report.errors.append(
                    GraphIssue(
                        code="missing_sub_matrix",
                        message=f"子矩阵节点 {node.name} 未设置 sub_matrix_id",
                        node_ids=[node.id],
                    )
                )

    def _check_cycles(self, graph, node_map, report: GraphValidationReport) -> list[str]:
        """Kahn 算法拓扑排序；剩余入度非零的节点即环上（或环下游）节点"""
        adjacency: dict[str, list[str]] = defaultdict(list)
        in_degree = {node_id: 0 for node_id in node_map}

        for connection in graph.connections:
            if connection.source_id in node_map and connection.target_id in node_map:
                adjacency[connection.source_id].append(connection.target_id)
                in_degree[connection.target_id] += 1

        queue = deque(node.id for node in graph.nodes if in_degree[node.id] == 0)
        order: list[str] = []
        while queue:
            node_id = queue.popleft()
            order.append(node_id)
            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(order) != len(node_map):
            remaining = [node.id for node in graph.nodes if in_degree[node.id] > 0]
            report.errors.append(
                GraphIssue(
                    code="cycle",
                    message="矩阵包含环，无法执行",
                    node_ids=remaining,
                )
            )
            return []
        return order
