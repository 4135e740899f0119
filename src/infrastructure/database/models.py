"""ORM 模型 - 数据库表映射

ORM 模型 vs 领域实体：
- ORM 模型：数据库表映射，关注持久化（Infrastructure 层）
- 领域实体：业务逻辑，关注不变式（Domain 层）
- 通过 Repository 中的 Assembler 方法转换：ORM ⇄ Entity

设计原则：
- 使用 SQLAlchemy 2.0 风格（Mapped、mapped_column）
- 主键使用带前缀的字符串 ID（与领域实体一致）
- 级联删除同时声明在外键（ondelete）与 ORM 关系（cascade）上，
  SQLite 默认不启用外键约束，以 ORM 级联为准
- 时间戳以不带时区的 UTC 时间存储
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.base import Base


class ProjectModel(Base):
    """Project ORM 模型

    表名：projects

    关系：
    - matrices: 一对多（删除项目时级联删除矩阵）
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Project ID（proj_ 前缀）")
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, comment="项目名称")
    description: Mapped[str | None] = mapped_column(Text, nullable=True, comment="项目描述")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    matrices: Mapped[list["MatrixModel"]] = relationship(
        "MatrixModel", back_populates="project", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_projects_created_at", "created_at"),)

    def __repr__(self) -> str:
        return f"<ProjectModel(id={self.id}, name={self.name})>"


class MatrixModel(Base):
    """Matrix ORM 模型

    表名：matrices

    关系：
    - project: 多对一
    - nodes / connections / executions: 一对多（删除矩阵时级联删除）

    索引：
    - idx_matrices_project_id: 查询项目下的矩阵
    - idx_matrices_parent_matrix_id: 查询子矩阵
    """

    __tablename__ = "matrices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Matrix ID（mx_ 前缀）")
    project_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属项目",
    )
    parent_matrix_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("matrices.id", ondelete="SET NULL"),
        nullable=True,
        comment="父矩阵",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="矩阵名称")
    description: Mapped[str | None] = mapped_column(Text, nullable=True, comment="矩阵描述")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="draft", comment="矩阵状态"
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, comment="版本号")
    config: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="矩阵配置（JSON）"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    project: Mapped["ProjectModel"] = relationship("ProjectModel", back_populates="matrices")
    nodes: Mapped[list["NodeModel"]] = relationship(
        "NodeModel",
        back_populates="matrix",
        cascade="all, delete-orphan",
        foreign_keys="NodeModel.matrix_id",
    )
    connections: Mapped[list["ConnectionModel"]] = relationship(
        "ConnectionModel", back_populates="matrix", cascade="all, delete-orphan"
    )
    executions: Mapped[list["MatrixExecutionModel"]] = relationship(
        "MatrixExecutionModel", back_populates="matrix", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_matrices_project_id", "project_id"),
        Index("idx_matrices_parent_matrix_id", "parent_matrix_id"),
        Index("idx_matrices_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<MatrixModel(id={self.id}, name={self.name}, status={self.status})>"


class NodeModel(Base):
    """Node ORM 模型

    表名：nodes

    关系：
    - matrix: 多对一
    - outgoing_connections / incoming_connections: 删除节点时级联删除相关连接
    - trigger: 一对一（删除节点时级联删除触发器）
    """

    __tablename__ = "nodes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Node ID（node_ 前缀）")
    matrix_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("matrices.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属矩阵",
    )
    sub_matrix_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("matrices.id", ondelete="SET NULL"),
        nullable=True,
        comment="子矩阵（仅 subMatrix 节点）",
    )

    type: Mapped[str] = mapped_column(String(20), nullable=False, comment="节点类型")
    type_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, comment="节点类型版本"
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="节点名称")
    description: Mapped[str | None] = mapped_column(Text, nullable=True, comment="节点描述")
    config: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="节点配置（JSON）"
    )
    position_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, comment="X 坐标")
    position_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, comment="Y 坐标")
    disabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, comment="是否禁用"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    matrix: Mapped["MatrixModel"] = relationship(
        "MatrixModel", back_populates="nodes", foreign_keys=[matrix_id]
    )
    outgoing_connections: Mapped[list["ConnectionModel"]] = relationship(
        "ConnectionModel",
        foreign_keys="ConnectionModel.source_id",
        cascade="all, delete",
    )
    incoming_connections: Mapped[list["ConnectionModel"]] = relationship(
        "ConnectionModel",
        foreign_keys="ConnectionModel.target_id",
        cascade="all, delete",
    )
    trigger: Mapped["TriggerModel"] = relationship(
        "TriggerModel", back_populates="node", cascade="all, delete-orphan", uselist=False
    )

    __table_args__ = (
        Index("idx_nodes_matrix_id", "matrix_id"),
        Index("idx_nodes_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<NodeModel(id={self.id}, matrix_id={self.matrix_id}, name={self.name}, type={self.type})>"


class ConnectionModel(Base):
    """Connection ORM 模型

    表名：connections

    关系：
    - matrix: 多对一
    - conditions: 一对多（聚合内部实体，delete-orphan 同步条件列表）
    """

    __tablename__ = "connections"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Connection ID（conn_ 前缀）")
    matrix_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("matrices.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属矩阵",
    )
    source_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        comment="源节点",
    )
    target_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        comment="目标节点",
    )

    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="default", comment="连接类型"
    )
    config: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="连接配置（JSON）"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    matrix: Mapped["MatrixModel"] = relationship("MatrixModel", back_populates="connections")
    conditions: Mapped[list["ConnectionConditionModel"]] = relationship(
        "ConnectionConditionModel",
        back_populates="connection",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ConnectionConditionModel.created_at",
    )

    __table_args__ = (
        Index("idx_connections_matrix_id", "matrix_id"),
        Index("idx_connections_source_id", "source_id"),
        Index("idx_connections_target_id", "target_id"),
    )

    def __repr__(self) -> str:
        return f"<ConnectionModel(id={self.id}, source={self.source_id}, target={self.target_id}, type={self.type})>"


class ConnectionConditionModel(Base):
    """ConnectionCondition ORM 模型

    表名：connection_conditions
    """

    __tablename__ = "connection_conditions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Condition ID（cond_ 前缀）")
    connection_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("connections.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属连接",
    )
    condition: Mapped[dict] = mapped_column(JSON, nullable=False, comment="条件定义（JSON）")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    connection: Mapped["ConnectionModel"] = relationship(
        "ConnectionModel", back_populates="conditions"
    )

    __table_args__ = (Index("idx_connection_conditions_connection_id", "connection_id"),)


class TriggerModel(Base):
    """Trigger ORM 模型

    表名：triggers

    约束：
    - node_id 唯一（每个 trigger 节点最多一个触发器）
    """

    __tablename__ = "triggers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Trigger ID（trg_ 前缀）")
    node_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        comment="绑定的触发节点",
    )

    type: Mapped[str] = mapped_column(String(20), nullable=False, comment="触发类型")
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="触发器名称")
    config: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict, comment="触发配置（JSON）"
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="inactive", comment="触发器状态"
    )
    last_triggered: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="上次触发时间"
    )
    next_trigger: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="下次触发时间"
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="更新时间")

    node: Mapped["NodeModel"] = relationship("NodeModel", back_populates="trigger")

    __table_args__ = (
        Index("idx_triggers_type_status", "type", "status"),
    )

    def __repr__(self) -> str:
        return f"<TriggerModel(id={self.id}, node_id={self.node_id}, type={self.type}, status={self.status})>"


class MatrixExecutionModel(Base):
    """MatrixExecution ORM 模型

    表名：matrix_executions

    关系：
    - node_executions: 一对多（聚合内部实体）
    """

    __tablename__ = "matrix_executions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="Execution ID（exec_ 前缀）")
    matrix_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("matrices.id", ondelete="CASCADE"),
        nullable=False,
        comment="被执行的矩阵",
    )
    trigger_id: Mapped[str | None] = mapped_column(String(36), nullable=True, comment="触发器")
    parent_execution_id: Mapped[str | None] = mapped_column(
        String(36), nullable=True, comment="父执行（子矩阵嵌套执行）"
    )
    entry_node_ids: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list, comment="入口节点"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="created", comment="执行状态"
    )
    input: Mapped[Any] = mapped_column(
        JSON, nullable=True, comment="初始输入"
    )
    output: Mapped[Any] = mapped_column(
        JSON, nullable=True, comment="最终输出"
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True, comment="错误信息")

    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="开始时间")
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="结束时间"
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, comment="创建时间")

    matrix: Mapped["MatrixModel"] = relationship("MatrixModel", back_populates="executions")
    node_executions: Mapped[list["NodeExecutionModel"]] = relationship(
        "NodeExecutionModel",
        back_populates="execution",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="NodeExecutionModel.position",
    )

    __table_args__ = (
        Index("idx_matrix_executions_matrix_id", "matrix_id"),
        Index("idx_matrix_executions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<MatrixExecutionModel(id={self.id}, matrix_id={self.matrix_id}, status={self.status})>"


class NodeExecutionModel(Base):
    """NodeExecution ORM 模型

    表名：node_executions

    字段说明：
    - position: 节点执行记录在聚合中的顺序
    """

    __tablename__ = "node_executions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, comment="NodeExecution ID（nexec_ 前缀）")
    execution_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("matrix_executions.id", ondelete="CASCADE"),
        nullable=False,
        comment="所属执行",
    )
    node_id: Mapped[str] = mapped_column(String(36), nullable=False, comment="节点 ID")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="顺序")

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", comment="节点执行状态"
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="尝试次数")
    input: Mapped[Any] = mapped_column(
        JSON, nullable=True, comment="输入"
    )
    output: Mapped[Any] = mapped_column(
        JSON, nullable=True, comment="输出"
    )
    error: Mapped[str | None] = mapped_column(Text, nullable=True, comment="错误信息")

    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, comment="开始时间")
    finished_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, comment="结束时间"
    )

    execution: Mapped["MatrixExecutionModel"] = relationship(
        "MatrixExecutionModel", back_populates="node_executions"
    )

    __table_args__ = (Index("idx_node_executions_execution_id", "execution_id"),)
