"""create matrix tables

Revision ID: 3c1f0a2b9d7e
Revises:
Create Date: 2026-10-19 10:12:41.512336

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3c1f0a2b9d7e"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("idx_projects_created_at", "projects", ["created_at"])

    op.create_table(
        "matrices",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("project_id", sa.String(length=36), nullable=False),
        sa.Column("parent_matrix_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["parent_matrix_id"], ["matrices.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_matrices_project_id", "matrices", ["project_id"])
    op.create_index("idx_matrices_parent_matrix_id", "matrices", ["parent_matrix_id"])
    op.create_index("idx_matrices_status", "matrices", ["status"])

    op.create_table(
        "nodes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("matrix_id", sa.String(length=36), nullable=False),
        sa.Column("sub_matrix_id", sa.String(length=36), nullable=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("type_version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("position_x", sa.Float(), nullable=False, server_default="0"),
        sa.Column("position_y", sa.Float(), nullable=False, server_default="0"),
        sa.Column("disabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["matrix_id"], ["matrices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["sub_matrix_id"], ["matrices.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_nodes_matrix_id", "nodes", ["matrix_id"])
    op.create_index("idx_nodes_type", "nodes", ["type"])

    op.create_table(
        "connections",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("matrix_id", sa.String(length=36), nullable=False),
        sa.Column("source_id", sa.String(length=36), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False, server_default="default"),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["matrix_id"], ["matrices.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["source_id"], ["nodes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_id"], ["nodes.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_connections_matrix_id", "connections", ["matrix_id"])
    op.create_index("idx_connections_source_id", "connections", ["source_id"])
    op.create_index("idx_connections_target_id", "connections", ["target_id"])

    op.create_table(
        "connection_conditions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("connection_id", sa.String(length=36), nullable=False),
        sa.Column("condition", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["connection_id"], ["connections.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "idx_connection_conditions_connection_id", "connection_conditions", ["connection_id"]
    )

    op.create_table(
        "triggers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("node_id", sa.String(length=36), nullable=False, unique=True),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="inactive"),
        sa.Column("last_triggered", sa.DateTime(), nullable=True),
        sa.Column("next_trigger", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["node_id"], ["nodes.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_triggers_type_status", "triggers", ["type", "status"])

    op.create_table(
        "matrix_executions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("matrix_id", sa.String(length=36), nullable=False),
        sa.Column("trigger_id", sa.String(length=36), nullable=True),
        sa.Column("parent_execution_id", sa.String(length=36), nullable=True),
        sa.Column("entry_node_ids", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="created"),
        sa.Column("input", sa.JSON(), nullable=True),
        sa.Column("output", sa.JSON(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["matrix_id"], ["matrices.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_matrix_executions_matrix_id", "matrix_executions", ["matrix_id"])
    op.create_index("idx_matrix_executions_created_at", "matrix_executions", ["created_at"])

    op.create_table(
        "node_executions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("execution_id", sa.String(length=36), nullable=False),
        sa.Column("node_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("input", sa.JSON(), nullable=True),
        sa.Column("output", sa.JSON(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("finished_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["execution_id"], ["matrix_executions.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_node_executions_execution_id", "node_executions", ["execution_id"])


def downgrade() -> None:
    op.drop_index("idx_node_executions_execution_id", table_name="node_executions")
    op.drop_table("node_executions")
    op.drop_index("idx_matrix_executions_created_at", table_name="matrix_executions")
    op.drop_index("idx_matrix_executions_matrix_id", table_name="matrix_executions")
    op.drop_table("matrix_executions")
    op.drop_index("idx_triggers_type_status", table_name="triggers")
    op.drop_table("triggers")
    op.drop_index("idx_connection_conditions_connection_id", table_name="connection_conditions")
    op.drop_table("connection_conditions")
    op.drop_index("idx_connections_target_id", table_name="connections")
    op.drop_index("idx_connections_source_id", table_name="connections")
    op.drop_index("idx_connections_matrix_id", table_name="connections")
    op.drop_table("connections")
    op.drop_index("idx_nodes_type", table_name="nodes")
    op.drop_index("idx_nodes_matrix_id", table_name="nodes")
    op.drop_table("nodes")
    op.drop_index("idx_matrices_status", table_name="matrices")
    op.drop_index("idx_matrices_parent_matrix_id", table_name="matrices")
    op.drop_index("idx_matrices_project_id", table_name="matrices")
    op.drop_table("matrices")
    op.drop_index("idx_projects_created_at", table_name="projects")
    op.drop_table("projects")
