"""SQLAlchemy Execution Repository 实现

MatrixExecution 是聚合根：
- NodeExecution 随 MatrixExecution 一并保存（merge 同步子记录）
- position 字段保留节点执行记录在聚合中的顺序
"""

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.domain.entities.execution import MatrixExecution, NodeExecution
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.execution_status import ExecutionStatus, NodeExecutionStatus
from src.infrastructure.database.models import MatrixExecutionModel, NodeExecutionModel
from src.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyExecutionRepository:
    """SQLAlchemy Execution Repository 实现（实现 ExecutionRepository Port）"""

    def __init__(self, session: Session):
        self.session = session

    # ==================== Assembler 方法 ====================

    def _to_entity(self, model: MatrixExecutionModel) -> MatrixExecution:
        return MatrixExecution(
            id=model.id,
            matrix_id=model.matrix_id,
            entry_node_ids=list(model.entry_node_ids or []),
            status=ExecutionStatus(model.status),
            trigger_id=model.trigger_id,
            parent_execution_id=model.parent_execution_id,
            input=model.input,
            output=model.output,
            error=model.error,
            started_at=from_db(model.started_at),
            finished_at=from_db(model.finished_at),
            created_at=from_db(model.created_at),
            node_executions=[
                NodeExecution(
                    id=node_model.id,
                    execution_id=model.id,
                    node_id=node_model.node_id,
                    status=NodeExecutionStatus(node_model.status),
                    attempts=node_model.attempts,
                    input=node_model.input,
                    output=node_model.output,
                    error=node_model.error,
                    started_at=from_db(node_model.started_at),
                    finished_at=from_db(node_model.finished_at),
                )
                for node_model in model.node_executions
            ],
        )

    def _to_model(self, entity: MatrixExecution) -> MatrixExecutionModel:
        model = MatrixExecutionModel(
            id=entity.id,
            matrix_id=entity.matrix_id,
            trigger_id=entity.trigger_id,
            parent_execution_id=entity.parent_execution_id,
            entry_node_ids=list(entity.entry_node_ids),
            status=entity.status.value,
            input=entity.input,
            output=entity.output,
            error=entity.error,
            started_at=to_db(entity.started_at),
            finished_at=to_db(entity.finished_at),
            created_at=to_db(entity.created_at),
        )
        model.node_executions = [
            NodeExecutionModel(
                id=node_execution.id,
                execution_id=entity.id,
                node_id=node_execution.node_id,
                position=index,
                status=node_execution.status.value,
                attempts=node_execution.attempts,
                input=node_execution.input,
                output=node_execution.output,
                error=node_execution.error,
                started_at=to_db(node_execution.started_at),
                finished_at=to_db(node_execution.finished_at),
            )
            for index, node_execution in enumerate(entity.node_executions)
        ]
        return model

    # ==================== Repository 方法 ====================

    def save(self, execution: MatrixExecution) -> None:
        """保存执行记录及全部节点执行记录"""
        self.session.merge(self._to_model(execution))

    def get_by_id(self, execution_id: str) -> MatrixExecution:
        """抛出：NotFoundError"""
        execution = self.find_by_id(execution_id)
        if execution is None:
            raise NotFoundError(entity_type="Execution", entity_id=execution_id)
        return execution

    def find_by_id(self, execution_id: str) -> MatrixExecution | None:
        model = self.session.get(MatrixExecutionModel, execution_id)
        return self._to_entity(model) if model is not None else None

    def list_by_matrix(
        self, matrix_id: str, limit: int = 20, offset: int = 0
    ) -> tuple[list[MatrixExecution], int]:
        stmt = select(MatrixExecutionModel).where(MatrixExecutionModel.matrix_id == matrix_id)
        total = self.session.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        models = self.session.scalars(
            stmt.order_by(MatrixExecutionModel.created_at.desc(), MatrixExecutionModel.id)
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._to_entity(model) for model in models], total
