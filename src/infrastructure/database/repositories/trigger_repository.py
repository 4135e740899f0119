"""SQLAlchemy Trigger Repository 实现"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.domain.entities.trigger import Trigger
from src.domain.exceptions import NotFoundError
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType
from src.infrastructure.database.models import TriggerModel
from src.infrastructure.database.repositories._time import from_db, to_db


class SQLAlchemyTriggerRepository:
    """SQLAlchemy Trigger Repository 实现（实现 TriggerRepository Port）"""

    def __init__(self, session: Session):
        self.session = session

    def _to_entity(self, model: TriggerModel) -> Trigger:
        return Trigger(
            id=model.id,
            node_id=model.node_id,
            type=TriggerType(model.type),
            name=model.name,
            config=dict(model.config or {}),
            status=TriggerStatus(model.status),
            last_triggered=from_db(model.last_triggered),
            next_trigger=from_db(model.next_trigger),
            created_at=from_db(model.created_at),
            updated_at=from_db(model.updated_at),
        )

    def _to_model(self, entity: Trigger) -> TriggerModel:
        return TriggerModel(
            id=entity.id,
            node_id=entity.node_id,
            type=entity.type.value,
            name=entity.name,
            config=entity.config,
            status=entity.status.value,
            last_triggered=to_db(entity.last_triggered),
            next_trigger=to_db(entity.next_trigger),
            created_at=to_db(entity.created_at),
            updated_at=to_db(entity.updated_at),
        )

    def save(self, trigger: Trigger) -> None:
        self.session.merge(self._to_model(trigger))

    def get_by_id(self, trigger_id: str) -> Trigger:
        """抛出：NotFoundError"""
        trigger = self.find_by_id(trigger_id)
        if trigger is None:
            raise NotFoundError(entity_type="Trigger", entity_id=trigger_id)
        return trigger

    def find_by_id(self, trigger_id: str) -> Trigger | None:
        model = self.session.get(TriggerModel, trigger_id)
        return self._to_entity(model) if model is not None else None

    def find_by_node_id(self, node_id: str) -> Trigger | None:
        stmt = select(TriggerModel).where(TriggerModel.node_id == node_id)
        model = self.session.scalars(stmt).first()
        return self._to_entity(model) if model is not None else None

    def find_by_node_ids(self, node_ids: list[str]) -> dict[str, Trigger]:
        """批量查询，返回 {node_id: Trigger}"""
        if not node_ids:
            return {}
        stmt = select(TriggerModel).where(TriggerModel.node_id.in_(node_ids))
        return {model.node_id: self._to_entity(model) for model in self.session.scalars(stmt).all()}

    def find_active_schedules(self) -> list[Trigger]:
        stmt = (
            select(TriggerModel)
            .where(
                TriggerModel.type == TriggerType.SCHEDULE.value,
                TriggerModel.status == TriggerStatus.ACTIVE.value,
            )
            .order_by(TriggerModel.created_at)
        )
        return [self._to_entity(model) for model in self.session.scalars(stmt).all()]

    def delete(self, trigger_id: str) -> None:
        model = self.session.get(TriggerModel, trigger_id)
        if model is not None:
            self.session.delete(model)
