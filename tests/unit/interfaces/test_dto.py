"""测试：API DTO 校验与转换"""

import pytest
from pydantic import ValidationError

from src.domain.entities.execution import MatrixExecution
from src.domain.entities.node import Node
from src.domain.entities.trigger import Trigger
from src.domain.value_objects.node_type import NodeType
from src.domain.value_objects.page import Page
from src.domain.value_objects.position import Position
from src.domain.value_objects.trigger_type import TriggerStatus, TriggerType
from src.interfaces.api.dto.common_dto import PaginationDTO
from src.interfaces.api.dto.execution_dto import ExecuteMatrixRequest, ExecutionResponse
from src.interfaces.api.dto.node_dto import CreateNodeRequest, NodeResponse, TriggerDetailResponse
from src.interfaces.api.dto.project_dto import CreateProjectRequest


def test_create_node_request_to_input_with_embedded_trigger():
    request = CreateNodeRequest.model_validate(
        {
            "type": "trigger",
            "name": "start",
            "position": {"x": -20, "y": 40.5},
            "trigger": {"type": "webhook", "name": "hook", "status": "active"},
        }
    )

    input_data = request.to_input()

    assert input_data.type == NodeType.TRIGGER
    assert input_data.position == Position(-20, 40.5)
    assert input_data.trigger.type == TriggerType.WEBHOOK
    assert input_data.trigger.status == TriggerStatus.ACTIVE


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "trigger", "name": ""},
        {"type": "teleport", "name": "x"},
        {"type": "action", "name": "x", "type_version": 0},
    ],
)
def test_create_node_request_validation(payload):
    with pytest.raises(ValidationError):
        CreateNodeRequest.model_validate(payload)


def test_project_name_too_long():
    with pytest.raises(ValidationError):
        CreateProjectRequest(name="x" * 256)


def test_node_response_includes_trigger():
    node = Node.create("mx_1", NodeType.TRIGGER, "start", position=Position(1, 2))
    trigger = Trigger.create(node.id, TriggerType.MANUAL, "manual")

    response = NodeResponse.from_entity(node, trigger).model_dump(mode="json")

    assert response["position"] == {"x": 1.0, "y": 2.0}
    assert response["trigger"]["id"] == trigger.id
    assert response["type"] == "trigger"


def test_trigger_detail_embeds_node():
    node = Node.create("mx_1", NodeType.TRIGGER, "start")
    trigger = Trigger.create(node.id, TriggerType.MANUAL, "manual")

    detail = TriggerDetailResponse.from_entities(trigger, node)

    assert detail.id == trigger.id
    assert detail.node.id == node.id


def test_execution_response_from_entity():
    execution = MatrixExecution.create("mx_1", ["node_1"], input={"a": 1})
    execution.node_execution("node_1")
    execution.start()

    response = ExecutionResponse.from_entity(execution).model_dump(mode="json")

    assert response["status"] == "running"
    assert response["node_executions"][0]["status"] == "pending"
    assert response["input"] == {"a": 1}


def test_execute_request_defaults():
    request = ExecuteMatrixRequest()

    assert request.wait is True
    assert request.input is None


def test_pagination_from_page():
    pagination = PaginationDTO.from_page(Page(items=[], total=21, page=2, limit=10))

    assert pagination.total_pages == 3
