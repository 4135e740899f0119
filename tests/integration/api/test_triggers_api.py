"""测试：Triggers API（CRUD、手动触发、Webhook）"""

import pytest


@pytest.fixture
def bare_trigger_node(client, matrix):
    return client.post(
        f"/api/nodes/matrix/{matrix['id']}", json={"type": "trigger", "name": "entry"}
    ).json()


@pytest.fixture
def webhook_graph(client, matrix):
    start = client.post(
        f"/api/nodes/matrix/{matrix['id']}",
        json={
            "type": "trigger",
            "name": "incoming",
            "trigger": {"type": "webhook", "name": "hook", "status": "active"},
        },
    ).json()
    sink = client.post(
        f"/api/nodes/matrix/{matrix['id']}",
        json={"type": "action", "name": "record", "config": {"actionType": "log"}},
    ).json()
    client.post(
        f"/api/connections/matrix/{matrix['id']}",
        json={"source_id": start["id"], "target_id": sink["id"]},
    )
    return start, sink


class TestTriggerCRUD:
    def test_create_and_get_for_node(self, client, bare_trigger_node):
        node_id = bare_trigger_node["id"]

        created = client.post(
            f"/api/triggers/nodes/{node_id}/trigger",
            json={"type": "schedule", "name": "hourly", "config": {"cronExpression": "0 * * * *"}},
        )

        assert created.status_code == 201
        assert created.json()["status"] == "inactive"
        assert created.json()["next_trigger"] is None

        fetched = client.get(f"/api/triggers/nodes/{node_id}/trigger")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == created.json()["id"]

    def test_second_trigger_is_conflict(self, client, linear_graph):
        response = client.post(
            f"/api/triggers/nodes/{linear_graph['start']['id']}/trigger",
            json={"type": "manual", "name": "again"},
        )

        assert response.status_code == 409

    def test_trigger_on_action_node_is_rejected(self, client, linear_graph):
        response = client.post(
            f"/api/triggers/nodes/{linear_graph['action']['id']}/trigger",
            json={"type": "manual", "name": "nope"},
        )

        assert response.status_code == 400

    def test_node_without_trigger(self, client, bare_trigger_node):
        response = client.get(f"/api/triggers/nodes/{bare_trigger_node['id']}/trigger")

        assert response.status_code == 404

    def test_get_includes_node(self, client, linear_graph):
        trigger_id = linear_graph["start"]["trigger"]["id"]

        body = client.get(f"/api/triggers/{trigger_id}").json()

        assert body["node"]["id"] == linear_graph["start"]["id"]
        assert body["type"] == "manual"

    def test_activate_schedule_sets_next_trigger(self, client, bare_trigger_node):
        trigger = client.post(
            f"/api/triggers/nodes/{bare_trigger_node['id']}/trigger",
            json={"type": "schedule", "name": "daily", "config": {"cronExpression": "30 6 * * *"}},
        ).json()

        response = client.patch(f"/api/triggers/{trigger['id']}", json={"status": "active"})

        assert response.status_code == 200
        assert response.json()["next_trigger"] is not None

    def test_invalid_cron_update_is_rejected(self, client, bare_trigger_node):
        trigger = client.post(
            f"/api/triggers/nodes/{bare_trigger_node['id']}/trigger",
            json={"type": "schedule", "name": "daily", "config": {"cronExpression": "30 6 * * *"}},
        ).json()

        response = client.patch(
            f"/api/triggers/{trigger['id']}", json={"config": {"cronExpression": "61 * * * *"}}
        )

        assert response.status_code == 400

    def test_delete(self, client, linear_graph):
        trigger_id = linear_graph["start"]["trigger"]["id"]

        assert client.delete(f"/api/triggers/{trigger_id}").status_code == 204
        assert client.get(f"/api/triggers/{trigger_id}").status_code == 404
        assert client.get(f"/api/nodes/{linear_graph['start']['id']}").status_code == 200


class TestTriggerFire:
    def test_manual_fire_runs_downstream(self, client, linear_graph):
        trigger_id = linear_graph["start"]["trigger"]["id"]
        action_id = linear_graph["action"]["id"]

        response = client.post(f"/api/triggers/{trigger_id}/fire", json={"refund_id": 7})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["trigger_id"] == trigger_id
        assert body["entry_node_ids"] == [linear_graph["start"]["id"]]
        assert body["output"] == {action_id: {"refund_id": 7, "refunded": True}}

        trigger = client.get(f"/api/triggers/{trigger_id}").json()
        assert trigger["last_triggered"] is not None

    def test_manual_fire_without_body(self, client, linear_graph):
        trigger_id = linear_graph["start"]["trigger"]["id"]

        response = client.post(f"/api/triggers/{trigger_id}/fire")

        assert response.status_code == 200
        assert response.json()["input"] == {}

    def test_fire_missing_trigger(self, client):
        assert client.post("/api/triggers/trg_missing/fire").status_code == 404

    def test_webhook_passes_body_as_input(self, client, webhook_graph):
        start, sink = webhook_graph

        response = client.post(
            f"/api/triggers/{start['trigger']['id']}/webhook", json={"event": "charge.refunded"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "completed"
        assert body["input"] == {"event": "charge.refunded"}
        statuses = {n["node_id"]: n["status"] for n in body["node_executions"]}
        assert statuses == {start["id"]: "completed", sink["id"]: "completed"}

    def test_webhook_on_inactive_trigger_is_rejected(self, client, webhook_graph):
        trigger_id = webhook_graph[0]["trigger"]["id"]
        client.patch(f"/api/triggers/{trigger_id}", json={"status": "inactive"})

        response = client.post(f"/api/triggers/{trigger_id}/webhook", json={})

        assert response.status_code == 400

    def test_webhook_on_manual_trigger_is_rejected(self, client, linear_graph):
        trigger_id = linear_graph["start"]["trigger"]["id"]

        response = client.post(f"/api/triggers/{trigger_id}/webhook", json={})

        assert response.status_code == 400
