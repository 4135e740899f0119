"""测试：Nodes API（含 trigger 节点内嵌触发器）"""


def _create_node(client, matrix_id, **payload):
    return client.post(f"/api/nodes/matrix/{matrix_id}", json=payload)


class TestNodesAPI:
    def test_create_action_node(self, client, matrix):
        response = _create_node(
            client,
            matrix["id"],
            type="action",
            name="notify",
            config={"actionType": "log"},
            position={"x": -40, "y": 120.5},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"].startswith("node_")
        assert body["position"] == {"x": -40.0, "y": 120.5}
        assert body["type_version"] == 1
        assert body["disabled"] is False
        assert body["trigger"] is None

    def test_create_trigger_node_with_embedded_trigger(self, client, matrix):
        response = _create_node(
            client,
            matrix["id"],
            type="trigger",
            name="nightly",
            trigger={
                "type": "schedule",
                "name": "nightly run",
                "config": {"cronExpression": "0 2 * * *"},
                "status": "active",
            },
        )

        assert response.status_code == 201
        trigger = response.json()["trigger"]
        assert trigger["id"].startswith("trg_")
        assert trigger["status"] == "active"
        assert trigger["next_trigger"] is not None

    def test_schedule_trigger_requires_valid_cron(self, client, matrix):
        response = _create_node(
            client,
            matrix["id"],
            type="trigger",
            name="broken",
            trigger={"type": "schedule", "name": "bad", "config": {"cronExpression": "nope"}},
        )

        assert response.status_code == 400
        assert client.get(f"/api/nodes/matrix/{matrix['id']}").json()["data"] == []

    def test_embedded_trigger_on_non_trigger_node(self, client, matrix):
        response = _create_node(
            client,
            matrix["id"],
            type="action",
            name="act",
            trigger={"type": "manual", "name": "m"},
        )

        assert response.status_code == 400

    def test_unknown_type_is_rejected(self, client, matrix):
        response = _create_node(client, matrix["id"], type="llm", name="x")

        assert response.status_code == 422

    def test_sub_matrix_node_requires_existing_matrix(self, client, matrix):
        response = _create_node(
            client, matrix["id"], type="subMatrix", name="nested", sub_matrix_id="mx_missing"
        )

        assert response.status_code == 404

    def test_list_filters_by_type_and_includes_trigger(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        plain = client.get(f"/api/nodes/matrix/{matrix_id}").json()["data"]
        triggers = client.get(
            f"/api/nodes/matrix/{matrix_id}",
            params={"type": "trigger", "include_trigger": True},
        ).json()["data"]

        assert len(plain) == 2
        assert all(node["trigger"] is None for node in plain)
        assert [node["id"] for node in triggers] == [linear_graph["start"]["id"]]
        assert triggers[0]["trigger"]["name"] == "manual start"

    def test_get_trigger_node_includes_trigger(self, client, linear_graph):
        response = client.get(f"/api/nodes/{linear_graph['start']['id']}")

        assert response.status_code == 200
        assert response.json()["trigger"]["id"] == linear_graph["start"]["trigger"]["id"]

    def test_update_node(self, client, linear_graph):
        action_id = linear_graph["action"]["id"]

        response = client.patch(
            f"/api/nodes/{action_id}",
            json={"name": "renamed", "disabled": True, "position": {"x": 1, "y": 2}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "renamed"
        assert body["disabled"] is True
        assert body["config"] == linear_graph["action"]["config"]

    def test_update_node_creates_trigger(self, client, matrix):
        node = _create_node(client, matrix["id"], type="trigger", name="hook").json()

        response = client.patch(
            f"/api/nodes/{node['id']}",
            json={"trigger": {"type": "webhook", "name": "incoming", "status": "active"}},
        )

        assert response.status_code == 200
        assert response.json()["trigger"]["type"] == "webhook"

    def test_delete_node_removes_connections(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        response = client.delete(f"/api/nodes/{linear_graph['action']['id']}")

        assert response.status_code == 204
        connections = client.get(f"/api/connections/matrix/{matrix_id}").json()["data"]
        assert connections == []

    def test_missing_node(self, client):
        assert client.get("/api/nodes/node_missing").status_code == 404
        assert client.patch("/api/nodes/node_missing", json={"name": "x"}).status_code == 404
        assert client.delete("/api/nodes/node_missing").status_code == 404

    def test_node_types(self, client):
        response = client.get("/api/node-types")

        assert response.status_code == 200
        assert response.json()["data"] == [
            "trigger",
            "action",
            "condition",
            "subMatrix",
            "transformer",
            "loop",
            "monitor",
        ]
