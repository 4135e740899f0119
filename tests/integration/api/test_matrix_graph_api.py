"""测试：矩阵图批量编辑 API"""


class TestBulkNodes:
    def test_create_update_delete(self, client, matrix):
        base = f"/api/matrix/{matrix['id']}/graph/nodes"

        created = client.post(
            base,
            json={
                "nodes": [
                    {"type": "trigger", "name": "start"},
                    {"type": "transformer", "name": "shape", "config": {"mappings": {}}},
                ]
            },
        )
        assert created.status_code == 201
        nodes = created.json()["data"]
        assert [n["name"] for n in nodes] == ["start", "shape"]

        updated = client.patch(
            base,
            json={
                "nodes": [
                    {"id": nodes[0]["id"], "position": {"x": 10, "y": 20}},
                    {"id": nodes[1]["id"], "name": "reshape"},
                ]
            },
        )
        assert updated.status_code == 200
        assert updated.json()["data"][0]["position"] == {"x": 10.0, "y": 20.0}
        assert updated.json()["data"][1]["name"] == "reshape"

        deleted = client.request("DELETE", base, json={"ids": [n["id"] for n in nodes]})
        assert deleted.status_code == 200
        assert deleted.json() == {"deleted": 2}
        assert client.get(f"/api/nodes/matrix/{matrix['id']}").json()["data"] == []

    def test_foreign_node_rejects_whole_batch(self, client, project, linear_graph):
        other = client.post(f"/api/matrix/project/{project['id']}", json={"name": "other"}).json()
        foreign = client.post(
            f"/api/nodes/matrix/{other['id']}", json={"type": "action", "name": "foreign"}
        ).json()

        response = client.patch(
            f"/api/matrix/{linear_graph['matrix']['id']}/graph/nodes",
            json={
                "nodes": [
                    {"id": linear_graph["action"]["id"], "name": "changed"},
                    {"id": foreign["id"], "name": "changed"},
                ]
            },
        )

        assert response.status_code == 400
        assert client.get(f"/api/nodes/{linear_graph['action']['id']}").json()["name"] == (
            "mark refunded"
        )

    def test_deleting_nodes_removes_their_connections(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        response = client.request(
            "DELETE",
            f"/api/matrix/{matrix_id}/graph/nodes",
            json={"ids": [linear_graph["action"]["id"]]},
        )

        assert response.status_code == 200
        assert client.get(f"/api/connections/matrix/{matrix_id}").json()["data"] == []

    def test_empty_batch_is_rejected(self, client, matrix):
        response = client.post(f"/api/matrix/{matrix['id']}/graph/nodes", json={"nodes": []})

        assert response.status_code == 422

    def test_unknown_matrix(self, client):
        response = client.post(
            "/api/matrix/mx_missing/graph/nodes",
            json={"nodes": [{"type": "action", "name": "x"}]},
        )

        assert response.status_code == 404


class TestBulkConnections:
    def test_create_update_delete(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]
        base = f"/api/matrix/{matrix_id}/graph/connections"
        extra = client.post(
            f"/api/nodes/matrix/{matrix_id}", json={"type": "monitor", "name": "watch"}
        ).json()

        created = client.post(
            base,
            json={
                "connections": [
                    {
                        "source_id": linear_graph["action"]["id"],
                        "target_id": extra["id"],
                        "type": "condition",
                        "conditions": [{"value": True}],
                    }
                ]
            },
        )
        assert created.status_code == 201
        connection = created.json()["data"][0]
        assert len(connection["conditions"]) == 1

        updated = client.patch(
            base,
            json={"connections": [{"id": connection["id"], "type": "success"}]},
        )
        assert updated.status_code == 200
        assert updated.json()["data"][0]["type"] == "success"

        deleted = client.request(
            "DELETE", base, json={"ids": [connection["id"], linear_graph["connection"]["id"]]}
        )
        assert deleted.json() == {"deleted": 2}
        assert client.get(f"/api/connections/matrix/{matrix_id}").json()["data"] == []

    def test_foreign_endpoint_rejects_batch(self, client, project, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]
        other = client.post(f"/api/matrix/project/{project['id']}", json={"name": "other"}).json()
        foreign = client.post(
            f"/api/nodes/matrix/{other['id']}", json={"type": "action", "name": "foreign"}
        ).json()

        response = client.post(
            f"/api/matrix/{matrix_id}/graph/connections",
            json={
                "connections": [
                    {"source_id": linear_graph["start"]["id"], "target_id": foreign["id"]}
                ]
            },
        )

        assert response.status_code == 400
        assert len(client.get(f"/api/connections/matrix/{matrix_id}").json()["data"]) == 1

    def test_delete_unknown_connection_rejects_batch(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        response = client.request(
            "DELETE",
            f"/api/matrix/{matrix_id}/graph/connections",
            json={"ids": [linear_graph["connection"]["id"], "conn_missing"]},
        )

        assert response.status_code == 400
        assert len(client.get(f"/api/connections/matrix/{matrix_id}").json()["data"]) == 1
