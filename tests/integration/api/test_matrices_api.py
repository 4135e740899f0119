"""测试：Matrices API（CRUD、克隆、校验、图加载）"""


class TestMatrixCRUD:
    def test_create_defaults_to_draft(self, client, project):
        response = client.post(f"/api/matrix/project/{project['id']}", json={"name": "Draft one"})

        assert response.status_code == 201
        body = response.json()
        assert body["id"].startswith("mx_")
        assert body["status"] == "draft"
        assert body["version"] == 1
        assert body["config"] == {}
        assert body["project_id"] == project["id"]

    def test_create_in_missing_project(self, client):
        response = client.post("/api/matrix/project/proj_missing", json={"name": "x"})

        assert response.status_code == 404

    def test_create_with_missing_parent(self, client, project):
        response = client.post(
            f"/api/matrix/project/{project['id']}",
            json={"name": "child", "parent_matrix_id": "mx_missing"},
        )

        assert response.status_code == 404

    def test_list_filters_by_status(self, client, project, matrix):
        client.post(f"/api/matrix/project/{project['id']}", json={"name": "Draft"})

        response = client.get(
            f"/api/matrix/project/{project['id']}", params={"status": "active"}
        )

        assert response.status_code == 200
        body = response.json()
        assert [m["id"] for m in body["data"]] == [matrix["id"]]
        assert body["pagination"]["total"] == 1

    def test_list_for_missing_project(self, client):
        assert client.get("/api/matrix/project/proj_missing").status_code == 404

    def test_get_without_graph_omits_nodes(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        body = client.get(f"/api/matrix/{matrix_id}").json()

        assert "nodes" not in body
        assert "connections" not in body

    def test_get_with_nodes_and_connections(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]

        response = client.get(
            f"/api/matrix/{matrix_id}",
            params={"include_nodes": True, "include_connections": True},
        )

        body = response.json()
        assert {n["id"] for n in body["nodes"]} == {
            linear_graph["start"]["id"],
            linear_graph["action"]["id"],
        }
        start = next(n for n in body["nodes"] if n["type"] == "trigger")
        assert start["trigger"]["type"] == "manual"
        assert [c["id"] for c in body["connections"]] == [linear_graph["connection"]["id"]]

    def test_update(self, client, matrix):
        response = client.patch(
            f"/api/matrix/{matrix['id']}",
            json={"status": "inactive", "version": 2, "config": {"owner": "ops"}},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "inactive"
        assert body["version"] == 2
        assert body["config"] == {"owner": "ops"}

    def test_update_rejects_invalid_status(self, client, matrix):
        response = client.patch(f"/api/matrix/{matrix['id']}", json={"status": "paused"})

        assert response.status_code == 422

    def test_delete(self, client, matrix):
        assert client.delete(f"/api/matrix/{matrix['id']}").status_code == 204
        assert client.get(f"/api/matrix/{matrix['id']}").status_code == 404

    def test_delete_with_children_is_rejected(self, client, project, matrix):
        child = client.post(
            f"/api/matrix/project/{project['id']}",
            json={"name": "child", "parent_matrix_id": matrix["id"]},
        ).json()

        response = client.delete(f"/api/matrix/{matrix['id']}")

        assert response.status_code == 400
        assert response.json()["detail"]["child_matrix_ids"] == [child["id"]]
        assert client.get(f"/api/matrix/{matrix['id']}").status_code == 200


class TestMatrixClone:
    def test_clone_copies_graph_with_new_ids(self, client, linear_graph):
        source = linear_graph["matrix"]

        response = client.post(f"/api/matrix/{source['id']}/clone")

        assert response.status_code == 201
        body = response.json()
        assert body["id"] != source["id"]
        assert body["name"] == f"{source['name']} (Clone)"
        assert body["status"] == "draft"
        assert len(body["nodes"]) == 2
        assert len(body["connections"]) == 1

        cloned_node_ids = {n["id"] for n in body["nodes"]}
        assert linear_graph["start"]["id"] not in cloned_node_ids
        connection = body["connections"][0]
        assert {connection["source_id"], connection["target_id"]} == cloned_node_ids

    def test_clone_missing_matrix(self, client):
        assert client.post("/api/matrix/mx_missing/clone").status_code == 404


class TestMatrixValidate:
    def test_valid_graph(self, client, linear_graph):
        response = client.get(f"/api/matrix/{linear_graph['matrix']['id']}/validate")

        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["entry_node_ids"] == [linear_graph["start"]["id"]]
        assert body["topological_order"] == [
            linear_graph["start"]["id"],
            linear_graph["action"]["id"],
        ]

    def test_cycle_is_reported(self, client, linear_graph):
        matrix_id = linear_graph["matrix"]["id"]
        client.post(
            f"/api/connections/matrix/{matrix_id}",
            json={
                "source_id": linear_graph["action"]["id"],
                "target_id": linear_graph["start"]["id"],
            },
        )

        body = client.get(f"/api/matrix/{matrix_id}/validate").json()

        assert body["valid"] is False
        assert [e["code"] for e in body["errors"]] == ["cycle"]
        assert body["topological_order"] == []

    def test_empty_matrix_warns_about_missing_trigger(self, client, matrix):
        body = client.get(f"/api/matrix/{matrix['id']}/validate").json()

        assert body["valid"] is True
        assert [w["code"] for w in body["warnings"]] == ["no_trigger"]


class TestMatrixGraph:
    def test_graph(self, client, linear_graph):
        response = client.get(f"/api/matrix/{linear_graph['matrix']['id']}/graph")

        assert response.status_code == 200
        body = response.json()
        assert body["matrix_id"] == linear_graph["matrix"]["id"]
        assert len(body["nodes"]) == 2
        assert body["connections"][0]["id"] == linear_graph["connection"]["id"]

    def test_graph_for_missing_matrix(self, client):
        assert client.get("/api/matrix/mx_missing/graph").status_code == 404
