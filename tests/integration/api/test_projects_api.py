"""测试：Projects API"""


class TestProjectsAPI:
    def test_create_and_get(self, client):
        created = client.post("/api/projects", json={"name": "Billing"})

        assert created.status_code == 201
        body = created.json()
        assert body["id"].startswith("proj_")
        assert body["description"] is None

        fetched = client.get(f"/api/projects/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Billing"

    def test_duplicate_name_is_conflict(self, client, project):
        response = client.post("/api/projects", json={"name": project["name"]})

        assert response.status_code == 409

    def test_empty_name_is_rejected(self, client):
        response = client.post("/api/projects", json={"name": ""})

        assert response.status_code == 422

    def test_list_with_search_and_pagination(self, client):
        for name in ("Alpha", "Beta", "Alphabet"):
            client.post("/api/projects", json={"name": name})

        response = client.get("/api/projects", params={"search": "alpha", "limit": 1})

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 1
        assert body["pagination"] == {"total": 2, "page": 1, "limit": 1, "total_pages": 2}

    def test_update(self, client, project):
        response = client.patch(
            f"/api/projects/{project['id']}", json={"description": "退款与支付"}
        )

        assert response.status_code == 200
        assert response.json()["description"] == "退款与支付"
        assert response.json()["name"] == project["name"]

    def test_update_to_existing_name_is_conflict(self, client, project):
        other = client.post("/api/projects", json={"name": "Other"}).json()

        response = client.patch(f"/api/projects/{other['id']}", json={"name": project["name"]})

        assert response.status_code == 409

    def test_delete_cascades_to_matrices(self, client, project, matrix):
        response = client.delete(f"/api/projects/{project['id']}")

        assert response.status_code == 204
        assert client.get(f"/api/projects/{project['id']}").status_code == 404
        assert client.get(f"/api/matrix/{matrix['id']}").status_code == 404

    def test_missing_project(self, client):
        assert client.get("/api/projects/proj_missing").status_code == 404
        assert client.delete("/api/projects/proj_missing").status_code == 404
