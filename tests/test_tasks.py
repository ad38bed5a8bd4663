from conftest import login_headers, register


def create(client, headers, **fields):
    fields.setdefault("title", "Test Task")
    return client.post("/api/v1/tasks", json=fields, headers=headers)


def test_create_task(client, auth_headers):
    response = create(client, auth_headers, title="Test Task", description="Test Description")
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Test Task"
    assert data["description"] == "Test Description"
    assert data["status"] == "pending"
    assert data["due_date"] is None
    assert data["id"] is not None
    # Check if the user_id is correct
    user_response = client.get("/api/v1/auth/session", headers=auth_headers)
    assert data["user_id"] == user_response.json()["user"]["id"]


def test_create_task_ignores_client_user_id(client, auth_headers, other_headers):
    other_id = client.get("/api/v1/auth/session", headers=other_headers).json()["user"]["id"]
    response = create(client, auth_headers, user_id=other_id)
    assert response.status_code == 201
    assert response.json()["user_id"] != other_id


def test_create_task_requires_title(client, auth_headers):
    response = create(client, auth_headers, title="")
    assert response.status_code == 400
    assert "Title" in response.json()["detail"]

    response = client.post("/api/v1/tasks", json={"description": "no title"}, headers=auth_headers)
    assert response.status_code == 400


def test_create_task_invalid_due_date(client, auth_headers):
    response = create(client, auth_headers, due_date="not-a-date")
    assert response.status_code == 400
    assert response.json()["detail"] == "Due date is invalid."


def test_create_task_invalid_status(client, auth_headers):
    response = create(client, auth_headers, status="done")
    assert response.status_code == 422


def test_create_task_with_priority_and_category(client, auth_headers):
    priority = client.get("/api/v1/priorities", headers=auth_headers).json()[0]
    category = client.get("/api/v1/categories", headers=auth_headers).json()[0]
    response = create(client, auth_headers, priority_id=priority["id"], category_id=category["id"], due_date="2030-05-01")
    assert response.status_code == 201
    data = response.json()
    assert data["priority_id"] == priority["id"]
    assert data["category_id"] == category["id"]
    assert data["due_date"] == "2030-05-01"


def test_create_task_unknown_priority(client, auth_headers):
    response = create(client, auth_headers, priority_id=999)
    assert response.status_code == 400


def test_create_task_foreign_category(client, auth_headers, other_headers):
    other_category = client.get("/api/v1/categories", headers=other_headers).json()[0]
    response = create(client, auth_headers, category_id=other_category["id"])
    assert response.status_code == 400


def test_tasks_require_token(client):
    assert client.get("/api/v1/tasks").status_code == 401
    assert client.post("/api/v1/tasks", json={"title": "x"}).status_code == 401
    assert client.get("/api/v1/priorities").status_code == 401


def test_read_tasks(client, auth_headers):
    create(client, auth_headers, title="Test Task 1")
    create(client, auth_headers, title="Test Task 2")

    response = client.get("/api/v1/tasks", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert isinstance(data, list)
    assert len(data) == 2


def test_read_tasks_scoped_to_owner(client, auth_headers, other_headers):
    create(client, auth_headers, title="Mine")
    other_id = client.get("/api/v1/auth/session", headers=other_headers).json()["user"]["id"]

    response = client.get("/api/v1/tasks", params={"user_id": other_id}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Mine"]

    response = client.get("/api/v1/tasks", headers=other_headers)
    assert response.json() == []


def test_read_tasks_filters(client, auth_headers):
    create(client, auth_headers, title="Buy milk", due_date="2030-01-10")
    create(client, auth_headers, title="Write report", description="quarterly MILK numbers", due_date="2030-03-01")
    done = create(client, auth_headers, title="Walk dog").json()
    client.patch(f"/api/v1/tasks/{done['id']}/complete", headers=auth_headers)

    response = client.get("/api/v1/tasks", params={"search": "milk"}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Buy milk", "Write report"]

    response = client.get("/api/v1/tasks", params={"status": "completed"}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Walk dog"]

    response = client.get("/api/v1/tasks", params={"status": "all"}, headers=auth_headers)
    assert len(response.json()) == 3

    response = client.get("/api/v1/tasks", params={"due_before": "2030-02-01"}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Buy milk"]

    response = client.get("/api/v1/tasks", params={"due_after": "2030-02-01"}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Write report"]


def test_read_tasks_unknown_status(client, auth_headers):
    response = client.get("/api/v1/tasks", params={"status": "archived"}, headers=auth_headers)
    assert response.status_code == 400


def test_read_tasks_ordering(client, auth_headers):
    create(client, auth_headers, title="No date")
    create(client, auth_headers, title="Later", due_date="2030-06-01")
    create(client, auth_headers, title="Sooner", due_date="2030-01-01")

    response = client.get("/api/v1/tasks", headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["Sooner", "Later", "No date"]


def test_read_task(client, auth_headers):
    # First create a task to read
    response = create(client, auth_headers, title="Test Task 2", description="Test Description 2")
    assert response.status_code == 201
    task_id = response.json()["id"]

    response = client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Test Task 2"
    assert data["id"] == task_id


def test_read_task_not_found(client, auth_headers):
    response = client.get("/api/v1/tasks/999", headers=auth_headers)
    assert response.status_code == 404


def test_read_task_of_other_user(client, auth_headers, other_headers):
    task_id = create(client, auth_headers).json()["id"]
    assert client.get(f"/api/v1/tasks/{task_id}", headers=other_headers).status_code == 404
    assert client.put(f"/api/v1/tasks/{task_id}", json={"title": "Hijacked"}, headers=other_headers).status_code == 404
    assert client.delete(f"/api/v1/tasks/{task_id}", headers=other_headers).status_code == 404
    assert client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers).json()["title"] == "Test Task"


def test_update_task(client, auth_headers):
    # First create a task to update
    response = create(client, auth_headers, title="Test Task 3", description="Test Description 3")
    assert response.status_code == 201
    created = response.json()

    response = client.put(f"/api/v1/tasks/{created['id']}", json={"title": "Updated Title", "status": "in_progress"}, headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Updated Title"
    assert data["status"] == "in_progress"
    assert data["description"] == "Test Description 3"
    assert data["updated_at"] > created["updated_at"]


def test_update_task_invalid_due_date(client, auth_headers):
    task_id = create(client, auth_headers).json()["id"]
    response = client.put(f"/api/v1/tasks/{task_id}", json={"due_date": "2030-02-30"}, headers=auth_headers)
    assert response.status_code == 400


def test_update_task_not_found(client, auth_headers):
    response = client.put("/api/v1/tasks/999", json={"title": "Updated Title"}, headers=auth_headers)
    assert response.status_code == 404


def test_complete_and_reopen_task(client, auth_headers):
    task_id = create(client, auth_headers).json()["id"]

    response = client.patch(f"/api/v1/tasks/{task_id}/complete", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = client.patch(f"/api/v1/tasks/{task_id}/incomplete", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "pending"

    assert client.patch("/api/v1/tasks/999/complete", headers=auth_headers).status_code == 404


def test_delete_task(client, auth_headers):
    # First create a task to delete
    response = create(client, auth_headers, title="Test Task 4", description="Test Description 4")
    assert response.status_code == 201
    task_id = response.json()["id"]

    response = client.delete(f"/api/v1/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 204

    # Verify it's deleted
    response = client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers)
    assert response.status_code == 404


def test_delete_task_not_found(client, auth_headers):
    response = client.delete("/api/v1/tasks/999", headers=auth_headers)
    assert response.status_code == 404


def test_priorities_ordered_by_level(client, auth_headers):
    response = client.get("/api/v1/priorities", headers=auth_headers)
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["Low", "Medium", "High"]


def test_end_to_end(client):
    assert register(client, email="flow@example.com").status_code == 201
    headers = login_headers(client, email="flow@example.com")

    task = create(client, headers, title="T").json()
    completed = client.patch(f"/api/v1/tasks/{task['id']}/complete", headers=headers).json()
    assert completed["status"] == "completed"

    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 404


def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_search_with_wildcard_characters(client, auth_headers):
    create(client, auth_headers, title="abc")
    create(client, auth_headers, title="100% done")

    response = client.get("/api/v1/tasks", params={"search": "%"}, headers=auth_headers)
    assert [t["title"] for t in response.json()] == ["100% done"]

    response = client.get("/api/v1/tasks", params={"search": "_"}, headers=auth_headers)
    assert response.json() == []


def test_update_missing_task_with_foreign_category(client, auth_headers, other_headers):
    other_category = client.get("/api/v1/categories", headers=other_headers).json()[0]
    response = client.put("/api/v1/tasks/999", json={"category_id": other_category["id"]}, headers=auth_headers)
    assert response.status_code == 404


def test_metrics(client, auth_headers):
    task_id = create(client, auth_headers).json()["id"]
    client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers)

    response = client.get("/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    body = response.text
    assert "http_request_duration" in body
    assert 'route="/api/v1/tasks/{id}"' in body
