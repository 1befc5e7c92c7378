"""API tests for /api/todos."""


def create_todo(client, headers, **body):
    body.setdefault("title", "Write report")
    response = client.post("/api/todos", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_list_starts_empty(client, auth_headers):
    response = client.get("/api/todos", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == []


def test_create_returns_camel_case_todo(client, auth_headers):
    todo = create_todo(client, auth_headers, title="  Write report  ", categoryId="work", tags=["urgent"])
    assert todo["title"] == "Write report"
    assert todo["completed"] is False
    assert todo["categoryId"] == "work"
    assert todo["tags"] == ["urgent"]
    assert todo["createdAt"] == todo["updatedAt"]
    assert set(todo) == {"id", "title", "completed", "categoryId", "tags", "createdAt", "updatedAt"}


def test_create_then_fetch_round_trip(client, auth_headers):
    created = create_todo(client, auth_headers)
    response = client.get(f"/api/todos/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == created


def test_newest_todo_first(client, auth_headers):
    first = create_todo(client, auth_headers, title="first")
    second = create_todo(client, auth_headers, title="second")
    ids = [todo["id"] for todo in client.get("/api/todos", headers=auth_headers).json()]
    assert ids == [second["id"], first["id"]]


def test_create_with_empty_title_fails(client, auth_headers):
    response = client.post("/api/todos", json={"title": "   "}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {
        "error": "Validation failed",
        "details": ["Title is required and must be a non-empty string"],
    }


def test_create_with_unknown_references_fails(client, auth_headers):
    response = client.post(
        "/api/todos", json={"title": "x", "categoryId": "nope", "tags": ["urgent", "ghost"]}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["details"] == ["Category not found: nope", "Tag not found: ghost"]


def test_invalid_json_body(client, auth_headers):
    response = client.post(
        "/api/todos", content=b"{not json", headers={**auth_headers, "Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_reorder(client, auth_headers):
    c = create_todo(client, auth_headers, title="C")
    b = create_todo(client, auth_headers, title="B")
    a = create_todo(client, auth_headers, title="A")

    response = client.post(
        "/api/todos", json={"action": "reorder", "fromIndex": 0, "toIndex": 2}, headers=auth_headers
    )
    assert response.status_code == 200
    assert [todo["id"] for todo in response.json()] == [b["id"], c["id"], a["id"]]


def test_reorder_out_of_range(client, auth_headers):
    create_todo(client, auth_headers)
    response = client.post(
        "/api/todos", json={"action": "reorder", "fromIndex": 0, "toIndex": 5}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid reorder parameters"


def test_update_todo(client, auth_headers):
    created = create_todo(client, auth_headers)
    response = client.put(
        f"/api/todos/{created['id']}",
        json={"completed": True, "tags": ["important"], "ignored": "field"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["completed"] is True
    assert updated["tags"] == ["important"]
    assert updated["title"] == created["title"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] >= created["updatedAt"]


def test_update_validation_errors(client, auth_headers):
    created = create_todo(client, auth_headers)
    response = client.put(
        f"/api/todos/{created['id']}", json={"title": "", "completed": "no"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["details"] == ["Title must be a non-empty string", "Completed must be a boolean"]


def test_update_unknown_category(client, auth_headers):
    created = create_todo(client, auth_headers)
    response = client.put(f"/api/todos/{created['id']}", json={"categoryId": "ghost"}, headers=auth_headers)
    assert response.status_code == 400


def test_missing_todo_is_404(client, auth_headers):
    assert client.get("/api/todos/missing", headers=auth_headers).status_code == 404
    assert client.put("/api/todos/missing", json={"completed": True}, headers=auth_headers).status_code == 404
    response = client.delete("/api/todos/missing", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Todo not found"}


def test_delete_todo(client, auth_headers):
    created = create_todo(client, auth_headers)
    response = client.delete(f"/api/todos/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert client.get("/api/todos", headers=auth_headers).json() == []


def test_todos_are_per_user(client, make_headers):
    create_todo(client, make_headers("alice"))
    assert client.get("/api/todos", headers=make_headers("bob")).json() == []
