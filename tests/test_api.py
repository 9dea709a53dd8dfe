"""HTTP-level tests for the project, task and collaboration endpoints."""
API = "/api/v1"


def _create_project(client, headers, name="Website"):
    response = client.post(f"{API}/projects/", json={"name": name, "description": "Relaunch"}, headers=headers)
    assert response.status_code == 201
    return response.json()


def _create_task(client, headers, project_id, **fields):
    payload = {"title": "Write docs", "project_id": project_id}
    payload.update(fields)
    response = client.post(f"{API}/tasks/", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()


def _task_update(task, **changes):
    payload = {
        key: task[key]
        for key in (
            "title",
            "description",
            "status",
            "priority",
            "project_id",
            "assigned_to_id",
            "due_date",
            "estimated_hours",
        )
    }
    payload.update(changes)
    return payload


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["checks"]["database"] == "ok"
    assert body["checks"]["event_sweep"] in ("idle", "running")


def test_metrics_endpoint(client, auth_headers):
    client.get(f"{API}/projects/", headers=auth_headers)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text


def test_projects_crud(client, auth_headers, other_headers):
    project = _create_project(client, auth_headers)
    assert project["task_count"] == 0
    _create_task(client, auth_headers, project["id"])

    listed = client.get(f"{API}/projects/", headers=auth_headers).json()
    assert [p["task_count"] for p in listed] == [1]
    assert client.get(f"{API}/projects/", headers=other_headers).json() == []

    detail = client.get(f"{API}/projects/{project['id']}", headers=auth_headers).json()
    assert [t["title"] for t in detail["tasks"]] == ["Write docs"]

    renamed = client.put(
        f"{API}/projects/{project['id']}", json={"name": "Website v2"}, headers=auth_headers
    )
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Website v2"
    assert renamed.json()["task_count"] == 1

    forbidden = client.put(f"{API}/projects/{project['id']}", json={"name": "Mine"}, headers=other_headers)
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "FORBIDDEN"

    deleted = client.delete(f"{API}/projects/{project['id']}", headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Project deleted successfully"
    assert client.get(f"{API}/projects/{project['id']}", headers=auth_headers).status_code == 404
    assert client.get(f"{API}/tasks/", headers=auth_headers).json() == []


def test_project_validation(client, auth_headers):
    response = client.post(f"{API}/projects/", json={"name": ""}, headers=auth_headers)
    assert response.status_code == 422


def test_task_lifecycle(client, auth_headers, other_headers, other_user):
    project = _create_project(client, auth_headers)
    task = _create_task(client, auth_headers, project["id"], assigned_to_id=str(other_user.id))
    assert task["status"] == "PENDING"
    assert task["priority"] == "MEDIUM"

    updated = client.put(
        f"{API}/tasks/{task['id']}",
        json=_task_update(task, status="IN_PROGRESS", actual_hours=2),
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "IN_PROGRESS"
    assert updated.json()["actual_hours"] == 2

    detail = client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).json()
    assert [h["action"] for h in detail["history"]] == ["CREATED", "STATUS_CHANGED"]

    forbidden = client.delete(f"{API}/tasks/{task['id']}", headers=other_headers)
    assert forbidden.status_code == 403

    deleted = client.delete(f"{API}/tasks/{task['id']}", headers=auth_headers)
    assert deleted.json() == {"id": task["id"], "message": "Task deleted successfully"}
    assert client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).status_code == 404


def test_task_for_unknown_project(client, auth_headers):
    response = client.post(f"{API}/tasks/", json={"title": "Orphan", "project_id": 999}, headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_comments_and_notifications(client, auth_headers, other_headers, other_user):
    project = _create_project(client, auth_headers)
    task = _create_task(client, auth_headers, project["id"], assigned_to_id=str(other_user.id))

    comment = client.post(
        f"{API}/comments/", json={"task_id": task["id"], "text": "Please review"}, headers=auth_headers
    )
    assert comment.status_code == 201

    on_task = client.get(f"{API}/comments/task/{task['id']}", headers=other_headers).json()
    assert [c["text"] for c in on_task] == ["Please review"]
    assert len(client.get(f"{API}/comments/mine", headers=auth_headers).json()) == 1

    # Assignment plus comment.
    inbox = client.get(f"{API}/notifications/", headers=other_headers).json()
    assert {n["type"] for n in inbox} == {"TASK_ASSIGNED", "COMMENT_ADDED"}
    assert client.get(f"{API}/notifications/unread/count", headers=other_headers).json() == {"count": 2}

    first = inbox[0]
    assert client.post(f"{API}/notifications/{first['id']}/read", headers=auth_headers).status_code == 403
    marked = client.post(f"{API}/notifications/{first['id']}/read", headers=other_headers)
    assert marked.json()["read"] is True
    assert len(client.get(f"{API}/notifications/unread", headers=other_headers).json()) == 1

    read_all = client.post(f"{API}/notifications/read-all", headers=other_headers).json()
    assert read_all["updated"] == 1
    assert client.get(f"{API}/notifications/unread/count", headers=other_headers).json() == {"count": 0}

    assert client.delete(f"{API}/notifications/{first['id']}", headers=auth_headers).status_code == 403
    assert client.delete(f"{API}/notifications/{first['id']}", headers=other_headers).status_code == 200
    assert client.delete(f"{API}/notifications/{first['id']}", headers=other_headers).status_code == 404

    removed = client.delete(f"{API}/comments/{comment.json()['id']}", headers=other_headers)
    assert removed.status_code == 403


def test_history_endpoints(client, auth_headers):
    project = _create_project(client, auth_headers)
    task = _create_task(client, auth_headers, project["id"])
    client.put(
        f"{API}/tasks/{task['id']}",
        json=_task_update(task, title="Renamed", priority="HIGH"),
        headers=auth_headers,
    )

    on_task = client.get(f"{API}/history/task/{task['id']}", headers=auth_headers).json()
    assert [h["action"] for h in on_task][0] == "CREATED"
    assert len(on_task) == 3

    mine = client.get(f"{API}/history/mine/task/{task['id']}", headers=auth_headers).json()
    assert len(mine) == 3

    summary = client.get(f"{API}/history/summary", headers=auth_headers).json()
    assert summary["total"] == 3
    assert summary["by_action"] == {"CREATED": 1, "TITLE_CHANGED": 1, "PRIORITY_CHANGED": 1}
    assert summary["last_activity"] is not None

    assert client.get(f"{API}/history/task/999", headers=auth_headers).status_code == 404


def test_system_events_are_admin_only(client, auth_headers, admin_headers):
    assert client.get(f"{API}/system-events/", headers=auth_headers).status_code == 403
    assert client.post(f"{API}/system-events/process", headers=auth_headers).status_code == 403

    listed = client.get(f"{API}/system-events/", params={"processed": False}, headers=admin_headers)
    assert listed.status_code == 200

    result = client.post(f"{API}/system-events/process", headers=admin_headers)
    assert result.status_code == 200
    assert set(result.json()) == {"fetched", "notified", "failed", "marked"}


def test_cron_init_is_idempotent(client):
    try:
        first = client.get(f"{API}/cron/init")
        assert first.status_code == 200
        assert first.json()["already_initialized"] is False
        assert first.json()["message"] == "Cron jobs initialized"

        second = client.get(f"{API}/cron/init").json()
        assert second["already_initialized"] is True
        assert second["cron_initialized"] is True
        assert client.get("/health").json()["checks"]["event_sweep"] == "running"
    finally:
        client.portal.call(client.app.state.event_sweep.stop)


def test_domain_errors_follow_accept_language(client, auth_headers, other_headers):
    project = _create_project(client, auth_headers)
    task = _create_task(client, auth_headers, project["id"])

    english = client.put(
        f"{API}/tasks/{task['id']}",
        json=_task_update(task, title="Mine"),
        headers={**other_headers, "Accept-Language": "en-US,en;q=0.9"},
    )
    assert english.status_code == 403
    assert english.json()["detail"] == "You can only update tasks you created"

    spanish = client.put(
        f"{API}/tasks/{task['id']}",
        json=_task_update(task, title="Mine"),
        headers={**other_headers, "Accept-Language": "es-ES"},
    )
    assert spanish.json()["detail"] == "Solo puedes actualizar tareas que creaste"

    missing = client.get(f"{API}/tasks/999", headers={**auth_headers, "Accept-Language": "en"})
    assert missing.json()["detail"] == "Task not found"
