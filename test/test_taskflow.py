import uuid

import pytest

from revops.models_taskflow import TFActivity, TFNotification, TFTask

USER = {"X-User-Email": "Dev@RevelateOps.com"}
OTHER_USER = {"X-User-Email": "someone@else.com"}


@pytest.fixture
def project_id(client):
    response = client.post("/api/taskflow/projects", headers=USER, json={"name": "Website relaunch"})
    return response.json()["id"]


def create_task(client, **fields):
    response = client.post("/api/taskflow/tasks", headers=USER, json={"title": "Task", **fields})
    assert response.status_code == 201, response.text
    return response.json()


class TestTasks:
    """Task CRUD on the kanban board."""

    def test_create_task_defaults(self, client):
        task = create_task(client, title="Write copy")

        assert task["status"] == "todo"
        assert task["priority"] == "medium"
        assert task["task_type"] == "task"
        assert task["labels"] == []
        assert task["created_by"] == "dev@revelateops.com"

    def test_enum_input_is_case_insensitive(self, client):
        task = create_task(client, status="in_progress", priority="High", taskType="bug")

        assert task["status"] == "in_progress"
        assert task["priority"] == "high"
        assert task["task_type"] == "bug"

    def test_invalid_enum_is_rejected(self, client):
        response = client.post(
            "/api/taskflow/tasks", headers=USER, json={"title": "X", "status": "someday"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_project_id_must_be_uuid(self, client):
        response = client.post(
            "/api/taskflow/tasks", headers=USER, json={"title": "X", "projectId": "not-a-uuid"}
        )

        assert response.status_code == 400

    def test_unknown_project_is_404(self, client):
        response = client.post(
            "/api/taskflow/tasks", headers=USER, json={"title": "X", "projectId": str(uuid.uuid4())}
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Project not found"

    def test_due_date_is_returned_as_date(self, client):
        task = create_task(client, dueDate="2025-03-14T23:30:00Z")

        assert task["due_date"] == "2025-03-14"

    def test_tasks_are_scoped_to_user(self, client):
        task = create_task(client)

        assert client.get(f"/api/taskflow/tasks/{task['id']}", headers=OTHER_USER).status_code == 404
        assert client.get("/api/taskflow/tasks", headers=OTHER_USER).json() == []

    def test_missing_user_header_falls_back_to_owner(self, client):
        response = client.post("/api/taskflow/tasks", json={"title": "Owner task"})

        assert response.json()["created_by"] == "owner@example.com"

    def test_list_filters_and_sorting(self, client, project_id):
        create_task(client, title="b", priority="LOW", projectId=project_id)
        create_task(client, title="a", priority="URGENT", projectId=project_id)
        create_task(client, title="c", priority="HIGH")

        by_title = client.get("/api/taskflow/tasks", headers=USER, params={"sortBy": "title"}).json()
        assert [t["title"] for t in by_title] == ["a", "b", "c"]

        by_priority = client.get(
            "/api/taskflow/tasks", headers=USER, params={"sortBy": "-priority"}
        ).json()
        assert [t["priority"] for t in by_priority] == ["urgent", "high", "low"]

        in_project = client.get(
            "/api/taskflow/tasks", headers=USER, params={"projectId": project_id, "sortBy": "title"}
        ).json()
        assert [t["title"] for t in in_project] == ["a", "b"]
        assert in_project[0]["project"]["name"] == "Website relaunch"

        urgent = client.get("/api/taskflow/tasks", headers=USER, params={"priority": "urgent"}).json()
        assert [t["title"] for t in urgent] == ["a"]

    def test_invalid_sort_field(self, client):
        response = client.get("/api/taskflow/tasks", headers=USER, params={"sortBy": "color"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid sortBy")

    def test_list_includes_subtasks_and_comment_count(self, client):
        parent = create_task(client, title="Parent")
        create_task(client, title="Child", parentId=parent["id"], taskType="SUBTASK")
        client.post(f"/api/taskflow/tasks/{parent['id']}/comments", headers=USER, json={"content": "hi"})

        tasks = client.get("/api/taskflow/tasks", headers=USER, params={"sortBy": "title"}).json()
        listed_parent = next(t for t in tasks if t["id"] == parent["id"])
        assert [s["title"] for s in listed_parent["subtasks"]] == ["Child"]
        assert listed_parent["comment_count"] == 1

    def test_task_detail(self, client):
        parent = create_task(client, title="Parent")
        child = create_task(client, title="Child", parentId=parent["id"])
        client.post(f"/api/taskflow/tasks/{child['id']}/comments", headers=USER, json={"content": "Looks good"})

        detail = client.get(f"/api/taskflow/tasks/{child['id']}", headers=USER).json()

        assert detail["parent"] == {"id": parent["id"], "title": "Parent"}
        assert [c["content"] for c in detail["comments"]] == ["Looks good"]
        assert detail["comments"][0]["author_id"] == "dev@revelateops.com"

    def test_update_status_logs_activity(self, client, db_session):
        task = create_task(client, title="Ship it")

        updated = client.patch(
            f"/api/taskflow/tasks/{task['id']}", headers=USER, json={"status": "DONE"}
        ).json()

        assert updated["status"] == "done"
        activity = db_session.query(TFActivity).filter_by(type="task_status_changed").one()
        assert activity.extra_data == {"old_status": "todo", "new_status": "done"}

    def test_update_can_clear_optional_fields(self, client):
        task = create_task(client, description="Draft", dueDate="2025-01-01T09:00:00")

        updated = client.patch(
            f"/api/taskflow/tasks/{task['id']}",
            headers=USER,
            json={"description": None, "dueDate": None, "title": None},
        ).json()

        assert updated["description"] is None
        assert updated["due_date"] is None
        assert updated["title"] == "Task"

    def test_task_cannot_be_its_own_parent(self, client):
        task = create_task(client)

        response = client.patch(
            f"/api/taskflow/tasks/{task['id']}", headers=USER, json={"parentId": task["id"]}
        )

        assert response.status_code == 400

    def test_delete_task(self, client):
        task = create_task(client)

        assert client.delete(f"/api/taskflow/tasks/{task['id']}", headers=USER).json() == {"success": True}
        assert client.get(f"/api/taskflow/tasks/{task['id']}", headers=USER).status_code == 404

    def test_empty_comment_is_rejected(self, client):
        task = create_task(client)

        response = client.post(f"/api/taskflow/tasks/{task['id']}/comments", headers=USER, json={"content": ""})

        assert response.status_code == 400


class TestReorder:
    """Drag-and-drop batch updates."""

    def test_reorder_moves_tasks(self, client, db_session):
        first = create_task(client, title="First")
        second = create_task(client, title="Second")

        response = client.patch(
            "/api/taskflow/tasks",
            headers=USER,
            json={
                "tasks": [
                    {"id": first["id"], "status": "IN_PROGRESS", "order": 1},
                    {"id": second["id"], "status": "in_progress", "order": 0},
                ]
            },
        )

        assert response.json() == {"success": True}
        db_session.expire_all()
        assert db_session.get(TFTask, first["id"]).status == "IN_PROGRESS"
        assert db_session.get(TFTask, second["id"]).order == 0

    def test_unknown_task_aborts_whole_batch(self, client, db_session):
        task = create_task(client, title="Stay put")

        response = client.patch(
            "/api/taskflow/tasks",
            headers=USER,
            json={
                "tasks": [
                    {"id": task["id"], "status": "DONE", "order": 5},
                    {"id": str(uuid.uuid4()), "status": "DONE", "order": 6},
                ]
            },
        )

        assert response.status_code == 404
        db_session.expire_all()
        assert db_session.get(TFTask, task["id"]).status == "TODO"


class TestProjects:
    """Project CRUD and progress."""

    def test_create_project_defaults(self, client):
        project = client.post("/api/taskflow/projects", headers=USER, json={"name": "Docs"}).json()

        assert project["color"] == "#00d9ff"
        assert project["status"] == "active"
        assert project["owner_id"] == "dev@revelateops.com"
        assert project["task_count"] == 0

    def test_progress_counts_done_tasks(self, client, project_id):
        done = create_task(client, projectId=project_id, status="DONE", title="Done")
        create_task(client, projectId=project_id, title="Open 1")
        create_task(client, projectId=project_id, title="Open 2")

        projects = client.get("/api/taskflow/projects", headers=USER).json()

        assert projects[0]["task_count"] == 3
        assert projects[0]["completed_tasks"] == 1
        assert projects[0]["progress"] == 33

        detail = client.get(f"/api/taskflow/projects/{project_id}", headers=USER).json()
        assert detail["tasks"][-1]["id"] == done["id"]

    def test_detail_orders_tasks_by_board_column(self, client, project_id):
        create_task(client, projectId=project_id, status="IN_REVIEW", title="Review")
        create_task(client, projectId=project_id, status="BACKLOG", title="Later")
        create_task(client, projectId=project_id, status="TODO", title="Next", order=1)
        create_task(client, projectId=project_id, status="TODO", title="Now", order=0)

        detail = client.get(f"/api/taskflow/projects/{project_id}", headers=USER).json()

        assert [t["title"] for t in detail["tasks"]] == ["Later", "Now", "Next", "Review"]

    def test_status_filter(self, client, project_id):
        client.patch(f"/api/taskflow/projects/{project_id}", headers=USER, json={"status": "archived"})

        assert client.get("/api/taskflow/projects", headers=USER, params={"status": "active"}).json() == []
        archived = client.get("/api/taskflow/projects", headers=USER, params={"status": "ARCHIVED"}).json()
        assert [p["id"] for p in archived] == [project_id]

    def test_update_project(self, client, project_id):
        updated = client.patch(
            f"/api/taskflow/projects/{project_id}",
            headers=USER,
            json={"name": "Relaunch v2", "color": "#ff0066"},
        ).json()

        assert updated["name"] == "Relaunch v2"
        assert updated["color"] == "#ff0066"

    def test_delete_project_deletes_its_tasks(self, client, db_session, project_id):
        task = create_task(client, projectId=project_id)

        client.delete(f"/api/taskflow/projects/{project_id}", headers=USER)

        assert client.get(f"/api/taskflow/projects/{project_id}", headers=USER).status_code == 404
        db_session.expire_all()
        assert db_session.get(TFTask, task["id"]) is None

    def test_projects_are_scoped_to_owner(self, client, project_id):
        assert client.get(f"/api/taskflow/projects/{project_id}", headers=OTHER_USER).status_code == 404


class TestActivityAndNotifications:
    def test_activity_feed(self, client, project_id):
        task = create_task(client, projectId=project_id, title="Plan")
        client.post(f"/api/taskflow/tasks/{task['id']}/comments", headers=USER, json={"content": "Noted"})

        feed = client.get("/api/taskflow/activities", headers=USER, params={"taskId": task["id"]}).json()

        assert {a["type"] for a in feed} == {"task_created", "comment_added"}
        assert all(a["task"]["title"] == "Plan" for a in feed)

        project_feed = client.get(
            "/api/taskflow/activities", headers=USER, params={"projectId": project_id}
        ).json()
        assert "project_created" in {a["type"] for a in project_feed}

    def test_assigning_someone_else_notifies_them(self, client, db_session):
        create_task(client, title="Review copy", assigneeId="someone@else.com")
        create_task(client, title="Self task", assigneeId="dev@revelateops.com")

        assert db_session.query(TFNotification).count() == 1

        notifications = client.get(
            "/api/taskflow/notifications", headers=OTHER_USER, params={"unread": "true"}
        ).json()
        assert [n["type"] for n in notifications] == ["task_assigned"]
        assert notifications[0]["read"] is False

        assert client.patch("/api/taskflow/notifications", headers=OTHER_USER).json() == {"success": True}
        unread = client.get(
            "/api/taskflow/notifications", headers=OTHER_USER, params={"unread": "true"}
        ).json()
        assert unread == []
