"""API tests for the user and task endpoints."""

from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient

from todoai.config import get_settings
from todoai.domain.models import Task, User
from todoai.main import app, timeline_repo, user_repo

DAY = "2025-03-22"


@pytest.fixture(autouse=True)
def _clear_repos():
    user_repo.clear()
    timeline_repo._entries.clear()
    yield
    user_repo.clear()
    timeline_repo._entries.clear()
    app.dependency_overrides.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _seed_user(*task_list: Task) -> User:
    user = User(name="Ana", email="ana@example.com", password="pw", tasks=list(task_list))
    user_repo.add(user)
    return user


def _task(id: str, start_time: str, duration: int = 60, date: str = DAY) -> Task:
    return Task(id=id, text=f"Task {id}", date=date, start_time=start_time, duration=duration)


def _wire(id: str, start_time: str, duration: int = 60, date: str = DAY) -> dict:
    return {
        "id": id,
        "text": f"Task {id}",
        "date": date,
        "startTime": start_time,
        "duration": duration,
        "completed": False,
    }


def _enable_validate_on_add() -> None:
    settings = replace(get_settings(), validate_on_add=True)
    app.dependency_overrides[get_settings] = lambda: settings


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


def test_root(client: TestClient):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "Hello World!"


def test_signup_then_signin(client: TestClient):
    resp = client.put(
        "/signup", json={"name": "Ana", "email": "ana@example.com", "password": "pw"}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["email"] == "ana@example.com"
    assert body["tasks"] == []
    assert "password" not in body

    resp = client.put("/signin", json={"email": "ana@example.com", "password": "pw"})
    assert resp.status_code == 200
    assert resp.json()["id"] == body["id"]


def test_signin_wrong_password(client: TestClient):
    _seed_user()
    resp = client.put("/signin", json={"email": "ana@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_signup_duplicate_email(client: TestClient):
    _seed_user()
    resp = client.put(
        "/signup", json={"name": "Other", "email": "ana@example.com", "password": "x"}
    )
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# /updatetaskfully
# ---------------------------------------------------------------------------


def test_update_task_fully_succeeds(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "1", "userID": user.id, "task": _wire("1", "10:00", 30)},
    )

    assert resp.status_code == 200
    tasks = resp.json()["tasks"]
    assert tasks == [_wire("1", "10:00", 30)]


def test_update_task_fully_overlap(client: TestClient):
    user = _seed_user(_task("1", "09:00"), _task("2", "11:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "2", "userID": user.id, "task": _wire("2", "09:30", 30)},
    )

    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "TASK_OVERLAP"
    assert body["conflictingTaskId"] == "1"
    assert "overlaps" in body["message"]
    assert user_repo.get(user.id).find_task("2").start_time == "11:00"


def test_update_task_fully_touching_boundary_ok(client: TestClient):
    user = _seed_user(_task("1", "09:00"), _task("2", "11:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "2", "userID": user.id, "task": _wire("2", "10:00", 60)},
    )

    assert resp.status_code == 200


def test_update_task_fully_unknown_user(client: TestClient):
    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "1", "userID": "ghost", "task": _wire("1", "10:00")},
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User not found"


def test_update_task_fully_unknown_task(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "9", "userID": user.id, "task": _wire("9", "13:00")},
    )

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Task not found"


@pytest.mark.parametrize("start_time", ["9:xx", "25:00", "9:30"])
def test_update_task_fully_rejects_malformed_time(client: TestClient, start_time: str):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "1", "userID": user.id, "task": _wire("1", start_time)},
    )

    assert resp.status_code == 422
    assert user_repo.get(user.id).find_task("1").start_time == "09:00"


def test_update_task_fully_rejects_non_positive_duration(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "1", "userID": user.id, "task": _wire("1", "10:00", 0)},
    )

    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Other task endpoints
# ---------------------------------------------------------------------------


def test_add_task_does_not_check_overlap_by_default(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put("/addtask", json={"userID": user.id, "newTask": _wire("2", "09:30")})

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tasks"]] == ["1", "2"]


def test_add_task_checks_overlap_when_enabled(client: TestClient):
    _enable_validate_on_add()
    user = _seed_user(_task("1", "09:00"))

    resp = client.put("/addtask", json={"userID": user.id, "newTask": _wire("2", "09:30")})

    assert resp.status_code == 400
    assert resp.json()["error"] == "TASK_OVERLAP"


def test_add_task_unknown_user(client: TestClient):
    resp = client.put("/addtask", json={"userID": "ghost", "newTask": _wire("2", "09:30")})
    assert resp.status_code == 404


def test_add_ai_tasks(client: TestClient):
    user = _seed_user()

    resp = client.put(
        "/addaitasks",
        json={"userID": user.id, "tasks": [_wire("g1", "09:00"), _wire("g2", "10:00")]},
    )

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tasks"]] == ["g1", "g2"]


def test_update_task_completed(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.put(
        "/updatetask", json={"taskId": "1", "userID": user.id, "completed": True}
    )

    assert resp.status_code == 200
    assert resp.json()["tasks"][0]["completed"] is True


def test_delete_task(client: TestClient):
    user = _seed_user(_task("1", "09:00"), _task("2", "10:00"))

    resp = client.request("DELETE", "/deletetask", json={"taskId": "1", "userID": user.id})

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tasks"]] == ["2"]


def test_delete_missing_task(client: TestClient):
    user = _seed_user(_task("1", "09:00"))

    resp = client.request("DELETE", "/deletetask", json={"taskId": "x", "userID": user.id})

    assert resp.status_code == 404


def test_list_tasks_for_day(client: TestClient):
    user = _seed_user(
        _task("late", "15:00"), _task("early", "08:00"), _task("other", "07:00", date="2025-03-23")
    )

    resp = client.get(f"/users/{user.id}/tasks", params={"date": DAY})

    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == ["early", "late"]


def test_timeline_records_rejection(client: TestClient):
    user = _seed_user(_task("1", "09:00"), _task("2", "11:00"))
    client.put(
        "/updatetaskfully",
        json={"taskId": "2", "userID": user.id, "task": _wire("2", "09:30")},
    )

    resp = client.get(f"/users/{user.id}/timeline")

    assert resp.status_code == 200
    entries = resp.json()
    assert [e["type"] for e in entries] == ["overlap_rejected"]
    assert entries[0]["payload"]["conflicting_task_id"] == "1"


def test_timeline_unknown_user(client: TestClient):
    assert client.get("/users/ghost/timeline").status_code == 404


def test_corrupt_stored_time_is_reported_as_invalid_time_format(client: TestClient):
    bad = Task.model_construct(
        id="bad", text="legacy", date=DAY, start_time="25:99", duration=30, completed=False
    )
    user = _seed_user(_task("1", "09:00"), bad)

    resp = client.put(
        "/updatetaskfully",
        json={"taskId": "1", "userID": user.id, "task": _wire("1", "10:00")},
    )

    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "INVALID_TIME_FORMAT"
    assert "25:99" in body["detail"]
    assert user_repo.get(user.id).find_task("1").start_time == "09:00"
