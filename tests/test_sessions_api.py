import pytest
from fastapi.testclient import TestClient

from app import app
from conftest import MENTEE_ID, MENTOR_ID, SCHEDULE_ID, STRANGER_ID
from dependencies import get_redis_backend, get_session_service


@pytest.fixture
def client(service, backend):
    app.dependency_overrides[get_session_service] = lambda: service
    app.dependency_overrides[get_redis_backend] = lambda: backend
    yield TestClient(app)
    app.dependency_overrides.clear()


def enter(client, user_id, user_name, room_name="roomA", expiry_minutes=30):
    return client.post(
        "/sessions",
        json={
            "schedule_id": SCHEDULE_ID,
            "user_id": user_id,
            "user_name": user_name,
            "room_name": room_name,
            "expiry_minutes": expiry_minutes,
        },
    )


def remove(client, user_id, room_name="roomA", external_room_id="ext1"):
    return client.request(
        "DELETE",
        "/sessions",
        json={
            "schedule_id": SCHEDULE_ID,
            "user_id": user_id,
            "room_name": room_name,
            "external_room_id": external_room_id,
        },
    )


def test_session_lifecycle(client, provisioner):
    response = enter(client, MENTOR_ID, "Alice")
    assert response.status_code == 200
    body = response.json()
    assert body["status_code"] == 200
    assert body["room_name"] == "roomA"
    assert body["user_name"] == "Alice"
    room_url = body["room_url"]

    response = enter(client, MENTEE_ID, "Bob")
    assert response.status_code == 200
    assert response.json()["room_url"] == room_url

    response = client.get("/sessions")
    assert response.status_code == 200
    body = response.json()
    assert body["room_urls"] == {"roomA": room_url}
    assert body["members"] == {"roomA": ["Alice", "Bob"]}

    response = remove(client, MENTOR_ID)
    assert response.status_code == 200
    assert response.json()["deletion_result"] == 1
    assert provisioner.deleted == ["ext1"]

    response = client.get("/sessions")
    assert response.status_code == 404
    assert response.json()["error"] == "no_active_sessions"


@pytest.mark.parametrize(
    "user_id, expected_status, expected_error",
    [
        (MENTEE_ID, 409, "room_not_ready"),
        (STRANGER_ID, 403, "unauthorized"),
    ],
)
def test_enter_errors(client, user_id, expected_status, expected_error):
    response = enter(client, user_id, "Bob")

    assert response.status_code == expected_status
    body = response.json()
    assert body["status_code"] == expected_status
    assert body["error"] == expected_error
    assert "roomA" in body["message"]


def test_enter_unknown_schedule(client):
    response = client.post(
        "/sessions",
        json={"schedule_id": 42, "user_id": MENTOR_ID, "user_name": "Alice", "room_name": "roomA"},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "schedule_not_found"


def test_enter_rejects_non_positive_expiry(client, provisioner):
    response = enter(client, MENTOR_ID, "Alice", expiry_minutes=0)

    assert response.status_code == 422
    assert provisioner.created == []


def test_enter_provider_failure(client, provisioner):
    provisioner.fail_create = True

    response = enter(client, MENTOR_ID, "Alice")

    assert response.status_code == 502
    assert response.json()["error"] == "room_creation_failed"


def test_remove_errors(client):
    assert remove(client, MENTOR_ID).json()["error"] == "room_not_found"

    enter(client, MENTOR_ID, "Alice")
    response = remove(client, MENTEE_ID)
    assert response.status_code == 403
    assert response.json()["error"] == "unauthorized"


def test_store_outage_is_503(client, redis_server):
    redis_server.connected = False

    response = client.get("/sessions")

    assert response.status_code == 503
    assert response.json()["error"] == "store_unavailable"


def test_health(client, redis_server):
    assert client.get("/health").json() == {"status": "ok", "redis": True}

    redis_server.connected = False
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["redis"] is False
