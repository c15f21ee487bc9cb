from fastapi.testclient import TestClient

from app import app
from dependencies import close_session_service, get_redis_backend, get_session_service


def test_close_session_service_closes_clients():
    get_session_service.cache_clear()
    get_redis_backend.cache_clear()
    service = get_session_service()

    close_session_service()

    assert service.provisioner.client.is_closed
    assert get_session_service.cache_info().currsize == 0
    assert get_redis_backend.cache_info().currsize == 0


def test_app_shutdown_closes_clients():
    get_session_service.cache_clear()
    service = get_session_service()

    with TestClient(app):
        pass

    assert service.provisioner.client.is_closed
    assert get_session_service.cache_info().currsize == 0


def test_close_without_service_is_noop():
    get_session_service.cache_clear()
    get_redis_backend.cache_clear()

    close_session_service()

    assert get_session_service.cache_info().currsize == 0
