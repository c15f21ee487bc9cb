from functools import lru_cache

from backend import RedisBackend
from daily import DailyRoomProvisioner
from schedules import ScheduleRepository
from session_service import SessionService
from logging_config import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_redis_backend() -> RedisBackend:
    return RedisBackend()


@lru_cache(maxsize=1)
def get_session_service() -> SessionService:
    logger.info("Wiring session service")
    return SessionService(
        backend=get_redis_backend(),
        schedules=ScheduleRepository(),
        provisioner=DailyRoomProvisioner(),
    )


def close_session_service():
    """Close the cached Daily.co and Redis clients, if they were ever created."""
    if get_session_service.cache_info().currsize:
        get_session_service().provisioner.close()
        get_session_service.cache_clear()
    if get_redis_backend.cache_info().currsize:
        get_redis_backend().redis_client.close()
        get_redis_backend.cache_clear()
    logger.info("Session service clients closed")
