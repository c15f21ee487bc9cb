import threading
import time

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend import RedisBackend
from database import Base
from errors import ProvisionerError
from schedules import Schedule, ScheduleRepository
from session_service import SessionService

SCHEDULE_ID = 1
MENTOR_ID = 100
MENTEE_ID = 200
STRANGER_ID = 300


class FakeProvisioner:
    """Stands in for Daily.co: hands out sequential urls and records deletions."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.created = []
        self.deleted = []
        self.fail_create = False
        self.fail_delete = False
        self.on_create = None
        self._lock = threading.Lock()

    def create(self) -> str:
        if self.fail_create:
            raise ProvisionerError("daily is down")
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            room_url = f"https://mentoring.daily.co/room-{len(self.created) + 1}"
            self.created.append(room_url)
        if self.on_create:
            self.on_create(room_url)
        return room_url

    def delete(self, room_id: str) -> bool:
        if self.fail_delete:
            raise ProvisionerError("daily is down")
        self.deleted.append(room_id)
        return True


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server):
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def backend(redis_client):
    return RedisBackend(redis_client, lock_timeout=5, lock_wait=5)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as db:
        db.add(Schedule(id=SCHEDULE_ID, mentor_id=MENTOR_ID, mentee_id=MENTEE_ID))
        db.commit()
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def schedules(session_factory):
    return ScheduleRepository(session_factory)


@pytest.fixture
def provisioner():
    return FakeProvisioner()


@pytest.fixture
def service(backend, schedules, provisioner):
    return SessionService(backend=backend, schedules=schedules, provisioner=provisioner)
