from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import MENTEE_ID, MENTOR_ID, SCHEDULE_ID, STRANGER_ID
from errors import StoreUnavailable
from schedules import Role, ScheduleRepository


def test_find_by_id(schedules):
    schedule = schedules.find_by_id(SCHEDULE_ID)

    assert schedule.schedule_id == SCHEDULE_ID
    assert schedule.mentor_id == MENTOR_ID
    assert schedule.mentee_id == MENTEE_ID


def test_find_missing_schedule(schedules):
    assert schedules.find_by_id(404) is None


def test_role_of(schedules):
    schedule = schedules.find_by_id(SCHEDULE_ID)

    assert schedule.role_of(MENTOR_ID) is Role.MENTOR
    assert schedule.role_of(MENTEE_ID) is Role.MENTEE
    assert schedule.role_of(STRANGER_ID) is None


def test_database_errors_are_wrapped():
    session = MagicMock()
    session.__enter__.return_value.get.side_effect = OperationalError("SELECT", {}, Exception("db down"))
    repository = ScheduleRepository(lambda: session)

    with pytest.raises(StoreUnavailable) as exc_info:
        repository.find_by_id(SCHEDULE_ID)
    assert exc_info.value.operation == "schedule lookup"
