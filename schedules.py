from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, Column
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import Base, SessionLocal
from errors import StoreUnavailable
from logging_config import get_logger

logger = get_logger(__name__)


class Schedule(Base):
    """Mentoring schedule row. Owned by the mentoring service; read-only here."""

    __tablename__ = "schedule"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    mentor_id = Column(BigInteger, nullable=False)
    mentee_id = Column(BigInteger, nullable=False)


class Role(str, Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"


@dataclass(frozen=True)
class ScheduleParties:
    schedule_id: int
    mentor_id: int
    mentee_id: int

    def role_of(self, user_id: int) -> Optional[Role]:
        if user_id == self.mentor_id:
            return Role.MENTOR
        if user_id == self.mentee_id:
            return Role.MENTEE
        return None


class ScheduleRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def find_by_id(self, schedule_id: int) -> Optional[ScheduleParties]:
        logger.debug(f"Looking up schedule {schedule_id}")
        try:
            with self.session_factory() as db:
                schedule = db.get(Schedule, schedule_id)
                if schedule is None:
                    return None
                return ScheduleParties(
                    schedule_id=schedule.id,
                    mentor_id=schedule.mentor_id,
                    mentee_id=schedule.mentee_id,
                )
        except SQLAlchemyError as e:
            logger.error(f"Schedule lookup failed for {schedule_id}: {e}", exc_info=True)
            raise StoreUnavailable("schedule lookup", e) from e
