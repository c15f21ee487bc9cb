from dataclasses import dataclass, field
from typing import Optional

from backend import RedisBackend
from daily import DailyRoomProvisioner
from errors import (
    ExternalProviderFailed,
    NoActiveSessions,
    ProvisionerError,
    RoomCreationFailed,
    RoomNotFound,
    RoomNotReady,
    ScheduleNotFound,
    StoreUnavailable,
    Unauthorized,
)
from schedules import Role, ScheduleParties, ScheduleRepository
from logging_config import get_logger

logger = get_logger(__name__)

STATUS_OK = 200


def room_id_from_url(room_url: str) -> str:
    """Daily room urls end with the room name, which is also its API identifier."""
    return room_url.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class EnterResult:
    room_name: str
    user_name: str
    room_url: str
    status_code: int = STATUS_OK

    @property
    def message(self) -> str:
        return f"{self.user_name} entered {self.room_name} at {self.room_url}"


@dataclass(frozen=True)
class RoomView:
    url: str
    members: frozenset[str] = frozenset()


@dataclass(frozen=True)
class SessionSnapshot:
    """Point-in-time view of every room; not isolated across rooms."""

    rooms: dict[str, RoomView] = field(default_factory=dict)
    status_code: int = STATUS_OK
    message: str = "Active sessions loaded"

    @property
    def room_urls(self) -> dict[str, str]:
        return {name: room.url for name, room in self.rooms.items()}

    @property
    def members(self) -> dict[str, list[str]]:
        return {name: sorted(room.members) for name, room in self.rooms.items()}


@dataclass(frozen=True)
class RemoveResult:
    room_name: str
    deletion_result: int
    external_room_deleted: bool
    status_code: int = STATUS_OK

    @property
    def message(self) -> str:
        return f"Session {self.room_name} removed"


class SessionService:
    def __init__(
        self,
        backend: RedisBackend,
        schedules: ScheduleRepository,
        provisioner: DailyRoomProvisioner,
    ):
        self.backend = backend
        self.schedules = schedules
        self.provisioner = provisioner

    def _find_schedule(self, schedule_id: int) -> ScheduleParties:
        schedule = self.schedules.find_by_id(schedule_id)
        if schedule is None:
            logger.warning(f"Schedule {schedule_id} not found")
            raise ScheduleNotFound(schedule_id)
        return schedule

    def enter(
        self,
        schedule_id: int,
        user_id: int,
        user_name: str,
        room_name: str,
        expiry_minutes: int,
    ) -> EnterResult:
        if expiry_minutes <= 0:
            raise ValueError(f"expiry_minutes must be positive, got {expiry_minutes}")

        schedule = self._find_schedule(schedule_id)
        role = schedule.role_of(user_id)

        if role is Role.MENTOR:
            room_url = self._open_room(room_name)
        elif role is Role.MENTEE:
            room_url = self.backend.get_room_url(room_name)
            if room_url is None:
                logger.warning(f"Mentee {user_name} tried to enter {room_name} before the mentor opened it")
                raise RoomNotReady(room_name)
        else:
            logger.warning(f"User {user_name} ({user_id}) is not booked on schedule {schedule_id}")
            raise Unauthorized(user_name, f"is not booked on schedule {schedule_id} and cannot enter {room_name}")

        self.backend.add_member(room_name, user_name, expiry_minutes)
        logger.info(f"User {user_name} entered room {room_name} ({room_url}) as {role.value}, expiry {expiry_minutes}m")
        return EnterResult(room_name=room_name, user_name=user_name, room_url=room_url)

    def _open_room(self, room_name: str) -> str:
        """Return the room's url, provisioning it if this is the first mentor entry."""
        room_url = self.backend.get_room_url(room_name)
        if room_url is not None:
            return room_url

        with self.backend.room_lock(room_name) as acquired:
            # Another mentor request may have provisioned while we waited
            room_url = self.backend.get_room_url(room_name)
            if room_url is not None:
                return room_url
            if not acquired:
                raise StoreUnavailable(
                    "room lock", TimeoutError("provisioning lock is still held"), room_name
                )

            room_url = self._provision(room_name)
            if self._store_room_url(room_name, room_url):
                return room_url

            # The lock expired mid-provisioning and another writer stored its url first
            winner_url = self.backend.get_room_url(room_name)
            if winner_url is None:
                # winner was removed in between
                if self._store_room_url(room_name, room_url):
                    return room_url
                winner_url = self.backend.get_room_url(room_name)
            self._discard_room(room_name, room_url)
            if winner_url is None:
                raise StoreUnavailable(
                    "room url write", RuntimeError("room url kept changing during provisioning"), room_name
                )
            return winner_url

    def _store_room_url(self, room_name: str, room_url: str) -> bool:
        """HSETNX the freshly provisioned url; the video room is discarded if the store fails."""
        try:
            return self.backend.set_room_url_if_absent(room_name, room_url)
        except StoreUnavailable:
            self._discard_room(room_name, room_url)
            raise

    def _provision(self, room_name: str) -> str:
        logger.info(f"Provisioning video room for {room_name}")
        try:
            return self.provisioner.create()
        except ProvisionerError as e:
            logger.error(f"Video room creation failed for {room_name}: {e}", exc_info=True)
            raise RoomCreationFailed(room_name, e) from e

    def _discard_room(self, room_name: str, room_url: str):
        logger.warning(f"Discarding surplus video room {room_url} for {room_name}")
        try:
            self.provisioner.delete(room_id_from_url(room_url))
        except ProvisionerError as e:
            logger.error(f"Surplus video room {room_url} for {room_name} could not be deleted: {e}", exc_info=True)

    def list(self) -> SessionSnapshot:
        room_names = self.backend.list_room_names()
        if not room_names:
            logger.info("No active sessions")
            raise NoActiveSessions()

        rooms = {}
        for room_name in room_names:
            room_url: Optional[str] = self.backend.get_room_url(room_name)
            if room_url is None:
                # removed after enumeration
                continue
            members = self.backend.get_members(room_name)
            rooms[room_name] = RoomView(url=room_url, members=frozenset(members))

        if not rooms:
            raise NoActiveSessions()
        logger.info(f"Loaded {len(rooms)} active sessions")
        return SessionSnapshot(rooms=rooms)

    def remove(self, schedule_id: int, user_id: int, room_name: str, external_room_id: str) -> RemoveResult:
        schedule = self._find_schedule(schedule_id)
        if schedule.role_of(user_id) is not Role.MENTOR:
            logger.warning(f"User {user_id} tried to remove {room_name} but is not the mentor of schedule {schedule_id}")
            raise Unauthorized(str(user_id), f"is not the mentor of schedule {schedule_id} and cannot remove {room_name}")

        if not self.backend.room_exists(room_name):
            logger.warning(f"Remove failed: room {room_name} not found")
            raise RoomNotFound(room_name)

        # External room goes first so a provider failure leaves the session intact for a retry
        try:
            external_deleted = self.provisioner.delete(external_room_id)
        except ProvisionerError as e:
            logger.error(f"Video room {external_room_id} deletion failed for {room_name}: {e}", exc_info=True)
            raise ExternalProviderFailed("room delete", e, room_name) from e

        deleted = self.backend.delete_room(room_name)
        logger.info(f"Session {room_name} removed: members_deleted={deleted}, external_deleted={external_deleted}")
        return RemoveResult(
            room_name=room_name,
            deletion_result=deleted,
            external_room_deleted=external_deleted,
        )
