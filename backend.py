from contextlib import contextmanager
from typing import Optional

import redis
from redis.exceptions import LockError, RedisError

from constants import (
    REDIS_HOST,
    REDIS_PORT,
    REDIS_PASSWORD,
    REDIS_SOCKET_TIMEOUT_SECONDS,
    ROOM_LOCK_TIMEOUT_SECONDS,
    ROOM_LOCK_WAIT_SECONDS,
)
from errors import StoreUnavailable
from redis_keys import ROOMS_KEY, ROOM_MEMBERS_KEY, ROOM_LOCK_KEY
from logging_config import get_logger

logger = get_logger(__name__)


def create_redis_client() -> redis.Redis:
    client = redis.Redis(
        host=REDIS_HOST,
        port=REDIS_PORT,
        password=REDIS_PASSWORD,
        decode_responses=True,
        socket_timeout=REDIS_SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=REDIS_SOCKET_TIMEOUT_SECONDS,
    )
    logger.info(f"Redis client created for {REDIS_HOST}:{REDIS_PORT}")
    return client


class RedisBackend:
    """Room -> URL mapping and per-room membership sets, stored in Redis."""

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        lock_timeout: float = ROOM_LOCK_TIMEOUT_SECONDS,
        lock_wait: float = ROOM_LOCK_WAIT_SECONDS,
    ):
        self.redis_client = redis_client if redis_client is not None else create_redis_client()
        self.lock_timeout = lock_timeout
        self.lock_wait = lock_wait

    def get_room_url(self, room_name: str) -> Optional[str]:
        logger.debug(f"Fetching url for room {room_name}")
        try:
            return self.redis_client.hget(ROOMS_KEY, room_name)
        except RedisError as e:
            raise StoreUnavailable("room lookup", e, room_name) from e

    def set_room_url_if_absent(self, room_name: str, room_url: str) -> bool:
        """Store the room url unless one is already stored. Returns True when this call wrote it."""
        try:
            stored = bool(self.redis_client.hsetnx(ROOMS_KEY, room_name, room_url))
        except RedisError as e:
            raise StoreUnavailable("room url write", e, room_name) from e
        if stored:
            logger.info(f"Room {room_name} mapped to {room_url}")
        else:
            logger.debug(f"Room {room_name} already mapped, url left unchanged")
        return stored

    def room_exists(self, room_name: str) -> bool:
        try:
            return bool(self.redis_client.hexists(ROOMS_KEY, room_name))
        except RedisError as e:
            raise StoreUnavailable("room lookup", e, room_name) from e

    def list_room_names(self) -> list[str]:
        try:
            names = self.redis_client.hkeys(ROOMS_KEY)
        except RedisError as e:
            raise StoreUnavailable("room listing", e) from e
        logger.debug(f"Registry holds {len(names)} rooms")
        return sorted(names)

    def add_member(self, room_name: str, user_name: str, expiry_minutes: int):
        """Add a display name to the room and reset the membership TTL."""
        users_key = ROOM_MEMBERS_KEY.format(room_name=room_name)
        try:
            pipe = self.redis_client.pipeline(transaction=True)
            pipe.sadd(users_key, user_name)
            pipe.expire(users_key, expiry_minutes * 60)
            added, _ = pipe.execute()
        except RedisError as e:
            raise StoreUnavailable("membership write", e, room_name) from e
        if added:
            logger.debug(f"User {user_name} added to room {room_name} (new member)")
        else:
            logger.debug(f"User {user_name} already in room {room_name}, expiry refreshed")
        return bool(added)

    def get_members(self, room_name: str) -> set[str]:
        users_key = ROOM_MEMBERS_KEY.format(room_name=room_name)
        try:
            members = self.redis_client.smembers(users_key)
        except RedisError as e:
            raise StoreUnavailable("membership read", e, room_name) from e
        logger.debug(f"Room {room_name} has {len(members)} members")
        return set(members)

    def delete_room(self, room_name: str) -> int:
        """Drop the url mapping and the membership set. Returns the number of member keys removed."""
        logger.info(f"Deleting room {room_name}")
        users_key = ROOM_MEMBERS_KEY.format(room_name=room_name)
        try:
            pipe = self.redis_client.pipeline(transaction=True)
            pipe.hdel(ROOMS_KEY, room_name)
            pipe.delete(users_key)
            url_deleted, users_deleted = pipe.execute()
        except RedisError as e:
            raise StoreUnavailable("room delete", e, room_name) from e
        logger.debug(f"Room {room_name} deleted: url_entry={url_deleted}, users_key={users_deleted}")
        return users_deleted

    @contextmanager
    def room_lock(self, room_name: str):
        """
        Hold the provisioning lock for a room.

        Yields True when the lock was acquired, False when another holder kept
        it past the wait bound. The hold time is bounded by lock_timeout so a
        crashed holder cannot wedge the room.
        """
        lock = self.redis_client.lock(
            ROOM_LOCK_KEY.format(room_name=room_name),
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_wait,
        )
        try:
            acquired = lock.acquire()
        except RedisError as e:
            raise StoreUnavailable("room lock", e, room_name) from e
        if not acquired:
            logger.warning(f"Timed out after {self.lock_wait}s waiting for lock on room {room_name}")
        try:
            yield acquired
        except BaseException:
            if acquired:
                # Keep the original error; a failed unlock only gets logged
                self._release_lock(lock, room_name, raise_errors=False)
            raise
        if acquired:
            self._release_lock(lock, room_name, raise_errors=True)

    def _release_lock(self, lock, room_name: str, raise_errors: bool):
        try:
            lock.release()
        except LockError:
            # Lock expired while held; another caller may own it now
            logger.warning(f"Lock on room {room_name} expired before release")
        except RedisError as e:
            logger.error(f"Failed to release lock on room {room_name}: {e}", exc_info=True)
            if raise_errors:
                raise StoreUnavailable("room unlock", e, room_name) from e

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except RedisError as e:
            logger.error(f"Redis ping failed: {e}", exc_info=True)
            return False
