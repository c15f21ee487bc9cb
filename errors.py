from typing import Optional


class SessionError(Exception):
    """Base for every failure the session registry reports to a caller."""

    status_code = 500
    error = "session_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "status_code": self.status_code,
            "error": self.error,
            "message": self.message,
        }


class ScheduleNotFound(SessionError):
    status_code = 404
    error = "schedule_not_found"

    def __init__(self, schedule_id: int):
        super().__init__(f"Schedule {schedule_id} does not exist")
        self.schedule_id = schedule_id


class Unauthorized(SessionError):
    status_code = 403
    error = "unauthorized"

    def __init__(self, actor: str, reason: str):
        super().__init__(f"User {actor} {reason}")
        self.actor = actor


class RoomNotReady(SessionError):
    status_code = 409
    error = "room_not_ready"

    def __init__(self, room_name: str):
        super().__init__(f"Room {room_name} has not been opened by the mentor yet")
        self.room_name = room_name


class RoomCreationFailed(SessionError):
    status_code = 502
    error = "room_creation_failed"

    def __init__(self, room_name: str, cause: Exception):
        super().__init__(f"Failed to create video room for {room_name}: {cause}")
        self.room_name = room_name
        self.cause = cause


class RoomNotFound(SessionError):
    status_code = 404
    error = "room_not_found"

    def __init__(self, room_name: str):
        super().__init__(f"Room {room_name} is not an active session")
        self.room_name = room_name


class NoActiveSessions(SessionError):
    status_code = 404
    error = "no_active_sessions"

    def __init__(self):
        super().__init__("There are no active sessions")


class StoreUnavailable(SessionError):
    status_code = 503
    error = "store_unavailable"

    def __init__(self, operation: str, cause: Exception, room_name: Optional[str] = None):
        target = f" for room {room_name}" if room_name else ""
        super().__init__(f"Session store failed during {operation}{target}: {cause}")
        self.operation = operation
        self.room_name = room_name
        self.cause = cause


class ExternalProviderFailed(SessionError):
    status_code = 502
    error = "external_provider_failed"

    def __init__(self, operation: str, cause: Exception, room_name: Optional[str] = None):
        target = f" for room {room_name}" if room_name else ""
        super().__init__(f"Video provider failed during {operation}{target}: {cause}")
        self.operation = operation
        self.room_name = room_name
        self.cause = cause


class ProvisionerError(Exception):
    """Raised by the room provisioner client; mapped by the registry to a SessionError."""
