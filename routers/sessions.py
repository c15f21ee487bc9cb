from fastapi import APIRouter, Depends, HTTPException

from dependencies import get_session_service
from schemas.sessions import (
    EnterSessionRequest,
    EnterSessionResponse,
    ErrorResponse,
    RemoveSessionRequest,
    RemoveSessionResponse,
    SessionListResponse,
)
from session_service import SessionService
from logging_config import get_logger

logger = get_logger(__name__)

sessions_router = APIRouter(prefix="/sessions", tags=["sessions"])

ERROR_RESPONSES = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


# Handlers are plain `def`: the store, database and Daily.co calls block, so FastAPI runs them in its thread pool.
@sessions_router.post("", response_model=EnterSessionResponse, responses=ERROR_RESPONSES)
def enter_session(request: EnterSessionRequest, service: SessionService = Depends(get_session_service)):
    # POST /sessions Body: { "schedule_id": 1, "user_id": 10, "user_name": "Alice", "room_name": "roomA", "expiry_minutes": 30 }
    # Response 200: { "status_code": 200, "message": "...", "room_name": "roomA", "user_name": "Alice", "room_url": "https://..." }
    logger.info(f"Enter request: schedule={request.schedule_id}, user={request.user_id} ({request.user_name}), room={request.room_name}")
    try:
        result = service.enter(
            request.schedule_id,
            request.user_id,
            request.user_name,
            request.room_name,
            request.expiry_minutes,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return EnterSessionResponse(
        status_code=result.status_code,
        message=result.message,
        room_name=result.room_name,
        user_name=result.user_name,
        room_url=result.room_url,
    )


@sessions_router.get("", response_model=SessionListResponse, responses=ERROR_RESPONSES)
def list_sessions(service: SessionService = Depends(get_session_service)):
    logger.info("List sessions request")
    snapshot = service.list()
    return SessionListResponse(
        status_code=snapshot.status_code,
        message=snapshot.message,
        room_urls=snapshot.room_urls,
        members=snapshot.members,
    )


@sessions_router.delete("", response_model=RemoveSessionResponse, responses=ERROR_RESPONSES)
def remove_session(request: RemoveSessionRequest, service: SessionService = Depends(get_session_service)):
    # DELETE /sessions Body: { "schedule_id": 1, "user_id": 10, "room_name": "roomA", "external_room_id": "daily-room-name" }
    logger.info(f"Remove request: schedule={request.schedule_id}, user={request.user_id}, room={request.room_name}")
    result = service.remove(
        request.schedule_id,
        request.user_id,
        request.room_name,
        request.external_room_id,
    )
    return RemoveSessionResponse(
        status_code=result.status_code,
        message=result.message,
        deletion_result=result.deletion_result,
        external_room_deleted=result.external_room_deleted,
    )
