from pydantic import BaseModel, Field


class EnterSessionRequest(BaseModel):
    schedule_id: int
    user_id: int
    user_name: str = Field(min_length=1)
    room_name: str = Field(min_length=1)
    expiry_minutes: int = Field(default=30, gt=0)

class EnterSessionResponse(BaseModel):
    status_code: int
    message: str
    room_name: str
    user_name: str
    room_url: str

class SessionListResponse(BaseModel):
    status_code: int
    message: str
    room_urls: dict[str, str]
    members: dict[str, list[str]]

class RemoveSessionRequest(BaseModel):
    schedule_id: int
    user_id: int
    room_name: str = Field(min_length=1)
    external_room_id: str = Field(min_length=1)

class RemoveSessionResponse(BaseModel):
    status_code: int
    message: str
    deletion_result: int
    external_room_deleted: bool

class ErrorResponse(BaseModel):
    status_code: int
    error: str
    message: str
