from pydantic import BaseModel, Field

from teamcomm.schemas.common import UTCDateTime
from teamcomm.schemas.user import UserResponse


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    session_token: str
    expires_at: UTCDateTime
    user: UserResponse


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)
