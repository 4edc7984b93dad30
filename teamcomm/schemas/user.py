from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from teamcomm.models.enums import UserRole
from teamcomm.schemas.common import UTCDateTime


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    full_name: str = Field(min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: UserRole = UserRole.USER
    workspace_id: Optional[int] = None


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    workspace_id: Optional[int] = None
    is_active: Optional[bool] = None


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=6)


class UserResponse(BaseModel):
    id: int
    username: str
    full_name: str
    email: Optional[str] = None
    role: UserRole
    workspace_id: Optional[int] = None
    is_active: bool
    last_login: Optional[UTCDateTime] = None

    class Config:
        from_attributes = True
