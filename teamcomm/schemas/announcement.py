from typing import Optional

from pydantic import BaseModel, Field

from teamcomm.models.enums import Priority
from teamcomm.schemas.common import AuditFields, UTCDateTime


class AnnouncementBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    priority: Priority = Priority.NORMAL
    expiration_date: Optional[UTCDateTime] = None


class AnnouncementCreate(AnnouncementBase):
    # Only read for super admins viewing all workspaces
    workspace_id: Optional[int] = None


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[Priority] = None
    expiration_date: Optional[UTCDateTime] = None


class AnnouncementResponse(AnnouncementBase, AuditFields):
    id: int
    workspace_id: int
    is_archived: bool

    class Config:
        from_attributes = True
