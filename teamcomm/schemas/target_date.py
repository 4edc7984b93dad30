from typing import Optional

from pydantic import BaseModel, Field

from teamcomm.models.enums import TargetDateStatus
from teamcomm.schemas.common import AuditFields, UTCDateTime


class TargetDateBase(BaseModel):
    project_name: str = Field(min_length=1, max_length=200)
    task_name: str = Field(min_length=1, max_length=200)
    target_date: UTCDateTime
    driver_user_id: Optional[int] = None
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    status: TargetDateStatus = TargetDateStatus.PENDING


class TargetDateCreate(TargetDateBase):
    workspace_id: Optional[int] = None


class TargetDateUpdate(BaseModel):
    project_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    task_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    target_date: Optional[UTCDateTime] = None
    driver_user_id: Optional[int] = None
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    status: Optional[TargetDateStatus] = None


class TargetDateStatusUpdate(BaseModel):
    status: TargetDateStatus


class TargetDateResponse(TargetDateBase, AuditFields):
    id: int
    workspace_id: int
    is_archived: bool

    class Config:
        from_attributes = True
