from typing import Optional

from pydantic import BaseModel, Field

from teamcomm.models.enums import DeploymentStatus, Environment
from teamcomm.schemas.common import AuditFields, UTCDateTime


class DeploymentBase(BaseModel):
    release_name: str = Field(min_length=1, max_length=100)
    version: str = Field(min_length=1, max_length=50)
    deployment_datetime: UTCDateTime
    driver_user_id: Optional[int] = None
    release_notes: Optional[str] = None
    ticket_number: Optional[str] = Field(default=None, max_length=50)
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    environment: Environment = Environment.PRODUCTION
    status: DeploymentStatus = DeploymentStatus.PLANNED


class DeploymentCreate(DeploymentBase):
    workspace_id: Optional[int] = None


class DeploymentUpdate(BaseModel):
    release_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    version: Optional[str] = Field(default=None, min_length=1, max_length=50)
    deployment_datetime: Optional[UTCDateTime] = None
    driver_user_id: Optional[int] = None
    release_notes: Optional[str] = None
    ticket_number: Optional[str] = Field(default=None, max_length=50)
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    environment: Optional[Environment] = None
    status: Optional[DeploymentStatus] = None


class DeploymentStatusUpdate(BaseModel):
    status: DeploymentStatus


class DeploymentResponse(DeploymentBase, AuditFields):
    id: int
    workspace_id: int
    is_archived: bool

    class Config:
        from_attributes = True


class DeploymentCommentCreate(BaseModel):
    comment_text: str = Field(min_length=1)


class DeploymentCommentResponse(BaseModel):
    id: int
    deployment_id: int
    comment_text: str
    created_at: Optional[UTCDateTime] = None
    created_by: Optional[int] = None

    class Config:
        from_attributes = True
