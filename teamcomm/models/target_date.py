from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, false
from sqlalchemy.orm import relationship

from teamcomm.database import ID_TYPE, SCHEMA, AuditMixin, Base
from teamcomm.models.enums import TargetDateStatus, enum_type


class TargetDate(Base, AuditMixin):
    __tablename__ = "target_dates"
    __table_args__ = (
        Index("idx_target_dates_target_date", "target_date"),
        Index("idx_target_dates_archived", "is_archived"),
        Index("idx_target_dates_status", "status"),
        Index("idx_target_dates_project_name", "project_name"),
        Index("idx_target_dates_workspace_id", "workspace_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    workspace_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.workspaces.id"), nullable=False)
    project_name = Column(String(200), nullable=False)
    task_name = Column(String(200), nullable=False)
    target_date = Column(DateTime(timezone=True), nullable=False)
    driver_user_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id"), nullable=True)
    documentation_url = Column(String(500), nullable=True)
    status = Column(
        enum_type(TargetDateStatus, "target_dates_status_check"),
        nullable=False,
        default=TargetDateStatus.PENDING,
        server_default=TargetDateStatus.PENDING.value,
    )
    is_archived = Column(Boolean, nullable=False, default=False, server_default=false())

    workspace = relationship("Workspace")
    driver = relationship("User", foreign_keys=[driver_user_id])
