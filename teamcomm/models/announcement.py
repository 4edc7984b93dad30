from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import relationship

from teamcomm.database import ID_TYPE, SCHEMA, AuditMixin, Base
from teamcomm.models.enums import Priority, enum_type


class Announcement(Base, AuditMixin):
    __tablename__ = "announcements"
    __table_args__ = (
        Index("idx_announcements_created_at", "created_at"),
        Index("idx_announcements_priority", "priority"),
        Index("idx_announcements_archived", "is_archived"),
        Index("idx_announcements_workspace_id", "workspace_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    workspace_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.workspaces.id"), nullable=False)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    priority = Column(
        enum_type(Priority, "announcements_priority_check"),
        nullable=False,
        default=Priority.NORMAL,
        server_default=Priority.NORMAL.value,
    )
    expiration_date = Column(DateTime(timezone=True), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False, server_default=false())

    workspace = relationship("Workspace")
