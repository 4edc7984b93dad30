from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, false, func
from sqlalchemy.orm import relationship

from teamcomm.core.security import utcnow
from teamcomm.database import ID_TYPE, SCHEMA, AuditMixin, Base
from teamcomm.models.enums import DeploymentStatus, Environment, enum_type


class Deployment(Base, AuditMixin):
    __tablename__ = "deployments"
    __table_args__ = (
        Index("idx_deployments_datetime", "deployment_datetime"),
        Index("idx_deployments_status", "status"),
        Index("idx_deployments_archived", "is_archived"),
        Index("idx_deployments_ticket_number", "ticket_number"),
        Index("idx_deployments_workspace_id", "workspace_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    workspace_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.workspaces.id"), nullable=False)
    release_name = Column(String(100), nullable=False)
    version = Column(String(50), nullable=False)
    deployment_datetime = Column(DateTime(timezone=True), nullable=False)
    driver_user_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id"), nullable=True)
    release_notes = Column(Text, nullable=True)
    ticket_number = Column(String(50), nullable=True)
    documentation_url = Column(String(500), nullable=True)
    environment = Column(
        enum_type(Environment, "deployments_environment_check"),
        nullable=False,
        default=Environment.PRODUCTION,
        server_default=Environment.PRODUCTION.value,
    )
    status = Column(
        enum_type(DeploymentStatus, "deployments_status_check"),
        nullable=False,
        default=DeploymentStatus.PLANNED,
        server_default=DeploymentStatus.PLANNED.value,
    )
    is_archived = Column(Boolean, nullable=False, default=False, server_default=false())

    workspace = relationship("Workspace")
    driver = relationship("User", foreign_keys=[driver_user_id])
    comments = relationship(
        "DeploymentComment",
        back_populates="deployment",
        cascade="all, delete-orphan",
        order_by="DeploymentComment.created_at.desc()",
    )


class DeploymentComment(Base):
    """Comments are append-only; there is no edit or delete."""

    __tablename__ = "deployment_comments"
    __table_args__ = (
        Index("idx_deployment_comments_deployment_id", "deployment_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    deployment_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.deployments.id", ondelete="CASCADE"), nullable=False)
    comment_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    created_by = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id"), nullable=True)

    deployment = relationship("Deployment", back_populates="comments")
    author = relationship("User")
