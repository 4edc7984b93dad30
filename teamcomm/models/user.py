from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, true
from sqlalchemy.orm import relationship

from teamcomm.database import ID_TYPE, SCHEMA, AuditMixin, Base
from teamcomm.models.enums import UserRole, enum_type


class User(Base, AuditMixin):
    __tablename__ = "users"
    __table_args__ = (
        # Super admins sit above workspaces; everybody else belongs to exactly one
        CheckConstraint(
            "(role = 'SUPER_ADMIN' AND workspace_id IS NULL) OR "
            "(role <> 'SUPER_ADMIN' AND workspace_id IS NOT NULL)",
            name="users_role_workspace_check",
        ),
        Index("idx_users_workspace_id", "workspace_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    username = Column(String(50), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=True)
    role = Column(enum_type(UserRole, "users_role_check"), nullable=False, default=UserRole.USER)
    workspace_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.workspaces.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    last_login = Column(DateTime(timezone=True), nullable=True)

    workspace = relationship("Workspace", back_populates="users", foreign_keys=[workspace_id])
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN
