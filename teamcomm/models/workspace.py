from sqlalchemy import Boolean, Column, String, Text, true
from sqlalchemy.orm import relationship

from teamcomm.database import ID_TYPE, SCHEMA, Base, TimestampMixin


class Workspace(Base, TimestampMixin):
    __tablename__ = "workspaces"
    __table_args__ = {"schema": SCHEMA}

    id = Column(ID_TYPE, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    # No FK: users.workspace_id already references this table
    created_by = Column(ID_TYPE, nullable=True)
    updated_by = Column(ID_TYPE, nullable=True)

    users = relationship("User", back_populates="workspace", foreign_keys="User.workspace_id")
