from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, func, true
from sqlalchemy.orm import relationship

from teamcomm.core.security import utcnow
from teamcomm.database import ID_TYPE, SCHEMA, Base


class UserSession(Base):
    """
    A login. Active until logout (is_active=false) or until expires_at passes;
    expiry is evaluated when the session is used, nothing sweeps it.
    """

    __tablename__ = "user_sessions"
    __table_args__ = (
        Index("idx_user_sessions_user_id", "user_id"),
        {"schema": SCHEMA},
    )

    id = Column(ID_TYPE, primary_key=True)
    user_id = Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id", ondelete="CASCADE"), nullable=False)
    session_token = Column(String(255), unique=True, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())

    user = relationship("User", back_populates="sessions")
