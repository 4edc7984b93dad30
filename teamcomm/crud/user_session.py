from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from teamcomm.core.security import generate_session_token
from teamcomm.crud.base import commit_or_raise
from teamcomm.models.user_session import UserSession


class CRUDUserSession:
    def __init__(self):
        self.model = UserSession

    def get_by_token(self, db: Session, session_token: str) -> Optional[UserSession]:
        stmt = select(UserSession).where(UserSession.session_token == session_token)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def create(self, db: Session, *, user_id: int, expires_at: datetime) -> UserSession:
        """
        Create a new active session with a fresh random token.

        Every login gets its own row; earlier sessions are left as they are.
        """
        db_obj = UserSession(
            user_id=user_id,
            session_token=generate_session_token(),
            expires_at=expires_at,
            is_active=True,
        )
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj

    def deactivate(self, db: Session, *, db_obj: UserSession) -> UserSession:
        if db_obj.is_active:
            db_obj.is_active = False
            db.add(db_obj)
            commit_or_raise(db)
        return db_obj

    def deactivate_all(self, db: Session, *, user_id: int) -> int:
        """
        Deactivate every active session of a user.

        Returns:
            Number of sessions deactivated
        """
        stmt = (
            update(UserSession)
            .where(UserSession.user_id == user_id, UserSession.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = db.execute(stmt)
        commit_or_raise(db)
        return result.rowcount

    def deactivate_expired(self, db: Session, *, now: datetime) -> int:
        stmt = (
            update(UserSession)
            .where(UserSession.is_active.is_(True), UserSession.expires_at < now)
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        result = db.execute(stmt)
        commit_or_raise(db)
        return result.rowcount


user_session = CRUDUserSession()
