from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.orm import Session

from teamcomm.core.exceptions import AuthenticationError, ValidationError
from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext, Principal, ScopedAccessPolicy, access_policy
from teamcomm.core.security import utcnow, verify_password
from teamcomm.crud import user as user_crud
from teamcomm.crud import user_session as user_session_crud
from teamcomm.models.user import User
from teamcomm.models.user_session import UserSession

DEFAULT_SESSION_DURATION = timedelta(hours=8)


@dataclass(frozen=True)
class LoginResult:
    user: User
    session: UserSession


class AuthService:
    """
    Login, logout and password changes.

    Sessions are opaque tokens stored in user_sessions. Every successful
    login creates a new row; nothing here runs in the background.
    """

    def __init__(
        self,
        session_duration: timedelta = DEFAULT_SESSION_DURATION,
        policy: ScopedAccessPolicy = access_policy,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_duration = session_duration
        self.policy = policy
        self.clock = clock

    def authenticate(self, db: Session, username: str, password: str) -> LoginResult:
        """
        Verify credentials and open a session.

        Args:
            db: Database session
            username: Login name
            password: Plain text password

        Returns:
            LoginResult with the user and the new session

        Raises:
            AuthenticationError: On unknown user, wrong password or inactive account
        """
        user = user_crud.get_by_username(db, username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for username={username}")
            raise AuthenticationError("Invalid username or password")

        if not user.is_active:
            logger.warning(f"Login refused for inactive user {username}")
            raise AuthenticationError("Account is inactive")

        now = self.clock()
        user_crud.update_last_login(db, db_obj=user, now=now)
        session = user_session_crud.create(db, user_id=user.id, expires_at=now + self.session_duration)
        logger.info(f"User logged in: {username} (role={user.role.value})")
        return LoginResult(user=user, session=session)

    def current_principal(self, db: Session, ctx: AuthContext) -> Principal:
        return self.policy.authorize(db, ctx)

    def logout(self, db: Session, session_token: str) -> None:
        """End a session. Unknown or already ended sessions are ignored."""
        session = user_session_crud.get_by_token(db, session_token)
        if session is None:
            return
        user_session_crud.deactivate(db, db_obj=session)
        logger.info(f"Session ended for user_id={session.user_id}")

    def logout_all(self, db: Session, user_id: int) -> int:
        count = user_session_crud.deactivate_all(db, user_id=user_id)
        logger.info(f"Ended {count} sessions for user_id={user_id}")
        return count

    def change_password(self, db: Session, ctx: AuthContext, current_password: str, new_password: str) -> None:
        """
        Change the caller's password and end all of their sessions.

        Raises:
            AuthenticationError: If the session is not valid
            ValidationError: If the current password is wrong
        """
        principal = self.policy.authorize(db, ctx)
        user = principal.user
        if not verify_password(current_password, user.password_hash):
            raise ValidationError("Current password is incorrect", field="current_password")

        user_crud.set_password(db, db_obj=user, password=new_password, actor_id=user.id)
        self.logout_all(db, user.id)
        logger.info(f"Password changed for user {user.username}")

    def cleanup_expired_sessions(self, db: Session) -> int:
        """
        Mark sessions past their expiry as inactive.

        Expired sessions are already rejected on use; this only tidies the
        table and is never scheduled automatically.
        """
        count = user_session_crud.deactivate_expired(db, now=self.clock())
        logger.info(f"Cleaned up {count} expired sessions")
        return count
