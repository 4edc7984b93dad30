"""
Workspace scoping and session checks for every data operation.

Callers pass an AuthContext (session token plus optional workspace
selection) into each service call. The policy resolves it to a Principal
whose WorkspaceFilter is the only thing list queries and write checks look
at, so the role rules live in one place:

* SUPER_ADMIN has no workspace of its own. No selection ("ALL") means no
  filter; a selected workspace filters exactly like a member of it.
* ADMIN and USER always see their own workspace. A selection sent by the
  client is ignored.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from teamcomm.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from teamcomm.core.logging_config import logger
from teamcomm.core.security import as_utc, utcnow
from teamcomm.crud.user_session import user_session as user_session_crud
from teamcomm.crud.workspace import workspace as workspace_crud
from teamcomm.models.enums import UserRole
from teamcomm.models.user import User
from teamcomm.models.user_session import UserSession


@dataclass(frozen=True)
class AuthContext:
    """
    What a caller presents with every operation.

    Args:
        session_token: Opaque token returned by login
        selected_workspace_id: Workspace chosen in the UI, None for "ALL"
    """

    session_token: Optional[str]
    selected_workspace_id: Optional[int] = None


@dataclass(frozen=True)
class WorkspaceFilter:
    """Workspace restriction for queries; workspace_id None means unrestricted."""

    workspace_id: Optional[int] = None

    @property
    def is_all(self) -> bool:
        return self.workspace_id is None

    def apply(self, stmt: Select, model) -> Select:
        if self.is_all:
            return stmt
        return stmt.where(model.workspace_id == self.workspace_id)

    def permits(self, workspace_id: Optional[int]) -> bool:
        return self.is_all or workspace_id == self.workspace_id


class SessionState(str, enum.Enum):
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    LOGGED_OUT = "LOGGED_OUT"


def session_state(session: UserSession, now: datetime) -> SessionState:
    if not session.is_active:
        return SessionState.LOGGED_OUT
    if now > as_utc(session.expires_at):
        return SessionState.EXPIRED
    return SessionState.ACTIVE


def effective_scope(user: User, selected_workspace_id: Optional[int] = None) -> WorkspaceFilter:
    """
    Resolve the workspace filter for a user and the selection they sent.

    Args:
        user: Authenticated user
        selected_workspace_id: Workspace picked by the client, None for "ALL"

    Returns:
        WorkspaceFilter

    Raises:
        AuthorizationError: If a non-super-admin has no workspace
    """
    if user.is_super_admin:
        return WorkspaceFilter(selected_workspace_id)

    if user.workspace_id is None:
        raise AuthorizationError(f"User {user.username} is not assigned to a workspace")

    if selected_workspace_id is not None and selected_workspace_id != user.workspace_id:
        logger.debug(
            f"Ignoring workspace selection {selected_workspace_id} for user {user.username}"
        )
    return WorkspaceFilter(user.workspace_id)


@dataclass(frozen=True)
class Principal:
    user: User
    session: UserSession
    scope: WorkspaceFilter

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return self.user.role

    def can_write(self, workspace_id: Optional[int]) -> bool:
        """A super admin may change records in any workspace, whatever is selected."""
        return self.user.is_super_admin or self.scope.permits(workspace_id)


class ScopedAccessPolicy:
    """
    Validates sessions and resolves workspace scope.

    Args:
        clock: Returns the current aware datetime; tests substitute a fixed one
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock

    def authorize(self, db: Session, ctx: AuthContext) -> Principal:
        """
        Re-validate the session and compute the caller's scope.

        Nothing is written: an expired session stays as it is in the database.

        Args:
            db: Database session
            ctx: Token and workspace selection of the caller

        Returns:
            Principal with the user, session and workspace filter

        Raises:
            AuthenticationError: If the session is unknown, logged out or
                expired, or the user is inactive
        """
        if not ctx.session_token:
            raise AuthenticationError("Not authenticated")

        session = user_session_crud.get_by_token(db, ctx.session_token)
        if session is None:
            raise AuthenticationError("Invalid session")

        state = session_state(session, self.clock())
        if state is SessionState.LOGGED_OUT:
            raise AuthenticationError("Session has ended, please log in again")
        if state is SessionState.EXPIRED:
            logger.info(f"Rejected expired session for user_id={session.user_id}")
            raise AuthenticationError("Session expired, please log in again")

        user = session.user
        if user is None or not user.is_active:
            raise AuthenticationError("Account is inactive")

        return Principal(user=user, session=session, scope=effective_scope(user, ctx.selected_workspace_id))

    def workspace_for_create(self, db: Session, principal: Principal, requested_id: Optional[int]) -> int:
        """
        Decide which workspace a new record belongs to.

        Scoped callers always create in their scope's workspace, whatever
        they requested. A super admin viewing all workspaces must name one.

        Raises:
            ValidationError: If no workspace was given or it does not exist
        """
        if principal.scope.is_all:
            if requested_id is None:
                raise ValidationError(
                    "Select a workspace before creating records", field="workspace_id"
                )
            workspace_id = requested_id
        else:
            workspace_id = principal.scope.workspace_id

        workspace = workspace_crud.get(db, workspace_id)
        if workspace is None or not workspace.is_active:
            raise ValidationError(f"Workspace {workspace_id} does not exist", field="workspace_id")
        return workspace_id

    def require_role(self, principal: Principal, *roles: UserRole) -> None:
        if principal.role not in roles:
            logger.warning(
                f"Denied: user {principal.user.username} with role {principal.role.value} "
                f"needs one of {[r.value for r in roles]}"
            )
            raise AuthorizationError("Insufficient privileges for this operation")


# Create a singleton instance
access_policy = ScopedAccessPolicy()
