from typing import List, Optional

from sqlalchemy.orm import Session

from teamcomm.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext, Principal, ScopedAccessPolicy, access_policy
from teamcomm.crud import user as user_crud
from teamcomm.crud import user_session as user_session_crud
from teamcomm.crud import workspace as workspace_crud
from teamcomm.models.enums import UserRole
from teamcomm.models.user import User
from teamcomm.schemas.user import UserCreate, UserUpdate


class UserService:
    """
    User administration.

    Super admins manage everyone. Workspace admins manage only regular
    users of their own workspace and can only create regular users there.
    """

    def __init__(self, policy: ScopedAccessPolicy = access_policy):
        self.crud = user_crud
        self.policy = policy

    def _check_workspace(self, db: Session, role: UserRole, workspace_id: Optional[int]) -> None:
        if role == UserRole.SUPER_ADMIN:
            if workspace_id is not None:
                raise ValidationError("Super admins cannot belong to a workspace", field="workspace_id")
            return
        if workspace_id is None:
            raise ValidationError(f"A {role.display_name} must belong to a workspace", field="workspace_id")
        workspace = workspace_crud.get(db, workspace_id)
        if workspace is None or not workspace.is_active:
            raise ValidationError(f"Workspace {workspace_id} does not exist", field="workspace_id")

    def can_manage(self, principal: Principal, target: User) -> bool:
        if principal.role == UserRole.SUPER_ADMIN:
            return True
        if principal.role == UserRole.ADMIN:
            return target.role == UserRole.USER and target.workspace_id == principal.user.workspace_id
        return False

    def _get_manageable(self, db: Session, principal: Principal, user_id: int) -> User:
        target = self.crud.get(db, user_id)
        if target is None:
            raise NotFoundError(resource="User", resource_id=user_id)
        if not self.can_manage(principal, target):
            raise AuthorizationError(f"You cannot manage user {target.username}")
        return target

    def list_manageable(self, db: Session, ctx: AuthContext) -> List[User]:
        principal = self.policy.authorize(db, ctx)
        if principal.role == UserRole.SUPER_ADMIN:
            return self.crud.get_multi(db, workspace_id=principal.scope.workspace_id)
        if principal.role == UserRole.ADMIN:
            return self.crud.get_multi(db, workspace_id=principal.user.workspace_id)
        return []

    def create_user(self, db: Session, ctx: AuthContext, data: UserCreate) -> User:
        """
        Create a user.

        Args:
            db: Database session
            ctx: Caller's session token and workspace selection
            data: New user details

        Returns:
            Created User

        Raises:
            AuthorizationError: If the caller may not create this kind of user
            ValidationError: If the role and workspace do not fit together
            ConflictError: If the username is taken
        """
        principal = self.policy.authorize(db, ctx)
        self.policy.require_role(principal, UserRole.SUPER_ADMIN, UserRole.ADMIN)

        workspace_id = data.workspace_id
        if principal.role == UserRole.ADMIN:
            if data.role != UserRole.USER:
                raise AuthorizationError("Workspace admins can only create regular users")
            if workspace_id is not None and workspace_id != principal.user.workspace_id:
                raise AuthorizationError("Workspace admins can only add users to their own workspace")
            workspace_id = principal.user.workspace_id

        self._check_workspace(db, data.role, workspace_id)
        if self.crud.get_by_username(db, data.username) is not None:
            raise ConflictError(f"Username '{data.username}' already exists", field="username")

        user = self.crud.create(
            db,
            username=data.username,
            password=data.password,
            full_name=data.full_name,
            email=data.email,
            role=data.role,
            workspace_id=workspace_id,
            actor_id=principal.user_id,
        )
        logger.info(f"User created: {user.username} (role={user.role.value}, workspace_id={workspace_id})")
        return user

    def update_user(self, db: Session, ctx: AuthContext, user_id: int, data: UserUpdate) -> User:
        principal = self.policy.authorize(db, ctx)
        target = self._get_manageable(db, principal, user_id)
        update_data = data.model_dump(exclude_unset=True)
        # An explicit null leaves these columns unchanged
        for field in ("full_name", "role", "is_active"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        if principal.role == UserRole.ADMIN:
            if update_data.get("role", UserRole.USER) != UserRole.USER:
                raise AuthorizationError("Workspace admins cannot change user roles")
            if update_data.get("workspace_id", target.workspace_id) != target.workspace_id:
                raise AuthorizationError("Workspace admins cannot move users to another workspace")

        if update_data.get("is_active") is False and target.id == principal.user_id:
            raise ValidationError("You cannot deactivate your own account", field="is_active")

        role = update_data.get("role", target.role)
        workspace_id = update_data.get("workspace_id", target.workspace_id)
        if "role" in update_data or "workspace_id" in update_data:
            self._check_workspace(db, role, workspace_id)

        user = self.crud.update(db, db_obj=target, obj_in=update_data, actor_id=principal.user_id)
        if update_data.get("is_active") is False:
            user_session_crud.deactivate_all(db, user_id=user.id)
        logger.info(f"User updated: {user.username}")
        return user

    def deactivate_user(self, db: Session, ctx: AuthContext, user_id: int) -> User:
        """Deactivate a user and end their sessions. Nobody can deactivate themselves."""
        principal = self.policy.authorize(db, ctx)
        if user_id == principal.user_id:
            raise ValidationError("You cannot deactivate your own account", field="is_active")
        target = self._get_manageable(db, principal, user_id)

        user = self.crud.update(db, db_obj=target, obj_in={"is_active": False}, actor_id=principal.user_id)
        user_session_crud.deactivate_all(db, user_id=user.id)
        logger.info(f"User deactivated: {user.username}")
        return user

    def reset_password(self, db: Session, ctx: AuthContext, user_id: int, new_password: str) -> None:
        """Set a new password for a managed user and end their sessions."""
        principal = self.policy.authorize(db, ctx)
        target = self._get_manageable(db, principal, user_id)
        self.crud.set_password(db, db_obj=target, password=new_password, actor_id=principal.user_id)
        user_session_crud.deactivate_all(db, user_id=target.id)
        logger.info(f"Password reset for user {target.username} by {principal.user.username}")


user_service = UserService()
