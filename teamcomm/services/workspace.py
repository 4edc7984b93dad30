from typing import List

from sqlalchemy.orm import Session

from teamcomm.core.exceptions import ConflictError, NotFoundError, ValidationError
from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext, Principal, ScopedAccessPolicy, access_policy
from teamcomm.crud import user as user_crud
from teamcomm.crud import workspace as workspace_crud
from teamcomm.models.enums import UserRole
from teamcomm.models.user import User
from teamcomm.models.workspace import Workspace
from teamcomm.schemas.workspace import WorkspaceCreate, WorkspaceUpdate


class WorkspaceService:
    """
    Workspace administration.

    Only super admins create and deactivate workspaces. A workspace admin
    may rename or describe their own workspace.
    """

    def __init__(self, policy: ScopedAccessPolicy = access_policy):
        self.crud = workspace_crud
        self.policy = policy

    def _can_view(self, principal: Principal, workspace: Workspace) -> bool:
        if principal.role == UserRole.SUPER_ADMIN:
            return True
        return principal.role == UserRole.ADMIN and principal.user.workspace_id == workspace.id

    def list_accessible(self, db: Session, ctx: AuthContext) -> List[Workspace]:
        """
        Workspaces the caller may administer.

        Returns:
            All active workspaces for a super admin, the admin's own
            workspace for an admin, nothing for a regular user
        """
        principal = self.policy.authorize(db, ctx)
        if principal.role == UserRole.SUPER_ADMIN:
            return self.crud.get_multi(db)
        if principal.role == UserRole.ADMIN:
            workspace = self.crud.get(db, principal.user.workspace_id)
            return [workspace] if workspace is not None else []
        return []

    def _get_visible(self, db: Session, principal: Principal, workspace_id: int) -> Workspace:
        workspace = self.crud.get(db, workspace_id)
        if workspace is None or not self._can_view(principal, workspace):
            raise NotFoundError(resource="Workspace", resource_id=workspace_id)
        return workspace

    def get(self, db: Session, ctx: AuthContext, workspace_id: int) -> Workspace:
        principal = self.policy.authorize(db, ctx)
        return self._get_visible(db, principal, workspace_id)

    def create(self, db: Session, ctx: AuthContext, data: WorkspaceCreate) -> Workspace:
        principal = self.policy.authorize(db, ctx)
        self.policy.require_role(principal, UserRole.SUPER_ADMIN)

        name = data.name.strip()
        if self.crud.get_by_name(db, name) is not None:
            raise ConflictError(f"Workspace '{name}' already exists", field="name")

        workspace = self.crud.create(db, name=name, description=data.description, actor_id=principal.user_id)
        logger.info(f"Workspace created: id={workspace.id}, name={name}")
        return workspace

    def update(self, db: Session, ctx: AuthContext, workspace_id: int, data: WorkspaceUpdate) -> Workspace:
        principal = self.policy.authorize(db, ctx)
        self.policy.require_role(principal, UserRole.SUPER_ADMIN, UserRole.ADMIN)
        workspace = self._get_visible(db, principal, workspace_id)

        update_data = data.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is not None:
            name = update_data["name"].strip()
            existing = self.crud.get_by_name(db, name)
            if existing is not None and existing.id != workspace.id:
                raise ConflictError(f"Workspace '{name}' already exists", field="name")
            update_data["name"] = name

        workspace = self.crud.update(db, db_obj=workspace, obj_in=update_data, actor_id=principal.user_id)
        logger.info(f"Workspace updated: id={workspace_id}")
        return workspace

    def deactivate(self, db: Session, ctx: AuthContext, workspace_id: int) -> Workspace:
        """
        Deactivate a workspace. Records are kept.

        Raises:
            ValidationError: If active users still belong to the workspace
        """
        principal = self.policy.authorize(db, ctx)
        self.policy.require_role(principal, UserRole.SUPER_ADMIN)
        workspace = self.crud.get(db, workspace_id)
        if workspace is None:
            raise NotFoundError(resource="Workspace", resource_id=workspace_id)

        remaining = user_crud.count_active_in_workspace(db, workspace_id)
        if remaining:
            raise ValidationError(
                f"Workspace still has {remaining} active users; move or deactivate them first",
                field="workspace_id",
            )

        workspace = self.crud.update(db, db_obj=workspace, obj_in={"is_active": False}, actor_id=principal.user_id)
        logger.info(f"Workspace deactivated: id={workspace_id}")
        return workspace

    def list_users(self, db: Session, ctx: AuthContext, workspace_id: int) -> List[User]:
        principal = self.policy.authorize(db, ctx)
        self._get_visible(db, principal, workspace_id)
        return user_crud.get_multi(db, workspace_id=workspace_id)


workspace_service = WorkspaceService()
