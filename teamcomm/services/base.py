from typing import Any, Dict, Generic, List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from teamcomm.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext, Principal, ScopedAccessPolicy, access_policy
from teamcomm.crud import user as user_crud
from teamcomm.crud.base import CRUDBase, ModelType


class ScopedService(Generic[ModelType]):
    """
    Service layer shared by every workspace-owned entity.

    Each public method first re-validates the caller's session through the
    access policy, then works only inside the resulting workspace scope.
    Reads of a record outside the scope look exactly like a missing record;
    writes to one are refused before anything is changed.
    """

    resource_name = "Record"

    def __init__(self, crud: CRUDBase, policy: ScopedAccessPolicy = access_policy):
        self.crud = crud
        self.policy = policy

    def _get_readable(self, db: Session, principal: Principal, record_id: int) -> ModelType:
        record = self.crud.get(db, record_id)
        if record is None or not principal.scope.permits(record.workspace_id):
            raise NotFoundError(resource=self.resource_name, resource_id=record_id)
        return record

    def _get_writable(self, db: Session, principal: Principal, record_id: int) -> ModelType:
        record = self.crud.get(db, record_id)
        if record is None:
            raise NotFoundError(resource=self.resource_name, resource_id=record_id)
        if not principal.can_write(record.workspace_id):
            logger.warning(
                f"Denied write on {self.resource_name} id={record_id} "
                f"(workspace={record.workspace_id}) by user {principal.user.username}"
            )
            raise AuthorizationError(f"{self.resource_name} belongs to another workspace")
        return record

    def _check_driver(self, db: Session, data: BaseModel | Dict[str, Any], workspace_id: int) -> None:
        """
        A driver must be an active user of the record's own workspace.

        Raises:
            ValidationError: If the driver is not an active user there
        """
        values = data if isinstance(data, dict) else data.model_dump(exclude_unset=True)
        driver_user_id = values.get("driver_user_id")
        if driver_user_id is None:
            return
        driver = user_crud.get(db, driver_user_id)
        if driver is None or not driver.is_active or driver.workspace_id != workspace_id:
            raise ValidationError(
                f"Driver {driver_user_id} is not an active user of workspace {workspace_id}",
                field="driver_user_id",
            )

    def list(
        self,
        db: Session,
        ctx: AuthContext,
        *,
        include_archived: bool = False,
        search: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        List records visible to the caller.

        Args:
            db: Database session
            ctx: Caller's session token and workspace selection
            include_archived: Also return archived records
            search: Free-text filter
            filters: Exact-match filters
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Records in the entity's natural order
        """
        principal = self.policy.authorize(db, ctx)
        return self.crud.get_multi(
            db,
            scope=principal.scope,
            include_archived=include_archived,
            filters=filters,
            search=search,
            skip=skip,
            limit=limit,
        )

    def get(self, db: Session, ctx: AuthContext, record_id: int) -> ModelType:
        """
        Get one record.

        Raises:
            NotFoundError: If it does not exist or is outside the caller's scope
        """
        principal = self.policy.authorize(db, ctx)
        return self._get_readable(db, principal, record_id)

    def create(self, db: Session, ctx: AuthContext, data: BaseModel) -> ModelType:
        """
        Create a record in the caller's workspace.

        The owning workspace comes from the policy; a workspace_id in the
        payload is only honoured for a super admin viewing all workspaces.
        """
        principal = self.policy.authorize(db, ctx)
        workspace_id = self.policy.workspace_for_create(db, principal, getattr(data, "workspace_id", None))
        self._check_driver(db, data, workspace_id)
        record = self.crud.create(db, obj_in=data, workspace_id=workspace_id, actor_id=principal.user_id)
        logger.info(
            f"{self.resource_name} created: id={record.id}, workspace_id={workspace_id}, "
            f"by={principal.user.username}"
        )
        return record

    def update(self, db: Session, ctx: AuthContext, record_id: int, data: BaseModel | Dict[str, Any]) -> ModelType:
        """
        Update a record.

        Raises:
            NotFoundError: If the record does not exist
            AuthorizationError: If the record is outside the caller's workspace (super admins excepted)
        """
        principal = self.policy.authorize(db, ctx)
        record = self._get_writable(db, principal, record_id)
        self._check_driver(db, data, record.workspace_id)
        record = self.crud.update(db, db_obj=record, obj_in=data, actor_id=principal.user_id)
        logger.info(f"{self.resource_name} updated: id={record_id}, by={principal.user.username}")
        return record

    def archive(self, db: Session, ctx: AuthContext, record_id: int) -> ModelType:
        """Soft-delete a record. Archiving an archived record is a no-op."""
        return self._set_archived(db, ctx, record_id, True)

    def unarchive(self, db: Session, ctx: AuthContext, record_id: int) -> ModelType:
        return self._set_archived(db, ctx, record_id, False)

    def _set_archived(self, db: Session, ctx: AuthContext, record_id: int, archived: bool) -> ModelType:
        principal = self.policy.authorize(db, ctx)
        record = self._get_writable(db, principal, record_id)
        record = self.crud.set_archived(db, db_obj=record, archived=archived, actor_id=principal.user_id)
        logger.info(
            f"{self.resource_name} {'archived' if archived else 'restored'}: id={record_id}, "
            f"by={principal.user.username}"
        )
        return record
