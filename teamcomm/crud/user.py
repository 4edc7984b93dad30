from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from teamcomm.core.security import get_password_hash
from teamcomm.crud.base import commit_or_raise
from teamcomm.models.enums import UserRole
from teamcomm.models.user import User


class CRUDUser:
    """
    CRUD operations for User model.

    Users are not workspace-scoped records in the CRUDBase sense: a super
    admin has no workspace and login looks users up globally.
    """

    def __init__(self):
        self.model = User

    def get(self, db: Session, user_id: int) -> Optional[User]:
        return db.get(User, user_id)

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        """
        Retrieve user by username.

        Args:
            db: Database session
            username: Login name

        Returns:
            User instance or None if not found
        """
        stmt = select(User).where(User.username == username)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get_multi(
        self,
        db: Session,
        *,
        workspace_id: Optional[int] = None,
        active_only: bool = False,
        skip: int = 0,
        limit: int = 100
    ) -> List[User]:
        stmt = select(User)
        if workspace_id is not None:
            stmt = stmt.where(User.workspace_id == workspace_id)
        if active_only:
            stmt = stmt.where(User.is_active.is_(True))
        stmt = stmt.order_by(User.full_name, User.id).offset(skip).limit(limit)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def count_active_in_workspace(self, db: Session, workspace_id: int) -> int:
        stmt = select(func.count(User.id)).where(
            User.workspace_id == workspace_id,
            User.is_active.is_(True),
        )
        return db.execute(stmt).scalar_one()

    def create(
        self,
        db: Session,
        *,
        username: str,
        password: str,
        full_name: str,
        role: UserRole,
        workspace_id: Optional[int],
        email: Optional[str] = None,
        actor_id: Optional[int] = None,
        is_active: bool = True
    ) -> User:
        """
        Create a new user with hashed password.

        Args:
            db: Database session
            username: Unique login name
            password: Plain text password (will be hashed)
            full_name: Display name
            role: User role
            workspace_id: Workspace, None for super admins
            email: Optional unique email
            actor_id: User performing the creation
            is_active: Whether user is active

        Returns:
            Created User instance

        Raises:
            ConflictError: If the username or email is taken
        """
        db_user = User(
            username=username,
            password_hash=get_password_hash(password),
            full_name=full_name,
            email=email,
            role=role,
            workspace_id=workspace_id,
            is_active=is_active,
            created_by=actor_id,
            updated_by=actor_id,
        )
        db.add(db_user)
        commit_or_raise(db)
        db.refresh(db_user)
        return db_user

    def update(
        self,
        db: Session,
        *,
        db_obj: User,
        obj_in: Dict[str, Any],
        actor_id: Optional[int]
    ) -> User:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        db_obj.updated_by = actor_id
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj

    def set_password(self, db: Session, *, db_obj: User, password: str, actor_id: Optional[int]) -> User:
        return self.update(db, db_obj=db_obj, obj_in={"password_hash": get_password_hash(password)}, actor_id=actor_id)

    def update_last_login(self, db: Session, *, db_obj: User, now: datetime) -> None:
        db_obj.last_login = now
        db.add(db_obj)
        commit_or_raise(db)


# Create singleton instance
user = CRUDUser()
