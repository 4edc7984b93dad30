from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamcomm.crud.base import commit_or_raise
from teamcomm.models.workspace import Workspace


class CRUDWorkspace:
    def __init__(self):
        self.model = Workspace

    def get(self, db: Session, workspace_id: int) -> Optional[Workspace]:
        return db.get(Workspace, workspace_id)

    def get_by_name(self, db: Session, name: str) -> Optional[Workspace]:
        stmt = select(Workspace).where(Workspace.name == name)
        result = db.execute(stmt)
        return result.scalar_one_or_none()

    def get_multi(self, db: Session, *, active_only: bool = True) -> List[Workspace]:
        stmt = select(Workspace)
        if active_only:
            stmt = stmt.where(Workspace.is_active.is_(True))
        stmt = stmt.order_by(Workspace.name)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def create(
        self,
        db: Session,
        *,
        name: str,
        description: Optional[str],
        actor_id: Optional[int]
    ) -> Workspace:
        db_obj = Workspace(
            name=name,
            description=description,
            is_active=True,
            created_by=actor_id,
            updated_by=actor_id,
        )
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: Workspace,
        obj_in: Dict[str, Any],
        actor_id: Optional[int]
    ) -> Workspace:
        for field, value in obj_in.items():
            setattr(db_obj, field, value)
        db_obj.updated_by = actor_id
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj


workspace = CRUDWorkspace()
