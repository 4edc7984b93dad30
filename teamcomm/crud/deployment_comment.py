from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from teamcomm.crud.base import commit_or_raise
from teamcomm.models.deployment import DeploymentComment


class CRUDDeploymentComment:
    """Append-only comments on a deployment."""

    def __init__(self):
        self.model = DeploymentComment

    def get_by_deployment(self, db: Session, deployment_id: int) -> List[DeploymentComment]:
        stmt = (
            select(DeploymentComment)
            .where(DeploymentComment.deployment_id == deployment_id)
            .order_by(DeploymentComment.created_at.desc(), DeploymentComment.id.desc())
        )
        result = db.execute(stmt)
        return list(result.scalars().all())

    def count_by_deployment(self, db: Session, deployment_id: int) -> int:
        stmt = select(func.count(DeploymentComment.id)).where(DeploymentComment.deployment_id == deployment_id)
        return db.execute(stmt).scalar_one()

    def create(
        self,
        db: Session,
        *,
        deployment_id: int,
        comment_text: str,
        actor_id: Optional[int]
    ) -> DeploymentComment:
        db_obj = DeploymentComment(
            deployment_id=deployment_id,
            comment_text=comment_text,
            created_by=actor_id,
        )
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj


deployment_comment = CRUDDeploymentComment()
