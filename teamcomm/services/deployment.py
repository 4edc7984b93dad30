from typing import List

from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.crud import deployment as deployment_crud
from teamcomm.crud import deployment_comment as deployment_comment_crud
from teamcomm.models.deployment import Deployment, DeploymentComment
from teamcomm.models.enums import DeploymentStatus
from teamcomm.services.base import ScopedService


class DeploymentService(ScopedService[Deployment]):
    resource_name = "Deployment"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.comments = deployment_comment_crud

    def update_status(self, db: Session, ctx: AuthContext, record_id: int, status: DeploymentStatus) -> Deployment:
        return self.update(db, ctx, record_id, {"status": status})

    def add_comment(self, db: Session, ctx: AuthContext, deployment_id: int, comment_text: str) -> DeploymentComment:
        """
        Add a comment to a deployment.

        Commenting counts as a write on the deployment, so a deployment in
        another workspace is refused.
        """
        principal = self.policy.authorize(db, ctx)
        deployment = self._get_writable(db, principal, deployment_id)
        comment = self.comments.create(
            db,
            deployment_id=deployment.id,
            comment_text=comment_text,
            actor_id=principal.user_id,
        )
        logger.info(f"Comment added to deployment id={deployment_id} by={principal.user.username}")
        return comment

    def list_comments(self, db: Session, ctx: AuthContext, deployment_id: int) -> List[DeploymentComment]:
        principal = self.policy.authorize(db, ctx)
        self._get_readable(db, principal, deployment_id)
        return self.comments.get_by_deployment(db, deployment_id)

    def count_comments(self, db: Session, ctx: AuthContext, deployment_id: int) -> int:
        principal = self.policy.authorize(db, ctx)
        self._get_readable(db, principal, deployment_id)
        return self.comments.count_by_deployment(db, deployment_id)


deployment_service = DeploymentService(deployment_crud)
