from sqlalchemy import or_
from sqlalchemy.sql import ColumnElement

from teamcomm.crud.base import LIKE_ESCAPE, CRUDBase, contains_pattern
from teamcomm.models.deployment import Deployment
from teamcomm.models.enums import DeploymentStatus, Environment
from teamcomm.models.user import User
from teamcomm.schemas.deployment import DeploymentCreate, DeploymentUpdate


def _members_matching(enum_cls, term: str):
    term = term.lower()
    return [member for member in enum_cls if term in member.display_name.lower()]


class CRUDDeployment(CRUDBase[Deployment, DeploymentCreate, DeploymentUpdate]):
    def search_clause(self, term: str) -> ColumnElement:
        # Also matches environment/status labels and the driver's name
        clause = super().search_clause(term)
        extra = [Deployment.driver.has(User.full_name.ilike(contains_pattern(term), escape=LIKE_ESCAPE))]
        environments = _members_matching(Environment, term)
        if environments:
            extra.append(Deployment.environment.in_(environments))
        statuses = _members_matching(DeploymentStatus, term)
        if statuses:
            extra.append(Deployment.status.in_(statuses))
        return or_(clause, *extra)


deployment = CRUDDeployment(
    Deployment,
    order_by=[Deployment.deployment_datetime.desc(), Deployment.id.desc()],
    search_fields=["release_name", "version", "release_notes", "ticket_number"],
)
