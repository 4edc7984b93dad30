from typing import List

from sqlalchemy.orm import Session

from teamcomm.core.scope import AuthContext
from teamcomm.crud import target_date as target_date_crud
from teamcomm.models.enums import TargetDateStatus
from teamcomm.models.target_date import TargetDate
from teamcomm.services.base import ScopedService


class TargetDateService(ScopedService[TargetDate]):
    resource_name = "Target date"

    def update_status(self, db: Session, ctx: AuthContext, record_id: int, status: TargetDateStatus) -> TargetDate:
        return self.update(db, ctx, record_id, {"status": status})

    def get_upcoming(self, db: Session, ctx: AuthContext, limit: int = 100) -> List[TargetDate]:
        principal = self.policy.authorize(db, ctx)
        return self.crud.get_upcoming(db, scope=principal.scope, now=self.policy.clock(), limit=limit)

    def get_overdue(self, db: Session, ctx: AuthContext, limit: int = 100) -> List[TargetDate]:
        """Past target dates that are not completed."""
        principal = self.policy.authorize(db, ctx)
        return self.crud.get_overdue(db, scope=principal.scope, now=self.policy.clock(), limit=limit)

    def get_due_soon(self, db: Session, ctx: AuthContext, days: int = 7, limit: int = 100) -> List[TargetDate]:
        """Open target dates falling within the next `days` days."""
        principal = self.policy.authorize(db, ctx)
        return self.crud.get_due_soon(db, scope=principal.scope, now=self.policy.clock(), days=days, limit=limit)


target_date_service = TargetDateService(target_date_crud)
