from datetime import datetime, timedelta
from typing import List

from sqlalchemy.orm import Session

from teamcomm.crud.base import CRUDBase
from teamcomm.models.enums import TargetDateStatus
from teamcomm.models.target_date import TargetDate
from teamcomm.schemas.target_date import TargetDateCreate, TargetDateUpdate


class CRUDTargetDate(CRUDBase[TargetDate, TargetDateCreate, TargetDateUpdate]):
    def get_upcoming(self, db: Session, *, scope, now: datetime, limit: int = 100) -> List[TargetDate]:
        return self.get_multi(db, scope=scope, clauses=[TargetDate.target_date >= now], limit=limit)

    def get_overdue(self, db: Session, *, scope, now: datetime, limit: int = 100) -> List[TargetDate]:
        return self.get_multi(
            db,
            scope=scope,
            clauses=[
                TargetDate.target_date < now,
                TargetDate.status != TargetDateStatus.COMPLETED,
            ],
            limit=limit,
        )

    def get_due_soon(self, db: Session, *, scope, now: datetime, days: int, limit: int = 100) -> List[TargetDate]:
        return self.get_multi(
            db,
            scope=scope,
            clauses=[
                TargetDate.target_date >= now,
                TargetDate.target_date <= now + timedelta(days=days),
                TargetDate.status != TargetDateStatus.COMPLETED,
            ],
            limit=limit,
        )


# Soonest first, unlike the other entities
target_date = CRUDTargetDate(
    TargetDate,
    order_by=[TargetDate.target_date.asc(), TargetDate.id.asc()],
    search_fields=["project_name", "task_name", "documentation_url"],
)
