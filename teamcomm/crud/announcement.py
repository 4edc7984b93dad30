from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from teamcomm.crud.base import CRUDBase, commit_or_raise
from teamcomm.models.announcement import Announcement
from teamcomm.models.enums import Priority
from teamcomm.schemas.announcement import AnnouncementCreate, AnnouncementUpdate

HIGH_PRIORITIES = (Priority.HIGH, Priority.URGENT)


class CRUDAnnouncement(CRUDBase[Announcement, AnnouncementCreate, AnnouncementUpdate]):
    def get_high_priority(self, db: Session, *, scope, skip: int = 0, limit: int = 100) -> List[Announcement]:
        return self.get_multi(
            db,
            scope=scope,
            clauses=[Announcement.priority.in_(HIGH_PRIORITIES)],
            skip=skip,
            limit=limit,
        )

    def archive_expired(self, db: Session, *, scope, actor_id: Optional[int], now: datetime) -> int:
        """
        Archive every in-scope announcement whose expiration date has passed.

        Args:
            db: Database session
            scope: Workspace filter of the caller
            actor_id: User recorded as updated_by
            now: Reference time

        Returns:
            Number of announcements archived
        """
        stmt = self.scoped_select(scope=scope).where(
            Announcement.expiration_date.is_not(None),
            Announcement.expiration_date < now,
        )
        expired = list(db.execute(stmt).scalars().all())
        for announcement in expired:
            announcement.is_archived = True
            announcement.updated_by = actor_id
            announcement.updated_at = now
        if expired:
            commit_or_raise(db)
        return len(expired)


announcement = CRUDAnnouncement(
    Announcement,
    order_by=[Announcement.created_at.desc(), Announcement.id.desc()],
    search_fields=["title", "content"],
)
