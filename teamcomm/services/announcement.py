from typing import List

from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.crud import announcement as announcement_crud
from teamcomm.models.announcement import Announcement
from teamcomm.services.base import ScopedService


class AnnouncementService(ScopedService[Announcement]):
    resource_name = "Announcement"

    def get_high_priority(self, db: Session, ctx: AuthContext, skip: int = 0, limit: int = 100) -> List[Announcement]:
        """HIGH and URGENT announcements in scope, newest first."""
        principal = self.policy.authorize(db, ctx)
        return self.crud.get_high_priority(db, scope=principal.scope, skip=skip, limit=limit)

    def archive_expired(self, db: Session, ctx: AuthContext) -> int:
        """
        Archive announcements in scope whose expiration date has passed.

        Returns:
            Number of announcements archived
        """
        principal = self.policy.authorize(db, ctx)
        count = self.crud.archive_expired(
            db,
            scope=principal.scope,
            actor_id=principal.user_id,
            now=self.policy.clock(),
        )
        logger.info(f"Archived {count} expired announcements, by={principal.user.username}")
        return count


# Create a singleton instance
announcement_service = AnnouncementService(announcement_crud)
