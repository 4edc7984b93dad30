from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context
from teamcomm.models.enums import Priority
from teamcomm.schemas.announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate
from teamcomm.schemas.common import CountResponse
from teamcomm.services.announcement import announcement_service

router = APIRouter()


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
def create_announcement(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """
    Create an announcement in the caller's workspace.

    A super admin viewing all workspaces must pass workspace_id.
    """
    try:
        logger.info(f"Creating announcement: title={data.title}")
        return announcement_service.create(db, ctx, data)
    except Exception as e:
        logger.error(f"Error creating announcement: {type(e).__name__}: {str(e)}")
        raise


@router.get("", response_model=List[AnnouncementResponse])
def get_announcements(
    include_archived: bool = False,
    search: Optional[str] = None,
    priority: Optional[Priority] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """
    List announcements in scope, newest first.

    Args:
        include_archived: Also return archived announcements
        search: Matches title and content
        priority: Exact priority filter
        skip: Number of records to skip (default: 0)
        limit: Maximum number of records to return (default: 100)
    """
    return announcement_service.list(
        db,
        ctx,
        include_archived=include_archived,
        search=search,
        filters={"priority": priority},
        skip=skip,
        limit=limit,
    )


@router.get("/high-priority", response_model=List[AnnouncementResponse])
def get_high_priority_announcements(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return announcement_service.get_high_priority(db, ctx)


@router.post("/archive-expired", response_model=CountResponse)
def archive_expired_announcements(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return CountResponse(count=announcement_service.archive_expired(db, ctx))


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
def get_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return announcement_service.get(db, ctx, announcement_id)


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return announcement_service.update(db, ctx, announcement_id, data)


@router.post("/{announcement_id}/archive", response_model=AnnouncementResponse)
def archive_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return announcement_service.archive(db, ctx, announcement_id)


@router.post("/{announcement_id}/unarchive", response_model=AnnouncementResponse)
def unarchive_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return announcement_service.unarchive(db, ctx, announcement_id)
