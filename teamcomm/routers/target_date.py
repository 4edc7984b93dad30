from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context
from teamcomm.models.enums import TargetDateStatus
from teamcomm.schemas.target_date import (
    TargetDateCreate,
    TargetDateResponse,
    TargetDateStatusUpdate,
    TargetDateUpdate,
)
from teamcomm.services.target_date import target_date_service

router = APIRouter()


@router.post("", response_model=TargetDateResponse, status_code=status.HTTP_201_CREATED)
def create_target_date(
    data: TargetDateCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    try:
        logger.info(f"Creating target date: project={data.project_name}, task={data.task_name}")
        return target_date_service.create(db, ctx, data)
    except Exception as e:
        logger.error(f"Error creating target date: {type(e).__name__}: {str(e)}")
        raise


@router.get("", response_model=List[TargetDateResponse])
def get_target_dates(
    include_archived: bool = False,
    search: Optional[str] = None,
    status_filter: Optional[TargetDateStatus] = Query(default=None, alias="status"),
    project_name: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """List target dates in scope, soonest first."""
    return target_date_service.list(
        db,
        ctx,
        include_archived=include_archived,
        search=search,
        filters={"status": status_filter, "project_name": project_name},
        skip=skip,
        limit=limit,
    )


@router.get("/upcoming", response_model=List[TargetDateResponse])
def get_upcoming_target_dates(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.get_upcoming(db, ctx)


@router.get("/overdue", response_model=List[TargetDateResponse])
def get_overdue_target_dates(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.get_overdue(db, ctx)


@router.get("/due-soon", response_model=List[TargetDateResponse])
def get_target_dates_due_soon(
    days: int = Query(default=7, ge=0, le=365),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.get_due_soon(db, ctx, days=days)


@router.get("/{target_date_id}", response_model=TargetDateResponse)
def get_target_date(
    target_date_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.get(db, ctx, target_date_id)


@router.put("/{target_date_id}", response_model=TargetDateResponse)
def update_target_date(
    target_date_id: int,
    data: TargetDateUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.update(db, ctx, target_date_id, data)


@router.patch("/{target_date_id}/status", response_model=TargetDateResponse)
def update_target_date_status(
    target_date_id: int,
    data: TargetDateStatusUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.update_status(db, ctx, target_date_id, data.status)


@router.post("/{target_date_id}/archive", response_model=TargetDateResponse)
def archive_target_date(
    target_date_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.archive(db, ctx, target_date_id)


@router.post("/{target_date_id}/unarchive", response_model=TargetDateResponse)
def unarchive_target_date(
    target_date_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return target_date_service.unarchive(db, ctx, target_date_id)
