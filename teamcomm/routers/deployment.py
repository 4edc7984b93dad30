from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context
from teamcomm.models.enums import DeploymentStatus, Environment
from teamcomm.schemas.common import CountResponse
from teamcomm.schemas.deployment import (
    DeploymentCommentCreate,
    DeploymentCommentResponse,
    DeploymentCreate,
    DeploymentResponse,
    DeploymentStatusUpdate,
    DeploymentUpdate,
)
from teamcomm.services.deployment import deployment_service

router = APIRouter()


@router.post("", response_model=DeploymentResponse, status_code=status.HTTP_201_CREATED)
def create_deployment(
    data: DeploymentCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    try:
        logger.info(f"Creating deployment: release={data.release_name}, version={data.version}")
        result = deployment_service.create(db, ctx, data)
        logger.info(f"Deployment created successfully: id={result.id}")
        return result
    except Exception as e:
        logger.error(f"Error creating deployment: {type(e).__name__}: {str(e)}")
        raise


@router.get("", response_model=List[DeploymentResponse])
def get_deployments(
    include_archived: bool = False,
    search: Optional[str] = None,
    environment: Optional[Environment] = None,
    status_filter: Optional[DeploymentStatus] = Query(default=None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """
    List deployments in scope, most recent deployment time first.

    Args:
        search: Matches release name, version, notes, ticket number,
            driver name and environment/status labels
    """
    return deployment_service.list(
        db,
        ctx,
        include_archived=include_archived,
        search=search,
        filters={"environment": environment, "status": status_filter},
        skip=skip,
        limit=limit,
    )


@router.get("/{deployment_id}", response_model=DeploymentResponse)
def get_deployment(
    deployment_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.get(db, ctx, deployment_id)


@router.put("/{deployment_id}", response_model=DeploymentResponse)
def update_deployment(
    deployment_id: int,
    data: DeploymentUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.update(db, ctx, deployment_id, data)


@router.patch("/{deployment_id}/status", response_model=DeploymentResponse)
def update_deployment_status(
    deployment_id: int,
    data: DeploymentStatusUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.update_status(db, ctx, deployment_id, data.status)


@router.post("/{deployment_id}/archive", response_model=DeploymentResponse)
def archive_deployment(
    deployment_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.archive(db, ctx, deployment_id)


@router.post("/{deployment_id}/unarchive", response_model=DeploymentResponse)
def unarchive_deployment(
    deployment_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.unarchive(db, ctx, deployment_id)


@router.get("/{deployment_id}/comments", response_model=List[DeploymentCommentResponse])
def get_deployment_comments(
    deployment_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.list_comments(db, ctx, deployment_id)


@router.get("/{deployment_id}/comments/count", response_model=CountResponse)
def count_deployment_comments(
    deployment_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return CountResponse(count=deployment_service.count_comments(db, ctx, deployment_id))


@router.post(
    "/{deployment_id}/comments",
    response_model=DeploymentCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_deployment_comment(
    deployment_id: int,
    data: DeploymentCommentCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return deployment_service.add_comment(db, ctx, deployment_id, data.comment_text)
