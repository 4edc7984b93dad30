from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamcomm.core.scope import AuthContext
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context
from teamcomm.schemas.user import UserResponse
from teamcomm.schemas.workspace import WorkspaceCreate, WorkspaceResponse, WorkspaceUpdate
from teamcomm.services.workspace import workspace_service

router = APIRouter()


@router.get("", response_model=List[WorkspaceResponse])
def get_workspaces(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """Workspaces the caller can administer."""
    return workspace_service.list_accessible(db, ctx)


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
def create_workspace(
    data: WorkspaceCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return workspace_service.create(db, ctx, data)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
def get_workspace(
    workspace_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return workspace_service.get(db, ctx, workspace_id)


@router.put("/{workspace_id}", response_model=WorkspaceResponse)
def update_workspace(
    workspace_id: int,
    data: WorkspaceUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return workspace_service.update(db, ctx, workspace_id, data)


@router.post("/{workspace_id}/deactivate", response_model=WorkspaceResponse)
def deactivate_workspace(
    workspace_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return workspace_service.deactivate(db, ctx, workspace_id)


@router.get("/{workspace_id}/users", response_model=List[UserResponse])
def get_workspace_users(
    workspace_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return workspace_service.list_users(db, ctx, workspace_id)
