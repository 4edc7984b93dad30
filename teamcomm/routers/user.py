from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamcomm.core.logging_config import logger
from teamcomm.core.scope import AuthContext
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context
from teamcomm.schemas.user import PasswordReset, UserCreate, UserResponse, UserUpdate
from teamcomm.services.user import user_service

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def get_users(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    """Users the caller can manage."""
    return user_service.list_manageable(db, ctx)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    try:
        logger.info(f"Creating user: username={data.username}, role={data.role.value}")
        return user_service.create_user(db, ctx, data)
    except Exception as e:
        logger.error(f"Error creating user: {type(e).__name__}: {str(e)}")
        raise


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    data: UserUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return user_service.update_user(db, ctx, user_id, data)


@router.post("/{user_id}/deactivate", response_model=UserResponse)
def deactivate_user(
    user_id: int,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    return user_service.deactivate_user(db, ctx, user_id)


@router.post("/{user_id}/reset-password", status_code=status.HTTP_204_NO_CONTENT)
def reset_password(
    user_id: int,
    data: PasswordReset,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context)
):
    user_service.reset_password(db, ctx, user_id, data.new_password)
    return None
