from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teamcomm.core.scope import AuthContext, Principal
from teamcomm.database import get_db
from teamcomm.dependencies import get_auth_context, get_auth_service, get_current_principal
from teamcomm.schemas.auth import ChangePasswordRequest, LoginRequest, LoginResponse
from teamcomm.schemas.user import UserResponse
from teamcomm.services.auth import AuthService

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service)
):
    """
    Verify credentials and open a session.

    The returned session_token goes into the Authorization header as
    "Bearer <token>" on every following request.

    Raises:
        401: If the credentials are wrong or the account is inactive
    """
    result = auth.authenticate(db, credentials.username, credentials.password)
    return LoginResponse(
        session_token=result.session.session_token,
        expires_at=result.session.expires_at,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service)
):
    if ctx.session_token:
        auth.logout(db, ctx.session_token)
    return None


@router.get("/me", response_model=UserResponse)
def me(principal: Principal = Depends(get_current_principal)):
    return principal.user


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
    auth: AuthService = Depends(get_auth_service)
):
    auth.change_password(db, ctx, data.current_password, data.new_password)
    return None
