from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from teamcomm.core.exceptions import ValidationError
from teamcomm.core.scope import AuthContext, Principal
from teamcomm.database import get_db
from teamcomm.services.auth import AuthService

WORKSPACE_HEADER = "X-Workspace-Id"


def _bearer_token(request: Request) -> Optional[str]:
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


def _selected_workspace(request: Request) -> Optional[int]:
    raw = request.headers.get(WORKSPACE_HEADER)
    if raw is None or raw.strip() == "" or raw.strip().upper() == "ALL":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{WORKSPACE_HEADER} must be a workspace id or ALL", field=WORKSPACE_HEADER)


def get_auth_context(request: Request) -> AuthContext:
    """
    FastAPI dependency building the caller's AuthContext from headers.

    The session is not checked here; every service call validates it
    through the access policy, so this stays a plain value object.

    Args:
        request: Incoming request with Authorization and X-Workspace-Id headers

    Returns:
        AuthContext
    """
    return AuthContext(
        session_token=_bearer_token(request),
        selected_workspace_id=_selected_workspace(request),
    )


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_current_principal(
    ctx: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
) -> Principal:
    return auth.current_principal(db, ctx)
