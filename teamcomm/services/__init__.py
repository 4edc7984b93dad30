from teamcomm.services.announcement import announcement_service
from teamcomm.services.auth import AuthService
from .deployment import deployment_service
from .target_date import target_date_service
from .user import user_service
from .workspace import workspace_service

__all__ = [
    "announcement_service",
    "AuthService",
    "deployment_service",
    "target_date_service",
    "user_service",
    "workspace_service",
]
