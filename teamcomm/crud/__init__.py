from teamcomm.crud.base import CRUDBase
from .announcement import announcement
from .deployment import deployment
from .deployment_comment import deployment_comment
from .target_date import target_date
from .user import user
from .user_session import user_session
from .workspace import workspace

__all__ = [
    "CRUDBase",
    "announcement",
    "deployment",
    "deployment_comment",
    "target_date",
    "user",
    "user_session",
    "workspace",
]
