from .announcement import Announcement
from .deployment import Deployment, DeploymentComment
from .enums import DeploymentStatus, Environment, Priority, TargetDateStatus, UserRole
from .target_date import TargetDate
from .user import User
from .user_session import UserSession
from .workspace import Workspace
