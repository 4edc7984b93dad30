import enum
from typing import Dict, Optional, Tuple

from sqlalchemy import Enum


class DisplayEnum(str, enum.Enum):
    """String enum with a human-readable label and a UI color."""

    @property
    def display_name(self) -> str:
        return _METADATA[type(self).__name__][self.value][0]

    @property
    def color_code(self) -> Optional[str]:
        return _METADATA[type(self).__name__][self.value][1]


class Priority(DisplayEnum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class TargetDateStatus(DisplayEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Environment(DisplayEnum):
    DEV = "DEV"
    STAGING = "STAGING"
    PRODUCTION = "PRODUCTION"


class DeploymentStatus(DisplayEnum):
    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    ROLLED_BACK = "ROLLED_BACK"


class UserRole(DisplayEnum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    USER = "USER"


_METADATA: Dict[str, Dict[str, Tuple[str, Optional[str]]]] = {
    "Priority": {
        "LOW": ("Low", "#4CAF50"),
        "NORMAL": ("Normal", "#2196F3"),
        "HIGH": ("High", "#FF9800"),
        "URGENT": ("Urgent", "#F44336"),
    },
    "TargetDateStatus": {
        "PENDING": ("Pending", "#2196F3"),
        "IN_PROGRESS": ("In Progress", "#FF9800"),
        "COMPLETED": ("Completed", "#4CAF50"),
        "CANCELLED": ("Cancelled", "#F44336"),
    },
    "Environment": {
        "DEV": ("Development", "#4CAF50"),
        "STAGING": ("Staging", "#FF9800"),
        "PRODUCTION": ("Production", "#F44336"),
    },
    "DeploymentStatus": {
        "PLANNED": ("Planned", "#2196F3"),
        "IN_PROGRESS": ("In Progress", "#FF9800"),
        "COMPLETED": ("Completed", "#4CAF50"),
        "FAILED": ("Failed", "#F44336"),
        "ROLLED_BACK": ("Rolled Back", "#9C27B0"),
    },
    "UserRole": {
        "SUPER_ADMIN": ("Super Admin", None),
        "ADMIN": ("Admin", None),
        "USER": ("User", None),
    },
}

# Shown to clients through /api/enums
DISPLAY_ENUMS = {
    "priority": Priority,
    "target_date_status": TargetDateStatus,
    "environment": Environment,
    "deployment_status": DeploymentStatus,
    "user_role": UserRole,
}


def enum_type(enum_cls, constraint_name: str) -> Enum:
    """VARCHAR column guarded by a named CHECK constraint instead of a native enum."""
    return Enum(enum_cls, native_enum=False, create_constraint=True, length=20, name=constraint_name)
