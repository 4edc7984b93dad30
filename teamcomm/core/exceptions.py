"""
Error taxonomy shared by every layer.

Services raise these instead of HTTPException so the same operations can be
driven from scripts and tests. main.py registers one handler per class and
maps each to its HTTP status code.

    raise NotFoundError(resource="Announcement", resource_id=42)
    raise ValidationError("Workspace is required", field="workspace_id")
"""
import re
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError


class TeamCommError(Exception):
    """Base class for all application errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "detail": self.message}


class ConfigurationError(TeamCommError):
    """Configuration file missing or unreadable. Fatal at startup."""


class DatabaseUnavailableError(TeamCommError):
    """The database could not be reached. Fatal at startup."""

    status_code = 503


class PersistenceError(TeamCommError):
    """A statement failed for a reason other than a constraint violation."""


class AuthorizationError(TeamCommError):
    """
    The caller is not allowed to perform the operation.

    Raised before any mutation, so a rejected write leaves the row untouched.
    """

    status_code = 403


class AuthenticationError(AuthorizationError):
    """
    The session behind the request is missing, expired or logged out.

    Subclasses AuthorizationError so callers that only care about "denied"
    can catch one type, while a UI can still tell the user to log in again.
    """

    status_code = 401


class NotFoundError(TeamCommError):
    """
    Raised when a record does not exist within the caller's scope.

    Used for both genuinely missing records and records owned by another
    workspace, so a read never confirms that a foreign record exists.

    Args:
        resource: Entity name (e.g. "Deployment")
        resource_id: The key that was looked up
    """

    status_code = 404

    def __init__(self, resource: str, resource_id: Optional[Any] = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(TeamCommError):
    """
    Input violated a business rule or a database constraint.

    Args:
        message: Human-readable explanation
        field: Offending field, when known
        constraint: Name of the violated database constraint, when known
    """

    status_code = 422

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        constraint: Optional[str] = None,
    ) -> None:
        self.field = field
        self.constraint = constraint
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        if self.constraint:
            data["constraint"] = self.constraint
        return data


class ConflictError(ValidationError):
    """A unique value is already taken."""

    status_code = 409


_SQLITE_CHECK = re.compile(r"CHECK constraint failed: (\w+)")
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: ([\w.]+)")
_SQLITE_NOT_NULL = re.compile(r"NOT NULL constraint failed: ([\w.]+)")


def translate_integrity_error(exc: IntegrityError) -> ValidationError:
    """
    Turn a driver IntegrityError into a ValidationError naming the constraint.

    PostgreSQL exposes the constraint through psycopg2 diagnostics; SQLite only
    puts it into the message text.

    Args:
        exc: The error raised on flush or commit

    Returns:
        ValidationError (ConflictError for unique violations)
    """
    orig = exc.orig
    diag = getattr(orig, "diag", None)
    if diag is not None:
        constraint = getattr(diag, "constraint_name", None)
        column = getattr(diag, "column_name", None)
        pgcode = getattr(orig, "pgcode", None)
        detail = getattr(diag, "message_detail", None) or str(orig).strip()
        if pgcode == "23505":
            return ConflictError(f"Duplicate value: {detail}", field=column, constraint=constraint)
        return ValidationError(f"Constraint violated: {detail}", field=column, constraint=constraint)

    text = str(orig)
    match = _SQLITE_UNIQUE.search(text)
    if match:
        field = match.group(1).split(",")[0].split(".")[-1]
        return ConflictError(f"Duplicate value for {field}", field=field)
    match = _SQLITE_CHECK.search(text)
    if match:
        return ValidationError(f"Constraint violated: {match.group(1)}", constraint=match.group(1))
    match = _SQLITE_NOT_NULL.search(text)
    if match:
        field = match.group(1).split(".")[-1]
        return ValidationError(f"{field} is required", field=field)
    return ValidationError(f"Constraint violated: {text}")
