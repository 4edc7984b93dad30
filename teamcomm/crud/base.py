from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from teamcomm.core.exceptions import PersistenceError, translate_integrity_error
from teamcomm.core.logging_config import logger
from teamcomm.core.security import utcnow
from teamcomm.database import Base

if TYPE_CHECKING:
    from teamcomm.core.scope import WorkspaceFilter

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching `term` literally anywhere in the value."""
    escaped = term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", r"\%").replace("_", r"\_")
    return f"%{escaped}%"


def commit_or_raise(db: Session) -> None:
    """
    Commit the session, translating driver errors into the error taxonomy.

    The session is rolled back on failure so it can be reused.

    Raises:
        ValidationError: On a constraint violation (names the constraint)
        PersistenceError: On any other database error
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        error = translate_integrity_error(e)
        logger.warning(f"Constraint violation: {error.message}")
        raise error from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error: {type(e).__name__}: {str(e)}")
        raise PersistenceError(f"Database operation failed: {type(e).__name__}") from e


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Generic CRUD class for workspace-owned records.

    Every list query is narrowed by a WorkspaceFilter passed in from the
    service layer. Single-row lookups are by id only; the service decides
    whether the row's workspace is in scope.

    Type Parameters:
        ModelType: SQLAlchemy model class with workspace_id and is_archived
        CreateSchemaType: Pydantic schema for creating records
        UpdateSchemaType: Pydantic schema for updating records
    """

    def __init__(
        self,
        model: Type[ModelType],
        *,
        order_by: Sequence[Any],
        search_fields: Sequence[str] = (),
    ):
        """
        Initialize CRUD object with model class.

        Args:
            model: SQLAlchemy model class
            order_by: ORDER BY clauses for list queries, ending with the id
                as a tie-breaker
            search_fields: Text columns matched by free-text search
        """
        self.model = model
        self.order_by = list(order_by)
        self.search_fields = list(search_fields)

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        """
        Retrieve a single record by ID.

        Args:
            db: Database session
            id: Record ID

        Returns:
            Model instance or None if not found
        """
        return db.get(self.model, id)

    def search_clause(self, term: str) -> ColumnElement:
        pattern = contains_pattern(term)
        return or_(*[getattr(self.model, name).ilike(pattern, escape=LIKE_ESCAPE) for name in self.search_fields])

    def scoped_select(self, *, scope: "WorkspaceFilter", include_archived: bool = False) -> Select:
        stmt = scope.apply(select(self.model), self.model)
        if not include_archived:
            stmt = stmt.where(self.model.is_archived.is_(False))
        return stmt

    def get_multi(
        self,
        db: Session,
        *,
        scope: "WorkspaceFilter",
        include_archived: bool = False,
        filters: Optional[Dict[str, Any]] = None,
        search: Optional[str] = None,
        clauses: Sequence[ColumnElement] = (),
        order_by: Optional[Sequence[Any]] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        Retrieve records in scope, in the model's natural order.

        Args:
            db: Database session
            scope: Workspace filter of the caller
            include_archived: Also return archived records
            filters: Exact-match column filters; None values are ignored
            search: Case-insensitive substring matched against search_fields
            clauses: Additional WHERE clauses
            order_by: Overrides the default ordering
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of model instances
        """
        stmt = self.scoped_select(scope=scope, include_archived=include_archived)
        for name, value in (filters or {}).items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, name) == value)
        if search and search.strip() and self.search_fields:
            stmt = stmt.where(self.search_clause(search.strip()))
        for clause in clauses:
            stmt = stmt.where(clause)
        stmt = stmt.order_by(*(order_by if order_by is not None else self.order_by))
        stmt = stmt.offset(skip).limit(limit)
        result = db.execute(stmt)
        return list(result.scalars().all())

    def create(
        self,
        db: Session,
        *,
        obj_in: CreateSchemaType,
        workspace_id: int,
        actor_id: Optional[int]
    ) -> ModelType:
        """
        Create a new record owned by a workspace.

        Args:
            db: Database session
            obj_in: Pydantic schema with creation data
            workspace_id: Owning workspace, already resolved by the policy
            actor_id: User creating the record

        Returns:
            Created model instance
        """
        obj_data = obj_in.model_dump(exclude={"workspace_id"})
        db_obj = self.model(
            workspace_id=workspace_id,
            created_by=actor_id,
            updated_by=actor_id,
            **obj_data
        )
        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any],
        actor_id: Optional[int],
        now: Optional[datetime] = None
    ) -> ModelType:
        """
        Update an existing record and stamp updated_at/updated_by.

        Note: This method assumes the caller already checked that db_obj is
        in scope.

        Args:
            db: Database session
            db_obj: Existing model instance to update
            obj_in: Pydantic schema or dict with update data
            actor_id: User making the change
            now: Timestamp to record, defaults to the current time

        Returns:
            Updated model instance
        """
        if isinstance(obj_in, dict):
            update_data = dict(obj_in)
        else:
            update_data = obj_in.model_dump(exclude_unset=True)

        # Ownership never moves through an update
        update_data.pop("workspace_id", None)

        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db_obj.updated_by = actor_id
        db_obj.updated_at = now or utcnow()

        db.add(db_obj)
        commit_or_raise(db)
        db.refresh(db_obj)
        return db_obj

    def set_archived(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        archived: bool,
        actor_id: Optional[int]
    ) -> ModelType:
        """
        Archive or restore a record.

        Setting the flag to the value it already has changes nothing, so
        repeated archive calls leave the audit stamps alone.
        """
        if bool(db_obj.is_archived) == archived:
            return db_obj
        return self.update(db, db_obj=db_obj, obj_in={"is_archived": archived}, actor_id=actor_id)
