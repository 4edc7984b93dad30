"""Pytest configuration and fixtures."""

import os

# Keep bcrypt fast; must be set before passwords are hashed
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import timedelta
from types import SimpleNamespace

import pytest

from teamcomm.core.schema_reconciler import SchemaReconciler
from teamcomm.core.scope import AuthContext
from teamcomm.core.security import utcnow
from teamcomm.crud import user as user_crud
from teamcomm.crud import workspace as workspace_crud
from teamcomm.database import create_db_engine, create_session_factory
from teamcomm.models.enums import UserRole
from teamcomm.services.auth import AuthService

PASSWORD = "secret123"


@pytest.fixture
def engine():
    """In-memory SQLite database with the team_comm schema built by the reconciler."""
    engine = create_db_engine("sqlite://")
    report = SchemaReconciler(engine).run()
    assert report.ok, report.failed
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    """Engineering and Marketing workspaces with one user per role."""
    engineering = workspace_crud.create(db, name="Engineering", description=None, actor_id=None)
    marketing = workspace_crud.create(db, name="Marketing", description=None, actor_id=None)

    def add(username, role, workspace):
        return user_crud.create(
            db,
            username=username,
            password=PASSWORD,
            full_name=username.replace("_", " ").title(),
            role=role,
            workspace_id=workspace.id if workspace else None,
        )

    return SimpleNamespace(
        engineering=engineering,
        marketing=marketing,
        sys_admin=add("sys_admin", UserRole.SUPER_ADMIN, None),
        eng_admin=add("eng_admin", UserRole.ADMIN, engineering),
        jdoe=add("jdoe", UserRole.USER, engineering),
        msmith=add("msmith", UserRole.USER, marketing),
    )


@pytest.fixture
def auth():
    return AuthService()


@pytest.fixture
def login(db, seeded, auth):
    """Log a seeded user in and return the AuthContext for their session."""

    def _login(username, workspace_id=None):
        result = auth.authenticate(db, username, PASSWORD)
        return AuthContext(session_token=result.session.session_token, selected_workspace_id=workspace_id)

    return _login


@pytest.fixture
def expire_session(db):
    """Move a session's expiry into the past."""
    from teamcomm.crud import user_session as user_session_crud

    def _expire(ctx):
        session = user_session_crud.get_by_token(db, ctx.session_token)
        session.expires_at = utcnow() - timedelta(minutes=1)
        db.commit()
        return session

    return _expire
