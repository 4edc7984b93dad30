from datetime import datetime, timezone

import sqlalchemy as sa

from teamcomm.core.schema_reconciler import EXPECTED_COLUMNS, ColumnSpec, SchemaReconciler
from teamcomm.core.scope import AuthContext
from teamcomm.crud import user as user_crud
from teamcomm.crud import workspace as workspace_crud
from teamcomm.database import SCHEMA, create_db_engine, create_session_factory
from teamcomm.models.enums import UserRole
from teamcomm.schemas.deployment import DeploymentCreate
from teamcomm.services.auth import AuthService
from teamcomm.services.deployment import deployment_service

# deployments as it looked before archiving, tickets and doc links existed
LEGACY_DEPLOYMENTS_DDL = f"""
CREATE TABLE {SCHEMA}.deployments (
    id INTEGER PRIMARY KEY,
    workspace_id INTEGER NOT NULL,
    release_name VARCHAR(100) NOT NULL,
    version VARCHAR(50) NOT NULL,
    deployment_datetime DATETIME NOT NULL,
    driver_user_id INTEGER,
    release_notes TEXT,
    environment VARCHAR(20) NOT NULL DEFAULT 'PRODUCTION',
    status VARCHAR(20) NOT NULL DEFAULT 'PLANNED',
    created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
    created_by INTEGER,
    updated_by INTEGER
)
"""


def _columns(engine, table):
    return {c["name"]: c for c in sa.inspect(engine).get_columns(table, schema=SCHEMA)}


def _indexes(engine, table):
    return {i["name"] for i in sa.inspect(engine).get_indexes(table, schema=SCHEMA)}


class TestFreshDatabase:
    """Reconciling an empty database."""

    def test_creates_every_table(self, engine):
        tables = set(sa.inspect(engine).get_table_names(schema=SCHEMA))
        assert {
            "workspaces",
            "users",
            "user_sessions",
            "announcements",
            "target_dates",
            "deployments",
            "deployment_comments",
        } <= tables

    def test_created_tables_have_indexes(self, engine):
        assert "idx_announcements_created_at" in _indexes(engine, "announcements")
        assert "idx_target_dates_target_date" in _indexes(engine, "target_dates")
        assert "idx_deployments_ticket_number" in _indexes(engine, "deployments")

    def test_second_run_changes_nothing(self, engine):
        before = {t: _columns(engine, t).keys() for t in ("announcements", "deployments", "users")}

        report = SchemaReconciler(engine).run()

        assert report.applied == []
        assert report.failed == []
        assert len(report.present) >= len(EXPECTED_COLUMNS)
        after = {t: _columns(engine, t).keys() for t in ("announcements", "deployments", "users")}
        assert before == after


class TestLegacyDatabase:
    """Upgrading a database created by an older release."""

    def test_adds_missing_deployment_columns(self):
        engine = create_db_engine("sqlite://")
        try:
            with engine.begin() as conn:
                conn.execute(sa.text(LEGACY_DEPLOYMENTS_DDL))

            report = SchemaReconciler(engine).run()

            assert report.ok
            assert "table deployments" in report.present
            assert "column deployments.ticket_number" in report.applied
            assert "column deployments.is_archived" in report.applied

            columns = _columns(engine, "deployments")
            assert columns["ticket_number"]["nullable"] is True
            assert isinstance(columns["ticket_number"]["type"], sa.String)
            assert columns["ticket_number"]["type"].length == 50
            assert columns["documentation_url"]["type"].length == 500
            assert "idx_deployments_ticket_number" in _indexes(engine, "deployments")
            assert "idx_deployments_archived" in _indexes(engine, "deployments")
        finally:
            engine.dispose()

    def test_new_rows_work_after_upgrade(self):
        engine = create_db_engine("sqlite://")
        try:
            with engine.begin() as conn:
                conn.execute(sa.text(LEGACY_DEPLOYMENTS_DDL))
            SchemaReconciler(engine).run()

            db = create_session_factory(engine)()
            workspace = workspace_crud.create(db, name="Engineering", description=None, actor_id=None)
            user_crud.create(
                db,
                username="jdoe",
                password="secret123",
                full_name="John Doe",
                role=UserRole.USER,
                workspace_id=workspace.id,
            )
            login = AuthService().authenticate(db, "jdoe", "secret123")
            ctx = AuthContext(session_token=login.session.session_token)

            deployment = deployment_service.create(
                db,
                ctx,
                DeploymentCreate(
                    release_name="Platform",
                    version="1.0.0",
                    deployment_datetime=datetime(2026, 1, 1, tzinfo=timezone.utc),
                ),
            )

            assert deployment.workspace_id == workspace.id
            assert deployment.created_by == login.user.id
            row = db.execute(
                sa.text(f"SELECT ticket_number, is_archived FROM {SCHEMA}.deployments WHERE id = :id"),
                {"id": deployment.id},
            ).one()
            assert row.ticket_number is None
            assert not row.is_archived
            assert [d.id for d in deployment_service.list(db, ctx)] == [deployment.id]
            db.close()
        finally:
            engine.dispose()

    def test_rows_from_before_upgrade_get_default(self):
        engine = create_db_engine("sqlite://")
        try:
            with engine.begin() as conn:
                conn.execute(sa.text(LEGACY_DEPLOYMENTS_DDL))
                conn.execute(sa.text(
                    f"INSERT INTO {SCHEMA}.deployments (workspace_id, release_name, version, deployment_datetime) "
                    "VALUES (1, 'Old', '0.1', '2020-01-01 00:00:00')"
                ))
            SchemaReconciler(engine).run()

            with engine.connect() as conn:
                row = conn.execute(sa.text(f"SELECT is_archived, ticket_number FROM {SCHEMA}.deployments")).one()
            assert not row.is_archived
            assert row.ticket_number is None
        finally:
            engine.dispose()


class TestStepIsolation:
    """A failing step never stops the others."""

    def test_failure_is_reported_and_skipped(self, engine):
        reconciler = SchemaReconciler(
            engine,
            tables=[],
            columns=[
                ColumnSpec("no_such_table", "x", sa.String(10)),
                ColumnSpec("users", "nickname", sa.String(30)),
            ],
        )

        report = reconciler.run()

        assert report.failed == ["column no_such_table.x"]
        assert "column users.nickname" in report.applied
        assert "nickname" in _columns(engine, "users")

    def test_ensure_column_is_idempotent(self, engine):
        reconciler = SchemaReconciler(engine, tables=[], columns=[])
        wanted = ColumnSpec("announcements", "pinned", sa.Boolean(), default="false")

        assert reconciler.ensure_column(wanted) is True
        assert reconciler.ensure_column(wanted) is False
