"""
Additive, idempotent schema alignment run once at startup.

The database is brought in line with the models by a flat list of steps:
missing tables are created from their SQLAlchemy definitions and missing
columns are added with ALTER TABLE. Each step checks the catalog first and
only issues DDL when something is absent, so running the reconciler against
an up-to-date database changes nothing.

Steps are independent. A failing step is logged and recorded in the report,
and the remaining steps still run. There is no version table and nothing is
ever dropped or rolled back.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.types import TypeEngine

from teamcomm.core.logging_config import logger
from teamcomm.database import SCHEMA, Base


@dataclass(frozen=True)
class ColumnSpec:
    """
    A column that must exist on an existing table.

    Args:
        table: Table name, without schema
        column: Column name
        type_: SQLAlchemy type, compiled for the connected dialect
        default: SQL default expression, used verbatim
        index_name: Index to create on the column once it exists
    """

    table: str
    column: str
    type_: TypeEngine
    default: Optional[str] = None
    index_name: Optional[str] = None

    @property
    def name(self) -> str:
        return f"column {self.table}.{self.column}"


@dataclass(frozen=True)
class TableSpec:
    """A table that must exist, created from its SQLAlchemy definition."""

    table: sa.Table

    @property
    def name(self) -> str:
        return f"table {self.table.name}"


@dataclass
class ReconciliationReport:
    applied: List[str] = field(default_factory=list)
    present: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


# Columns added after the first release. Tables created from the current
# models already have them; older databases get them through ALTER TABLE.
EXPECTED_COLUMNS: List[ColumnSpec] = [
    ColumnSpec("announcements", "is_archived", sa.Boolean(), default="false", index_name="idx_announcements_archived"),
    ColumnSpec("announcements", "expiration_date", sa.DateTime(timezone=True)),
    ColumnSpec("target_dates", "is_archived", sa.Boolean(), default="false", index_name="idx_target_dates_archived"),
    ColumnSpec("target_dates", "documentation_url", sa.String(500)),
    ColumnSpec("deployments", "is_archived", sa.Boolean(), default="false", index_name="idx_deployments_archived"),
    ColumnSpec("deployments", "ticket_number", sa.String(50), index_name="idx_deployments_ticket_number"),
    ColumnSpec("deployments", "documentation_url", sa.String(500)),
    ColumnSpec("users", "last_login", sa.DateTime(timezone=True)),
]


def expected_tables() -> List[TableSpec]:
    """Every mapped table in the schema, in foreign-key dependency order."""
    # Registers all mappers on Base.metadata
    import teamcomm.models  # noqa: F401

    return [TableSpec(table) for table in Base.metadata.sorted_tables if table.schema == SCHEMA]


class SchemaReconciler:
    """
    Bring the database schema up to date without migrations.

    Example:
        report = SchemaReconciler(engine).run()
        if not report.ok:
            logger.warning(f"Schema steps failed: {report.failed}")
    """

    def __init__(
        self,
        engine: Engine,
        schema: str = SCHEMA,
        tables: Optional[Sequence[TableSpec]] = None,
        columns: Optional[Sequence[ColumnSpec]] = None,
    ):
        self.engine = engine
        self.schema = schema
        self.tables = list(tables) if tables is not None else expected_tables()
        self.columns = list(columns) if columns is not None else list(EXPECTED_COLUMNS)

    @property
    def _is_postgresql(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    def run(self) -> ReconciliationReport:
        """
        Run every step: schema, tables, then columns.

        Returns:
            Report listing applied, already present and failed steps
        """
        report = ReconciliationReport()
        logger.info(f"Reconciling schema {self.schema}")

        self._step(report, f"schema {self.schema}", self.ensure_schema)
        for wanted in self.tables:
            self._step(report, wanted.name, lambda wanted=wanted: self.ensure_table(wanted))
        for wanted in self.columns:
            self._step(report, wanted.name, lambda wanted=wanted: self.ensure_column(wanted))

        logger.info(
            f"Schema reconciliation finished: applied={len(report.applied)}, "
            f"present={len(report.present)}, failed={len(report.failed)}"
        )
        return report

    def _step(self, report: ReconciliationReport, name: str, action) -> None:
        try:
            changed = action()
        except SQLAlchemyError as e:
            logger.error(f"Schema step failed, skipping: {name}: {type(e).__name__}: {str(e)}")
            report.failed.append(name)
            return

        if changed:
            report.applied.append(name)
        else:
            report.present.append(name)

    def ensure_schema(self) -> bool:
        """Create the schema on PostgreSQL. SQLite attaches it on connect."""
        if not self._is_postgresql:
            return False
        with self.engine.begin() as conn:
            exists = conn.execute(
                sa.text("SELECT 1 FROM information_schema.schemata WHERE schema_name = :schema"),
                {"schema": self.schema},
            ).first()
            if exists:
                return False
            conn.execute(sa.text(f"CREATE SCHEMA IF NOT EXISTS {self.schema}"))
        logger.info(f"Created schema {self.schema}")
        return True

    def ensure_table(self, wanted: TableSpec) -> bool:
        """
        Create the table, with its indexes and constraints, if it is missing.

        Returns:
            True if the table was created
        """
        with self.engine.begin() as conn:
            if self._table_exists(conn, wanted.table.name):
                logger.debug(f"Table {self.schema}.{wanted.table.name} already exists")
                return False
            wanted.table.create(conn)
        logger.info(f"Created table {self.schema}.{wanted.table.name}")
        return True

    def ensure_column(self, wanted: ColumnSpec) -> bool:
        """
        Add the column, and its index, if the column is missing.

        Returns:
            True if the column was added
        """
        with self.engine.begin() as conn:
            if self._column_exists(conn, wanted.table, wanted.column):
                logger.debug(f"Column {self.schema}.{wanted.table}.{wanted.column} already exists")
                return False

            col_type = wanted.type_.compile(dialect=conn.dialect)
            ddl = f"ALTER TABLE {self.schema}.{wanted.table} ADD COLUMN {wanted.column} {col_type}"
            if wanted.default is not None:
                ddl += f" DEFAULT {wanted.default}"
            conn.execute(sa.text(ddl))

            if wanted.index_name:
                target = sa.Table(wanted.table, sa.MetaData(), sa.Column(wanted.column), schema=self.schema)
                sa.Index(wanted.index_name, target.c[wanted.column]).create(conn, checkfirst=True)

        logger.info(f"Added column {self.schema}.{wanted.table}.{wanted.column} ({col_type})")
        return True

    def _table_exists(self, conn: Connection, table: str) -> bool:
        if self._is_postgresql:
            row = conn.execute(
                sa.text(
                    "SELECT 1 FROM information_schema.tables "
                    "WHERE table_schema = :schema AND table_name = :table"
                ),
                {"schema": self.schema, "table": table},
            ).first()
            return row is not None
        return sa.inspect(conn).has_table(table, schema=self.schema)

    def _column_exists(self, conn: Connection, table: str, column: str) -> bool:
        if self._is_postgresql:
            row = conn.execute(
                sa.text(
                    "SELECT 1 FROM information_schema.columns "
                    "WHERE table_schema = :schema AND table_name = :table AND column_name = :column"
                ),
                {"schema": self.schema, "table": table, "column": column},
            ).first()
            return row is not None
        columns = sa.inspect(conn).get_columns(table, schema=self.schema)
        return any(c["name"] == column for c in columns)
