from pathlib import Path
from typing import Optional, Union

from fastapi import Request
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, create_engine, event, func
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import DeclarativeBase, declared_attr, sessionmaker
from sqlalchemy.pool import StaticPool

from teamcomm.core.config import DatabaseSettings
from teamcomm.core.logging_config import logger
from teamcomm.core.security import utcnow

SCHEMA = "team_comm"

# SQLite only autoincrements INTEGER PRIMARY KEY columns
ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)


class AuditMixin(TimestampMixin):
    """Timestamps plus the ids of the users who created and last changed the row."""

    @declared_attr
    def created_by(cls):
        return Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id"), nullable=True)

    @declared_attr
    def updated_by(cls):
        return Column(ID_TYPE, ForeignKey(f"{SCHEMA}.users.id"), nullable=True)


def _attach_sqlite_schema(engine: Engine, url: URL) -> None:
    """
    Emulate the team_comm schema on SQLite by attaching a second database.

    An in-memory main database gets an in-memory schema; a file database
    gets a sibling file named after the schema.
    """
    database = url.database or ""
    if database in ("", ":memory:"):
        target = ":memory:"
    else:
        path = Path(database)
        target = str(path.with_name(f"{path.stem}_{SCHEMA}{path.suffix or '.db'}"))

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute(f"ATTACH DATABASE '{target}' AS {SCHEMA}")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(
    database: Union[DatabaseSettings, URL, str],
    pool: Optional[DatabaseSettings] = None,
) -> Engine:
    """
    Create the connection pool for the configured database.

    Args:
        database: DatabaseSettings, or a url for scripts and tests
        pool: Pool sizing, defaults to the DatabaseSettings defaults

    Returns:
        SQLAlchemy Engine
    """
    if isinstance(database, DatabaseSettings):
        url = database.sqlalchemy_url()
        pool = pool or database
    else:
        url = make_url(database)
        pool = pool or DatabaseSettings()

    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=False, future=True, **kwargs)
        _attach_sqlite_schema(engine, url)
    else:
        engine = create_engine(
            url,
            pool_pre_ping=True,                 # Test connections before using
            pool_size=pool.pool_size,           # Base connection pool size
            max_overflow=pool.max_overflow,     # Max connections beyond pool_size
            pool_timeout=pool.pool_timeout,     # Timeout for getting connection (seconds)
            pool_recycle=pool.pool_recycle,     # Recycle connections
            echo=False,
            future=True,
        )

    logger.info(f"Database engine created for {url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
        future=True,
    )


def get_db(request: Request):
    """Yield a session from the factory the application created at startup."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
