from typing import Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from teamcomm.core.config import Settings
from teamcomm.core.exceptions import DatabaseUnavailableError
from teamcomm.core.logging_config import logger
from teamcomm.core.schema_reconciler import ReconciliationReport, SchemaReconciler
from teamcomm.database import create_db_engine, create_session_factory


def check_connection(engine: Engine) -> None:
    """
    Make sure the database answers before anything else runs.

    Raises:
        DatabaseUnavailableError: If a connection cannot be opened
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {type(e).__name__}: {str(e)}")
        raise DatabaseUnavailableError(f"Cannot connect to the database: {type(e).__name__}") from e
    logger.info("Database connected successfully")


def init_database(
    settings: Settings,
    engine: Optional[Engine] = None,
) -> Tuple[Engine, sessionmaker, ReconciliationReport]:
    """
    Startup sequence: connect, reconcile the schema, hand out sessions.

    Args:
        settings: Loaded settings
        engine: Existing engine to use instead of creating one

    Returns:
        (engine, session factory, reconciliation report)

    Raises:
        DatabaseUnavailableError: If the database cannot be reached
    """
    if engine is None:
        engine = create_db_engine(settings.database_url(), pool=settings.database)
    check_connection(engine)

    report = SchemaReconciler(engine).run()
    if not report.ok:
        logger.warning(f"Schema reconciliation left {len(report.failed)} steps unapplied: {report.failed}")

    return engine, create_session_factory(engine), report
