import logging
import os
import sys


def setup_logging():
    """
    Configure logging for the application.

    Logs go to stdout so the process can run under a container runtime or a
    plain terminal without extra handlers. The level comes from LOG_LEVEL.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("teamcomm")


# Create global logger instance
logger = setup_logging()
