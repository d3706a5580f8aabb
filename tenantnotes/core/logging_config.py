import logging
import sys
from typing import Optional
from tenantnotes.core.config import settings

def setup_logging(level: Optional[str] = None):
    """
    Configure logging for the notes data layer.

    Sets up logging to stdout with a plain message format. The level
    defaults to the configured log level.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Reduce SQLAlchemy noise in logs
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("tenantnotes")


# Create global logger instance
logger = setup_logging()
