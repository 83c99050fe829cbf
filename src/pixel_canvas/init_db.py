"""Create the database schema without running migrations."""

import logging

from pixel_canvas.core.settings import settings
from pixel_canvas.db.session import create_tables

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize the database by creating all tables."""
    create_tables()
    logger.info("Database initialized at %s", settings.database_url)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
