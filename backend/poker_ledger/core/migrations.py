"""Database migration utilities using Alembic."""
from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

from .config import settings
from .db import build_engine

logger = logging.getLogger(__name__)


def get_alembic_config(db_url: str | None = None) -> Config:
    """Get Alembic configuration object."""
    # Backend directory holds alembic.ini and the alembic/ scripts
    backend_dir = Path(__file__).parent.parent.parent
    alembic_ini_path = backend_dir / "alembic.ini"

    if not alembic_ini_path.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini_path}")

    alembic_cfg = Config(str(alembic_ini_path))
    alembic_cfg.set_main_option("script_location", str(backend_dir / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", db_url or settings.DB_URL)

    return alembic_cfg


def run_migrations(db_url: str | None = None) -> None:
    """Run all pending database migrations."""
    try:
        logger.info("Running database migrations...")
        command.upgrade(get_alembic_config(db_url), "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Error running migrations: {e}")
        raise


def stamp_database(revision: str = "head", db_url: str | None = None) -> None:
    """
    Mark the database as being at ``revision`` without running any SQL.

    Useful for databases whose tables were created by ``create_all`` at startup.
    """
    try:
        logger.info(f"Stamping database with revision: {revision}")
        command.stamp(get_alembic_config(db_url), revision)
        logger.info(f"Database stamped successfully with revision: {revision}")
    except Exception as e:
        logger.error(f"Error stamping database: {e}")
        raise


def get_current_revision(db_url: str | None = None) -> str | None:
    """Get the current database revision."""
    try:
        engine = build_engine(db_url or settings.DB_URL)
        with engine.connect() as connection:
            context = MigrationContext.configure(connection)
            return context.get_current_revision()
    except Exception as e:
        logger.warning(f"Could not get current revision: {e}")
        return None
