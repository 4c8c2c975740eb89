from sqlmodel import create_engine, SQLModel
from prwarden.utils.logger import logger
from prwarden.config import settings

engine = None


def get_engine():
    global engine

    if engine is None:
        logger.info("Database engine is not initialized. Creating a new one.")
        database_url = settings.DATABASE_URL
        connect_args = {}
        if database_url.startswith("sqlite"):
            logger.info("Using SQLite database.")
            # This prevents 'ProgrammingError: SQLite objects created in a thread can only be used in that same thread'
            connect_args["check_same_thread"] = False
        else:
            logger.info("Using a non-SQLite database (e.g., PostgreSQL).")

        engine = create_engine(
            database_url, echo=settings.DEBUG_MODE, connect_args=connect_args
        )
        logger.info("Database engine created successfully.")
    return engine


def create_db_and_tables(db_engine=None) -> None:
    """Create missing tables. Production databases are managed by Alembic."""
    # Registers the table models on SQLModel.metadata
    from prwarden.models import review_record  # noqa: F401

    SQLModel.metadata.create_all(db_engine or get_engine())
