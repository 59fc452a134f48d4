"""Database connection and session management.

This module handles the database connection using SQLAlchemy. SQLite is the
default backend; any SQLAlchemy URL can be supplied through DATABASE_URL.
"""

import logging
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from config import DATABASE_URL
from core.exceptions import ConfigurationError
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def ensure_data_dir() -> None:
    """Create the directory holding a file-backed SQLite database.

    Raises:
        ConfigurationError: If the directory cannot be created.
    """
    url = engine.url
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    try:
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Failed to create data directory for %s: %s", database, e)
        raise ConfigurationError("Database is unreachable") from e


def init_db() -> None:
    """Create tables if they do not exist."""
    ensure_data_dir()
    Base.metadata.create_all(bind=engine)


def check_connection() -> None:
    """Verify the database answers a trivial query.

    Raises:
        ConfigurationError: If the database cannot be reached.
    """
    ensure_data_dir()
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Failed to connect to database: %s", e)
        raise ConfigurationError("Database is unreachable") from e
    logger.info("Connected to database")


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
