"""Database connection and session management.

This module handles the database connection using SQLAlchemy.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from eduhub.config import DATA_DIR, DATABASE_URL, DATABASE_ECHO
from eduhub.models.base import Base
# Import models to ensure they are registered with Base.metadata
import eduhub.models  # noqa: F401

connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args, echo=DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    if DATABASE_URL.startswith("sqlite:///") and bind is None:
        # Ensure data directory exists
        DATA_DIR.mkdir(parents=True, exist_ok=True)
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
