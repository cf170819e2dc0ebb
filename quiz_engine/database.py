"""Database configuration for the durable key-value store."""

from quiz_engine.config import DATABASE_URL
from sqlmodel import SQLModel, create_engine

# check_same_thread only applies to SQLite
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

# echo=False to avoid noisy logs; toggle for debugging
engine = create_engine(DATABASE_URL, echo=False, connect_args=_connect_args)


def create_db_and_tables(bind=None) -> None:
    """Create database tables based on SQLModel metadata."""
    # Table models must be imported so they register on the metadata
    import quiz_engine.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
