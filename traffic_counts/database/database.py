import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL_ENV = "TRAFFIC_COUNTS_DATABASE_URL"
# Default to a local SQLite file if not specified
DEFAULT_DATABASE_URL = "sqlite:///traffic_counts.db"

Base = declarative_base()


def database_url():
    return os.getenv(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


def create_db_engine(url=None):
    return create_engine(url or database_url(), pool_pre_ping=True)


def create_session_factory(engine):
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine):
    """Initialize database tables."""
    # Import models here to ensure they are registered with Base
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)
