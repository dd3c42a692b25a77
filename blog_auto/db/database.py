# /blog_auto/db/database.py

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from ..config import DATABASE_URL

logger = logging.getLogger(__name__)

# Create the SQLAlchemy engine.
# The 'check_same_thread' argument is only needed for SQLite, where the
# background generation task uses its own session on the event loop thread.
engine_args = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {"pool_pre_ping": True}
engine = create_engine(DATABASE_URL, **engine_args)

# Each instance of this class is a database session.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get a DB session. This will be used in our API routers.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Creates any missing tables. Schema migrations are managed outside the app."""
    # Importing the registry makes every model known to Base.metadata.
    from .base import Base
    Base.metadata.create_all(bind=engine)


def check_database() -> bool:
    """Health probe: True when a trivial query round-trips."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return False
