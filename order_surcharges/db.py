"""
Database connection management.

The only table owned by this package is the system config table read by
services.settings.SystemConfigProvider. Carts are not stored here.

Environment variables:
    - DATABASE_URL: SQLAlchemy connection URL (see config.py)
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from .config import DATABASE_URL
from .models import Base

engine = create_engine(
    DATABASE_URL,
    pool_pre_ping=True,
    echo=False,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def init_db() -> None:
    """Create the system config table if it does not exist."""
    Base.metadata.create_all(bind=engine)
