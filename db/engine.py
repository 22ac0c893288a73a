"""
SQLAlchemy engine and session factory.

The engine is created on first use so that importing the models (for
Alembic or for tests that run on the in-memory stores) does not require a
reachable database driver.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import Config


class Base(DeclarativeBase):
    """Base class for all models."""


_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get the SQLAlchemy engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_engine(
            Config.DATABASE_URL,
            pool_pre_ping=True,  # Verify connections before use
            pool_size=10,
            max_overflow=20,
            echo=Config.DB_ECHO,
        )
    return _engine


def SessionLocal() -> Session:
    """Open a new ORM session bound to the shared engine."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=get_engine(),
        )
    return _session_factory()
