"""
Database module for the councilor portal.

Provides SQLAlchemy models and the engine/session helpers for PostgreSQL
persistence of user accounts.
"""

from db.engine import Base, SessionLocal, get_engine

__all__ = ["get_engine", "SessionLocal", "Base"]
