"""
Database Package

Provides SQLAlchemy async session management, model definitions and the
option store for PostgreSQL.
"""

from .session import get_async_session, async_engine, AsyncSessionLocal, init_models
from .models import Base, Option
from .option_store import SqlOptionStore

__all__ = [
    "get_async_session",
    "async_engine",
    "AsyncSessionLocal",
    "init_models",
    "Base",
    "Option",
    "SqlOptionStore",
]
