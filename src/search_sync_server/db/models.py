"""
SQLAlchemy Models

Defines the database schema for:
- Options (process-wide key/value configuration and indexing state)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import String, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Option Model
# ---------------------------------------------------------------------

class Option(Base):
    """
    A named option value.

    Holds both static configuration written by operators and the mutable
    bulk-indexing progress state. Values are arbitrary JSON.
    """
    __tablename__ = "option"

    key: Mapped[str] = mapped_column(String(191), primary_key=True)
    value: Mapped[Any] = mapped_column(JSONB, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
